import pytest
from fastapi import WebSocketDisconnect

from app.errors import StoreError
from app.services.chat_relay_service import chat_relay_service
from conftest import auth_header

INVENTORY = auth_header("inventory", 1)
ROOM = "supplier-1"


def _socket_url(role="inventory", user_id=1, room=ROOM):
    token = auth_header(role, user_id)["Authorization"].split(" ", 1)[1]
    return f"/ws/chat/{room}?token={token}"


class TestChatHistory:

    def test_send_then_read_history(self, client):
        for text in ("Order 12 is loaded", "Thanks, expecting it tomorrow"):
            response = client.post(
                "/api/inventory/chat/send",
                json={"room_id": ROOM, "sender": "Inventory", "message": text},
                headers=INVENTORY
            )
            assert response.status_code == 201

        history = client.get(f"/api/inventory/chat/{ROOM}/messages", headers=INVENTORY).json()

        assert [m["message"] for m in history] == ["Order 12 is loaded", "Thanks, expecting it tomorrow"]
        assert client.get("/api/inventory/chat/other-room/messages", headers=INVENTORY).json() == []

    def test_missing_fields(self, client):
        response = client.post("/api/inventory/chat/send", json={"room_id": ROOM, "sender": "Inventory"}, headers=INVENTORY)

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required fields"

    def test_passengers_cannot_read_chat(self, client):
        response = client.get(f"/api/inventory/chat/{ROOM}/messages", headers=auth_header("passenger", 1001))

        assert response.status_code == 403


class TestChatSocket:

    def test_socket_without_token_is_refused(self, client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(f"/ws/chat/{ROOM}"):
                pass

        assert exc_info.value.code == 1008

    def test_socket_with_wrong_role_is_refused(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(_socket_url(role="crew")):
                pass

    def test_message_is_relayed_and_stored(self, client):
        with client.websocket_connect(_socket_url("supplier", 1)) as receiver:
            with client.websocket_connect(_socket_url("inventory", 1)) as sender:
                sender.send_json({"sender": "Inventory", "message": "Please confirm the diesel order"})

                relayed = receiver.receive_json()
                assert relayed["sender"] == "Inventory"
                assert relayed["message"] == "Please confirm the diesel order"
                assert "timestamp" in relayed

                # Frames are handled in order, so the error reply means the first one was stored
                sender.send_json({"message": "no sender"})
                assert sender.receive_json() == {"error": "sender and message are required"}

        history = client.get(f"/api/inventory/chat/{ROOM}/messages", headers=INVENTORY).json()
        assert [m["message"] for m in history] == ["Please confirm the diesel order"]

    def test_http_message_reaches_open_sockets(self, client):
        with client.websocket_connect(_socket_url("supplier", 1)) as receiver:
            client.post(
                "/api/inventory/chat/send",
                json={"room_id": ROOM, "sender": "Inventory", "message": "Stock count at 4pm"},
                headers=INVENTORY
            )

            assert receiver.receive_json()["message"] == "Stock count at 4pm"

    def test_storage_failure_keeps_socket_open(self, client, monkeypatch):
        def broken_save(*args, **kwargs):
            raise StoreError("database is locked")

        monkeypatch.setattr(chat_relay_service, "save_message", broken_save)

        with client.websocket_connect(_socket_url("supplier", 1)) as receiver:
            with client.websocket_connect(_socket_url("inventory", 1)) as sender:
                sender.send_json({"sender": "Inventory", "message": "first"})
                assert receiver.receive_json()["message"] == "first"

                sender.send_json({"sender": "Inventory", "message": "second"})
                assert receiver.receive_json()["message"] == "second"

    def test_malformed_frame_keeps_socket_open(self, client):
        with client.websocket_connect(_socket_url("supplier", 1)) as receiver:
            with client.websocket_connect(_socket_url("inventory", 1)) as sender:
                sender.send_text("not json {")
                assert sender.receive_json() == {"error": "invalid JSON"}

                sender.send_json({"sender": "Inventory", "message": "after bad frame"})
                assert receiver.receive_json()["message"] == "after bad frame"

    def test_non_object_frame_is_answered(self, client):
        with client.websocket_connect(_socket_url("inventory", 1)) as sender:
            sender.send_json(["sender", "message"])

            assert sender.receive_json() == {"error": "sender and message are required"}
