from datetime import timedelta

import jwt
import pytest

from app.config import settings
from app.errors import ForbiddenError, UnauthenticatedError
from app.security import Identity, authorize, create_access_token
from app.utils.clock import utcnow
from conftest import auth_header


def _sign(claims, secret=None):
    return jwt.encode(claims, secret or settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


class TestAuthorize:

    def test_matching_role_returns_identity(self):
        token = create_access_token(42, "supplier")

        assert authorize(token, "supplier") == Identity(id=42, role="supplier")

    def test_role_is_compared_case_insensitively(self):
        token = create_access_token(3, "Finance")

        assert authorize(token, "FINANCE").role == "finance"

    def test_staff_tokens_carry_category(self):
        token = _sign({"id": "7", "category": "Inventory", "exp": utcnow() + timedelta(minutes=5)})

        identity = authorize(token, "inventory")

        assert identity.id == 7
        assert identity.role == "inventory"

    def test_any_of_several_roles(self):
        token = create_access_token(9, "crew")

        assert authorize(token, ("passenger", "crew", "finance")).role == "crew"

    def test_wrong_role_is_forbidden(self):
        token = create_access_token(42, "supplier")

        with pytest.raises(ForbiddenError, match="Inventory role required"):
            authorize(token, "inventory")

    def test_missing_token(self):
        with pytest.raises(UnauthenticatedError):
            authorize(None, "supplier")
        with pytest.raises(UnauthenticatedError):
            authorize("", "supplier")

    def test_malformed_token(self):
        with pytest.raises(UnauthenticatedError):
            authorize("not-a-jwt", "supplier")

    def test_bad_signature(self):
        token = _sign({"id": 1, "role": "supplier", "exp": utcnow() + timedelta(minutes=5)}, secret="someone-else")

        with pytest.raises(UnauthenticatedError):
            authorize(token, "supplier")

    def test_expired_token(self):
        token = create_access_token(1, "supplier", expires_delta=timedelta(minutes=-1))

        with pytest.raises(UnauthenticatedError, match="expired"):
            authorize(token, "supplier")

    def test_token_without_expiry_is_rejected(self):
        token = _sign({"id": 1, "role": "supplier"})

        with pytest.raises(UnauthenticatedError):
            authorize(token, "supplier")

    def test_token_without_identity(self):
        token = _sign({"role": "supplier", "exp": utcnow() + timedelta(minutes=5)})

        with pytest.raises(UnauthenticatedError):
            authorize(token, "supplier")

    @pytest.mark.parametrize("raw_id", ["abc", "12x", "", True, 3.5, {"id": 1}])
    def test_non_integer_identity_is_rejected(self, raw_id):
        token = _sign({"id": raw_id, "role": "supplier", "exp": utcnow() + timedelta(minutes=5)})

        with pytest.raises(UnauthenticatedError, match="does not identify"):
            authorize(token, "supplier")


class TestRoleGateOnRoutes:

    def test_missing_header_is_401(self, client):
        response = client.get("/api/inventory/items")

        assert response.status_code == 401
        assert response.json() == {"detail": "No token provided"}

    def test_wrong_role_is_403(self, client):
        response = client.get("/api/inventory/items", headers=auth_header("supplier"))

        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied. Inventory role required."

    def test_non_numeric_supplier_id_is_401(self, client):
        token = _sign({"id": "not-a-number", "role": "supplier", "exp": utcnow() + timedelta(minutes=5)})

        response = client.get("/api/suppliers/orders", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
