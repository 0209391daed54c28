from app.models.supplier import Supplier
from app.models.inventory_item import InventoryItem
from app.models.order import Order
from app.models.booking import Booking
from app.models.ferry import Ferry
from app.models.chat_message import ChatMessage

__all__ = ["Supplier", "InventoryItem", "Order", "Booking", "Ferry", "ChatMessage"]
