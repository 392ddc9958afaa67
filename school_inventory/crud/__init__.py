from .department import department
from .user import user
from .inventory import inventory
from .item_request import item_request

__all__ = ["department", "user", "inventory", "item_request"]
