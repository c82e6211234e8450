from .cart import CartStore
from .storage import CartStorage, JsonFileCartStorage, MemoryCartStorage
from .service import CartService
from .routes import pos_router

__all__ = [
    "CartStore",
    "CartStorage",
    "JsonFileCartStorage",
    "MemoryCartStorage",
    "CartService",
    "pos_router",
]
