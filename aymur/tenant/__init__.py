from .resolver import get_global_collection, get_shop_collection, require_shop_id, shop_prefix

__all__ = ["get_global_collection", "get_shop_collection", "require_shop_id", "shop_prefix"]
