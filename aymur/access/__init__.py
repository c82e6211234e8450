from .routes import access_router
from .service import AccessService
from .schemas import AccessRecord

__all__ = ["access_router", "AccessService", "AccessRecord"]
