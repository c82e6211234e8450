# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Environment is set before any aymur import, because aymur.config builds
# its settings object at import time. No test talks to a real MongoDB.
# =============================================================================

import json
import os

os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("DATABASE_NAME", "aymur_test")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from aymur.app import register_exception_handlers
from aymur.pos.routes import get_cart_service, pos_router
from aymur.pos.service import CartService
from aymur.rbac import PermissionChecker
from tests.fakes import InMemoryCartRepository


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def catalog_ring():
    return {
        "item_id": "item-ring-001",
        "name": "18K Gold Ring",
        "sku": "RNG-001",
        "price": 100.0,
        "weight": 4.2,
        "metal_type": "Gold",
        "purity": "18K",
        "category": "Rings",
    }


@pytest.fixture
def catalog_chain():
    return {
        "item_id": "item-chain-002",
        "name": "Silver Chain",
        "sku": "CHN-002",
        "price": 50.0,
        "category": "Chains",
    }


@pytest.fixture
def cart_repository():
    return InMemoryCartRepository()


@pytest.fixture
def pos_app(cart_repository):
    """
    POS router behind a stand-in for the auth middleware.

    Headers drive the caller:
        X-Test-Role       role name (omit for no access)
        X-Test-Overrides  JSON permission overrides
        X-Test-User       user id (default "user-1")
    """
    app = FastAPI()
    register_exception_handlers(app)

    @app.middleware("http")
    async def attach_caller(request: Request, call_next):
        overrides = json.loads(request.headers.get("X-Test-Overrides", "{}"))
        request.state.user = {"sub": request.headers.get("X-Test-User", "user-1")}
        request.state.shop_id = "shop-1"
        request.state.permissions = PermissionChecker.for_access(
            request.headers.get("X-Test-Role"), overrides
        )
        return await call_next(request)

    def _cart_service(request: Request) -> CartService:
        return CartService(cart_repository, request.state.user["sub"])

    app.include_router(pos_router, prefix="/pos")
    app.dependency_overrides[get_cart_service] = _cart_service
    return app


@pytest.fixture
def client(pos_app):
    return TestClient(pos_app)
