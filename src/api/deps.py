"""
FastAPI dependencies shared by the route modules.

Route handlers receive the store, the lifecycle controller and the object
store through ``Depends`` so tests can swap them via
``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Request

from src.core.exceptions import BakBakError
from src.services.lifecycle import RecordingLifecycleController, build_controller
from src.services.storage.object_store import S3ObjectStore
from src.services.storage.repository import RecordingStore


def get_current_user_id(request: Request) -> str:
    """Return the user id resolved by ``UserHeaderMiddleware``."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise BakBakError(
            detail="Authentication required",
            code="AUTH_REQUIRED",
            status_code=401,
        )
    return user_id


@lru_cache
def get_store() -> RecordingStore:
    return RecordingStore()


@lru_cache
def get_controller() -> RecordingLifecycleController:
    return build_controller(store=get_store())


@lru_cache
def get_object_store() -> S3ObjectStore:
    return S3ObjectStore()
