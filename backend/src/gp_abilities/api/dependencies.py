"""
FastAPI dependencies for the abilities API.

Provides the caller context, the store and the executor so routes stay thin
and tests can swap any of them through ``app.dependency_overrides``.
"""

import hmac

from fastapi import Header

from ..abilities.base import ExecuteContext
from ..abilities.executor import EXECUTOR, Executor
from ..abilities.registry import REGISTRY, AbilityRegistry
from ..core.config import get_settings_instance
from ..core.exceptions import AuthenticationError
from ..core.logging import get_logger
from ..storage import get_store
from ..storage.base import WordPressStore

logger = get_logger(__name__)


def _presented_key(x_api_key: str | None, authorization: str | None) -> str | None:
    if x_api_key:
        return x_api_key
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


async def get_execute_context(
    x_api_key: str | None = Header(None),
    authorization: str | None = Header(None),
) -> ExecuteContext:
    """
    Resolve the caller.

    When ``GP_ABILITIES_API_KEY`` is configured the request must present it
    (``X-API-Key`` or ``Authorization: Bearer``); the caller then gets the
    configured user id and capabilities.
    """
    settings = get_settings_instance()
    if settings.api_key:
        presented = _presented_key(x_api_key, authorization)
        if presented is None or not hmac.compare_digest(presented, settings.api_key):
            logger.warning("Rejected request with missing or invalid API key")
            raise AuthenticationError()
    return ExecuteContext(
        user_id=settings.caller_user_id,
        capabilities=frozenset(settings.caller_capabilities),
    )


def get_ability_store() -> WordPressStore:
    return get_store()


def get_registry() -> AbilityRegistry:
    return REGISTRY


def get_executor() -> Executor:
    return EXECUTOR
