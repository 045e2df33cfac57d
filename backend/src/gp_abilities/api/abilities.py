"""Abilities API: list, describe and run abilities.

Mirrors the Abilities API REST routes:

- ``GET  /abilities``
- ``GET  /abilities/{namespace}/{action}``
- ``POST /abilities/{namespace}/{action}/run`` with body ``{"input": {...}}``
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ..abilities.base import ExecuteContext
from ..abilities.executor import Executor
from ..abilities.registry import AbilityRegistry
from ..core.logging import get_logger
from ..core.response import AbilityResponse
from ..storage.base import WordPressStore
from .dependencies import get_ability_store, get_execute_context, get_executor, get_registry

logger = get_logger(__name__)

router = APIRouter(prefix="/abilities", tags=["abilities"])


class AbilityRunRequest(BaseModel):
    input: dict[str, Any] = Field(default_factory=dict)


@router.get("")
async def list_abilities(
    category: str | None = Query(None, description="Only abilities in this category"),
    context: ExecuteContext = Depends(get_execute_context),
    registry: AbilityRegistry = Depends(get_registry),
):
    return AbilityResponse.success([d.to_public() for d in registry.list(category)])


@router.get("/{namespace}/{action}")
async def get_ability(
    namespace: str,
    action: str,
    context: ExecuteContext = Depends(get_execute_context),
    registry: AbilityRegistry = Depends(get_registry),
):
    return AbilityResponse.success(registry.get(f"{namespace}/{action}").to_public())


@router.post("/{namespace}/{action}/run")
async def run_ability(
    namespace: str,
    action: str,
    body: AbilityRunRequest | None = None,
    context: ExecuteContext = Depends(get_execute_context),
    executor: Executor = Depends(get_executor),
    store: WordPressStore = Depends(get_ability_store),
):
    name = f"{namespace}/{action}"
    params = body.input if body is not None else {}
    logger.info("Running ability", extra={"ability": name, "user_id": context.user_id})
    payload = await executor.execute(name=name, params=params, context=context, store=store)
    return AbilityResponse.success(payload)
