"""
Ability executor: permission check, input schema validation, handler execution
against a request-scoped host, and output schema validation.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import jsonschema

from ..core.exceptions import (
    AbilityOutputValidationError,
    AbilityPermissionError,
    AbilityValidationError,
    StoreError,
)
from ..core.logging import get_logger
from ..storage import get_store
from ..storage.base import WordPressStore
from .base import AbilityDescriptor, AbilityResult, ExecuteContext
from .host import make_host
from .registry import REGISTRY, AbilityRegistry

logger = get_logger(__name__)


def _first_error(schema: Dict[str, Any], instance: Any) -> Optional[jsonschema.ValidationError]:
    validator = jsonschema.Draft7Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.absolute_path))
    return errors[0] if errors else None


class Executor:
    def __init__(self, registry: Optional[AbilityRegistry] = None):
        self._registry = registry or REGISTRY

    @property
    def registry(self) -> AbilityRegistry:
        return self._registry

    def _check_permission(self, descriptor: AbilityDescriptor, context: ExecuteContext) -> None:
        if not context.can(descriptor.permission):
            logger.info(
                "Ability permission denied",
                extra={"ability": descriptor.name, "user_id": context.user_id, "permission": descriptor.permission},
            )
            raise AbilityPermissionError(descriptor.name, descriptor.permission)

    def _validate(self, descriptor: AbilityDescriptor, params: Dict[str, Any]) -> Dict[str, Any]:
        """Reject params that break the ability's input schema.

        Missing required fields, wrong JSON types and unknown top-level
        properties all surface here, before the handler runs.
        """
        error = _first_error(descriptor.input_schema, params)
        if error is not None:
            path = "/".join(str(p) for p in error.absolute_path)
            reason = f"{path}: {error.message}" if path else error.message
            raise AbilityValidationError(
                descriptor.name,
                reason,
                details={"name": descriptor.name, "path": list(error.absolute_path), "validator": error.validator},
            )
        return params

    def _validate_output(self, descriptor: AbilityDescriptor, payload: Dict[str, Any]) -> None:
        error = _first_error(descriptor.output_schema, payload)
        if error is not None:
            logger.error(
                "Ability returned output that breaks its schema",
                extra={"ability": descriptor.name, "error": error.message},
            )
            raise AbilityOutputValidationError(descriptor.name, error.message)

    async def execute(
        self,
        *,
        name: str,
        params: Optional[Dict[str, Any]],
        context: ExecuteContext,
        store: Optional[WordPressStore] = None,
    ) -> Dict[str, Any]:
        """Run one ability and return its wire payload.

        Raises:
            AbilityNotFoundError: no ability named ``name`` (404)
            AbilityPermissionError: caller lacks the ability's permission (403)
            AbilityValidationError: params break the input schema (422)
            AbilityOutputValidationError: handler output breaks the output schema (500)

        Handler exceptions never escape: they are logged and returned as
        ``{"success": False, "message": ...}``.
        """
        descriptor = self._registry.get(name)
        self._check_permission(descriptor, context)
        vparams = self._validate(descriptor, dict(params or {}))

        host = make_host(
            provider=descriptor.provider,
            user_id=context.user_id,
            store=store if store is not None else get_store(),
            capabilities=self._registry.capabilities_for(descriptor.provider),
            ability=descriptor.name,
        )

        logger.debug("Executing ability", extra={"ability": descriptor.name, "user_id": context.user_id})
        try:
            result = await descriptor.handler(vparams, context, host)
        except StoreError as e:
            logger.warning("Ability '%s' store failure: %s", descriptor.name, e.message)
            return AbilityResult.err(e.message).to_payload()
        except Exception as e:  # noqa: BLE001
            logger.exception("Ability '%s' failed: %s", descriptor.name, e)
            return AbilityResult.err(str(e) or e.__class__.__name__).to_payload()

        payload = result.to_payload()
        self._validate_output(descriptor, payload)
        return payload


# Global executor instance
EXECUTOR = Executor()
