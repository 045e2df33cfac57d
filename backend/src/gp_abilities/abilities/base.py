"""
Ability base interfaces and models.

An ability is a named, schema-described remote procedure. Providers contribute
``AbilityDescriptor`` entries; the registry indexes them by name and the
executor runs them against a request-scoped host.
"""
from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Dict, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict


class ExecuteContext(BaseModel):
    user_id: str
    # WordPress capability names granted to the caller (e.g. "manage_options")
    capabilities: frozenset[str] = frozenset()

    def can(self, capability: str) -> bool:
        return capability in self.capabilities


class AbilityResult(BaseModel):
    """What a handler returns.

    ``success: False`` is a semantic rejection ("No option names provided.");
    structural failures are raised by the executor instead.
    """

    success: bool
    message: str
    data: Dict[str, Any] = {}

    @classmethod
    def ok(cls, message: str, **data: Any) -> AbilityResult:
        return cls(success=True, message=message, data=data)

    @classmethod
    def err(cls, message: str, **data: Any) -> AbilityResult:
        return cls(success=False, message=message, data=data)

    def to_payload(self) -> Dict[str, Any]:
        """Flatten into the wire shape: ``{"success", ...data, "message"}``."""
        return {"success": self.success, **self.data, "message": self.message}


class AbilityAnnotations(BaseModel):
    model_config = ConfigDict(frozen=True)

    readonly: bool = False
    destructive: bool = False
    idempotent: bool = False


Handler = Callable[[Dict[str, Any], ExecuteContext, Any], Awaitable[AbilityResult]]


@dataclass(frozen=True)
class AbilityDescriptor:
    name: str  # "namespace/action"
    label: str
    description: str
    input_schema: Dict[str, Any]
    output_schema: Dict[str, Any]
    permission: str
    handler: Handler = field(repr=False, compare=False)
    annotations: AbilityAnnotations = AbilityAnnotations()
    category: str = "site"
    provider: str = ""

    @property
    def namespace(self) -> str:
        return self.name.split("/", 1)[0]

    def to_public(self) -> Dict[str, Any]:
        """Descriptor as listed by the API (no handler, no provider internals)."""
        return {
            "name": self.name,
            "label": self.label,
            "description": self.description,
            "category": self.category,
            "input_schema": self.input_schema,
            "output_schema": self.output_schema,
            "meta": {"annotations": self.annotations.model_dump()},
        }


@runtime_checkable
class AbilityProvider(Protocol):
    name: str
    version: str

    def get_abilities(self) -> list[AbilityDescriptor]:
        """Return this provider's ability descriptors."""
        ...
