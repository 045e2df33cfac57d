"""LogCapability - per-call logging for ability handlers.

Each entry carries the provider, ability and caller so a single ability run
can be traced through the service log.
"""

from __future__ import annotations

import logging
from typing import Any

from .base import ImmutableCapabilityMixin

# Dedicated logger for handler logs
ability_logger = logging.getLogger("gp_abilities.abilities.runtime")


class LogCapability(ImmutableCapabilityMixin):
    """Logging capability with automatic context injection.

    Always available to handlers (no declaration required).

    Example:
        async def clear_cache(self, params, context, host):
            host.log.info("Clearing dynamic CSS")

    """

    __slots__ = ("_ability", "_provider", "_user_id")

    _provider: str
    _user_id: str
    _ability: str | None

    def __init__(self, *, provider: str, user_id: str, ability: str | None = None) -> None:
        object.__setattr__(self, "_provider", provider)
        object.__setattr__(self, "_user_id", user_id)
        object.__setattr__(self, "_ability", ability)

    def _make_extra(self, extra: dict[str, Any] | None = None) -> dict[str, Any]:
        """Merge ``extra`` with the call context.

        Context fields are written last so handlers cannot overwrite them.
        """
        base: dict[str, Any] = {}
        if extra:
            base.update(extra)
        base["provider"] = self._provider
        base["user_id"] = self._user_id
        if self._ability:
            base["ability"] = self._ability
        return base

    def debug(self, msg: str, *, extra: dict[str, Any] | None = None) -> None:
        ability_logger.debug(msg, extra=self._make_extra(extra))

    def info(self, msg: str, *, extra: dict[str, Any] | None = None) -> None:
        ability_logger.info(msg, extra=self._make_extra(extra))

    def warning(self, msg: str, *, extra: dict[str, Any] | None = None) -> None:
        ability_logger.warning(msg, extra=self._make_extra(extra))

    def error(self, msg: str, *, extra: dict[str, Any] | None = None) -> None:
        ability_logger.error(msg, extra=self._make_extra(extra))

    def exception(self, msg: str, *, extra: dict[str, Any] | None = None) -> None:
        """Log an error with the active exception's traceback."""
        ability_logger.exception(msg, extra=self._make_extra(extra))
