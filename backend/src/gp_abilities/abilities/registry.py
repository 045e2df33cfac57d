"""Ability registry: loads every discovered provider once and indexes its
abilities by name. Names are unique for the lifetime of the process.
"""

from __future__ import annotations

from ..core.exceptions import AbilityNotFoundError, DuplicateAbilityError, ProviderLoadError
from ..core.logging import get_logger
from .base import AbilityDescriptor, AbilityProvider
from .loader import ProviderLoader, ProviderRecord

logger = get_logger(__name__)


class AbilityRegistry:
    def __init__(self, loader: ProviderLoader | None = None):
        self._loader = loader
        self._manifest: dict[str, ProviderRecord] = {}
        self._providers: dict[str, AbilityProvider] = {}
        self._capabilities: dict[str, list[str]] = {}
        self._abilities: dict[str, AbilityDescriptor] = {}
        self._loaded = False

    @property
    def loader(self) -> ProviderLoader:
        if self._loader is None:
            self._loader = ProviderLoader()
        return self._loader

    def register_provider(self, provider: AbilityProvider, capabilities: list[str] | None = None) -> None:
        """Add a provider and all of its abilities.

        Raises ``DuplicateAbilityError`` if any ability name is already taken;
        in that case none of the provider's abilities are added.
        """
        descriptors = provider.get_abilities()
        for descriptor in descriptors:
            existing = self._abilities.get(descriptor.name)
            if existing is not None:
                raise DuplicateAbilityError(descriptor.name, provider.name, existing.provider)
        for descriptor in descriptors:
            self._abilities[descriptor.name] = descriptor
        self._providers[provider.name] = provider
        self._capabilities[provider.name] = list(
            capabilities if capabilities is not None else getattr(provider, "_capabilities", [])
        )
        logger.info(
            "Registered ability provider",
            extra={"provider": provider.name, "abilities": len(descriptors)},
        )

    def load(self) -> None:
        """Discover and register every provider under the plugins directory.

        A provider that fails to import or breaks its contract is skipped and
        logged; duplicate ability names are fatal.
        """
        if self._loaded:
            return
        self._manifest = self.loader.discover()
        for name, record in self._manifest.items():
            try:
                provider = self.loader.load(record)
            except ProviderLoadError as e:
                logger.warning("Skipping ability provider '%s': %s", name, e.message)
                continue
            self.register_provider(provider, record.capabilities)
        self._loaded = True

    def ensure_loaded(self) -> AbilityRegistry:
        if not self._loaded:
            self.load()
        return self

    def get(self, name: str) -> AbilityDescriptor:
        self.ensure_loaded()
        try:
            return self._abilities[name]
        except KeyError:
            raise AbilityNotFoundError(name) from None

    def list(self, category: str | None = None) -> list[AbilityDescriptor]:
        self.ensure_loaded()
        descriptors = sorted(self._abilities.values(), key=lambda d: d.name)
        if category:
            descriptors = [d for d in descriptors if d.category == category]
        return descriptors

    def capabilities_for(self, provider_name: str) -> list[str]:
        return list(self._capabilities.get(provider_name, []))

    def get_manifest(self) -> dict[str, ProviderRecord]:
        self.ensure_loaded()
        return dict(self._manifest)


# Global registry instance
REGISTRY = AbilityRegistry()
