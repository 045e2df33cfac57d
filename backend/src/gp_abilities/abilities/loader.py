"""
Ability provider loader: discovers providers under plugins/* directories with a manifest.
- Each provider folder provides a manifest.py with a PLUGIN_MANIFEST dict:
  {"name": str, "version": str, "module": "plugins.pkg.plugin:ProviderClass",
   "capabilities": [...], "abilities": [...]}
"""
from __future__ import annotations

import importlib
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..core.config import get_settings_instance
from ..core.exceptions import ProviderLoadError
from ..core.logging import get_logger
from .base import AbilityProvider
from .contracts import ContractViolation, check_provider_contract

logger = get_logger(__name__)

# Providers reach WordPress only through the host they are handed
_DENIED_IMPORTS = (
    "import subprocess",
    "from subprocess",
    "gp_abilities.storage",
)


@dataclass
class ProviderRecord:
    name: str
    version: str
    entry: str  # dotted path "package.module:Class"
    capabilities: List[str] = field(default_factory=list)
    abilities: List[str] = field(default_factory=list)
    display_name: Optional[str] = None
    provider_dir: Optional[Path] = None
    manifest: Dict = field(default_factory=dict)
    violations: List[str] = field(default_factory=list)


class ProviderLoader:
    def __init__(self, *, plugins_root: Optional[Path] = None):
        if plugins_root is None:
            plugins_root = Path(get_settings_instance().plugins_root)
        self.plugins_root = plugins_root
        self.plugins_dir = plugins_root / "plugins"
        # Providers import as plugins.<name>.plugin, so their parent must be importable
        if str(plugins_root) not in sys.path:
            sys.path.insert(0, str(plugins_root))
        logger.info("Ability loader using plugins_dir=%s", self.plugins_dir)

    def _static_scan_for_violations(self, provider_dir: Path) -> List[str]:
        violations: List[str] = []
        for p in provider_dir.rglob("*.py"):
            if p.name.startswith("test_") or p.name == "conftest.py":
                continue
            txt = p.read_text(encoding="utf-8", errors="ignore")
            for denied in _DENIED_IMPORTS:
                if denied in txt:
                    violations.append(f"{p.name}: {denied}")
        return violations

    def discover(self) -> Dict[str, ProviderRecord]:
        records: Dict[str, ProviderRecord] = {}
        if not self.plugins_dir.exists():
            logger.warning("Plugins directory does not exist: %s", self.plugins_dir)
            return records
        for child in sorted(self.plugins_dir.iterdir()):
            if not child.is_dir() or not (child / "manifest.py").exists():
                continue
            try:
                manifest = importlib.import_module(f"plugins.{child.name}.manifest")
            except Exception as e:  # noqa: BLE001
                logger.exception("Failed loading manifest for %s: %s", child.name, e)
                continue
            m = getattr(manifest, "PLUGIN_MANIFEST", None)
            if not m or not (m.get("name") and m.get("module")):
                continue
            rec = ProviderRecord(
                name=m["name"],
                version=m.get("version", "0"),
                entry=m["module"],
                capabilities=list(m.get("capabilities") or []),
                abilities=list(m.get("abilities") or []),
                display_name=m.get("display_name"),
                provider_dir=child,
                manifest=dict(m),
            )
            rec.violations = self._static_scan_for_violations(child)
            records[rec.name] = rec
        return records

    def load(self, record: ProviderRecord) -> AbilityProvider:
        if record.violations:
            raise ProviderLoadError(record.name, f"disallowed imports: {record.violations}")
        module_path, class_name = record.entry.split(":", 1)
        try:
            mod = importlib.import_module(module_path)
            cls = getattr(mod, class_name)
        except (ImportError, AttributeError) as e:
            raise ProviderLoadError(record.name, str(e)) from e
        try:
            check_provider_contract(cls, record.manifest)
        except ContractViolation as e:
            raise ProviderLoadError(record.name, str(e)) from e
        provider = cls()
        # Attach manifest-derived metadata for the executor
        setattr(provider, "_capabilities", list(record.capabilities))
        return provider
