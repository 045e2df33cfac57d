"""Static contract validation for ability providers."""

from __future__ import annotations

import importlib
import inspect
import re

import jsonschema

from .base import AbilityDescriptor
from .host import KNOWN_CAPABILITIES

_MODULE_PATTERN = re.compile(r"^[\w.]+:[\w]+$")
_NAME_PATTERN = re.compile(r"^[a-z0-9-]+/[a-z0-9-]+$")
_REQUIRED_MANIFEST_KEYS = ("name", "version", "module", "capabilities", "abilities")


class ContractViolation(ValueError):
    """A provider manifest or descriptor breaks the provider contract."""


def _require(condition, message: str) -> None:
    if not condition:
        raise ContractViolation(message)


def _discover_manifest(provider_cls: type) -> dict:
    """Import ``PLUGIN_MANIFEST`` from the manifest module beside the provider class."""
    module_parts = provider_cls.__module__.rsplit(".", 1)
    if len(module_parts) < 2:
        raise ContractViolation(
            f"Cannot discover manifest for {provider_cls!r}: module '{provider_cls.__module__}' "
            "has no parent package. Pass the manifest explicitly."
        )
    manifest_module_name = f"{module_parts[0]}.manifest"
    try:
        manifest_module = importlib.import_module(manifest_module_name)
    except ImportError as exc:
        raise ContractViolation(f"Cannot import '{manifest_module_name}' for {provider_cls!r}") from exc
    if not hasattr(manifest_module, "PLUGIN_MANIFEST"):
        raise ContractViolation(f"'{manifest_module_name}' does not define 'PLUGIN_MANIFEST'")
    return manifest_module.PLUGIN_MANIFEST  # type: ignore[no-any-return]


def check_provider_contract(provider_cls: type, manifest: dict | None = None) -> None:
    """Validate a provider's manifest and ability descriptors.

    Raises ``ContractViolation`` on the first violation. Checked rules:

    - manifest carries name, version, module, capabilities and abilities;
      capabilities are known host capabilities; module is ``dotted.path:Class``
    - the class instantiates without arguments and matches the manifest's
      name and version
    - the descriptors' names are exactly the manifest's ``abilities`` list,
      each ``namespace/action`` shaped and unique
    - every input schema is a closed Draft 7 object schema; every output
      schema is a Draft 7 object schema declaring ``success`` and ``message``
    - every handler is a coroutine function and every permission is non-empty
    """
    if manifest is None:
        manifest = _discover_manifest(provider_cls)

    _validate_manifest(manifest)
    provider = _instantiate(provider_cls)
    _require(
        getattr(provider, "name", None) == manifest["name"],
        f"Provider name {getattr(provider, 'name', None)!r} does not match manifest {manifest['name']!r}",
    )
    _require(
        getattr(provider, "version", None) == manifest["version"],
        f"Provider version {getattr(provider, 'version', None)!r} does not match manifest {manifest['version']!r}",
    )

    descriptors = provider.get_abilities()
    names = [d.name for d in descriptors]
    _require(len(names) == len(set(names)), f"Duplicate ability names in {provider_cls.__name__}: {names}")
    _require(
        sorted(names) == sorted(manifest["abilities"]),
        f"Abilities {sorted(names)} do not match manifest 'abilities' {sorted(manifest['abilities'])}",
    )
    for descriptor in descriptors:
        _validate_descriptor(descriptor, manifest["name"])


def assert_provider_contract(provider_cls: type, manifest: dict | None = None) -> None:
    """Test-suite form of ``check_provider_contract`` that fails with ``AssertionError``."""
    try:
        check_provider_contract(provider_cls, manifest)
    except ContractViolation as exc:
        raise AssertionError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Internal validation helpers
# ---------------------------------------------------------------------------


def _validate_manifest(manifest: dict) -> None:
    for key in _REQUIRED_MANIFEST_KEYS:
        _require(key in manifest, f"Manifest is missing required key '{key}'")
    unknown = set(manifest["capabilities"]) - KNOWN_CAPABILITIES
    _require(not unknown, f"Manifest 'capabilities' contains unknown value(s): {sorted(unknown)}")
    _require(
        _MODULE_PATTERN.match(manifest["module"]),
        f"Manifest 'module' value '{manifest['module']}' is not a valid 'dotted.path:ClassName' string",
    )


def _instantiate(provider_cls: type) -> object:
    try:
        return provider_cls()
    except Exception as exc:
        raise ContractViolation(f"Failed to instantiate provider {provider_cls!r} with no arguments: {exc}") from exc


def _validate_descriptor(descriptor: AbilityDescriptor, provider_name: str) -> None:
    where = f"ability '{descriptor.name}'"
    _require(_NAME_PATTERN.match(descriptor.name), f"{where}: name must be 'namespace/action'")
    _require(
        descriptor.provider == provider_name,
        f"{where}: provider {descriptor.provider!r} does not match manifest {provider_name!r}",
    )
    _require(descriptor.label and descriptor.description, f"{where}: label and description are required")
    _require(descriptor.permission, f"{where}: permission is required")
    _require(inspect.iscoroutinefunction(descriptor.handler), f"{where}: handler must be 'async def'")

    _check_draft7(descriptor.input_schema, f"{where} input_schema")
    _require(descriptor.input_schema.get("type") == "object", f"{where}: input_schema must be an object schema")
    _require(
        descriptor.input_schema.get("additionalProperties") is False,
        f"{where}: input_schema must set 'additionalProperties: false'",
    )
    for prop, spec in descriptor.input_schema.get("properties", {}).items():
        if spec.get("type") == "array":
            _require("items" in spec or prop in _FREE_ARRAYS, f"{where}: array property '{prop}' has no 'items'")

    _check_draft7(descriptor.output_schema, f"{where} output_schema")
    props = descriptor.output_schema.get("properties", {})
    _require(props.get("success", {}).get("type") == "boolean", f"{where}: output_schema needs boolean 'success'")
    _require(props.get("message", {}).get("type") == "string", f"{where}: output_schema needs string 'message'")


# Arrays whose members are theme-defined objects with no fixed shape
_FREE_ARRAYS = frozenset(
    {"global_colors", "global_styles", "display_conditions", "exclude_conditions", "user_conditions"}
)


def _check_draft7(schema: dict, context: str) -> None:
    try:
        jsonschema.Draft7Validator.check_schema(schema)
    except jsonschema.SchemaError as exc:
        raise ContractViolation(f"{context} is not valid JSON Schema Draft 7: {exc.message}") from exc
