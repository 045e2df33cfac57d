"""GenerateBlocks abilities: global styles and generated CSS cache."""

from __future__ import annotations

from gp_abilities.abilities.base import AbilityAnnotations, AbilityDescriptor, AbilityResult
from gp_abilities.abilities.updates import value_action

GLOBAL_STYLES_OPTION = "generateblocks_global_styles"
DEFAULTS_OPTION = "generateblocks_defaults"
SETTINGS_OPTION = "generateblocks"
CSS_VERSION_OPTION = "generateblocks_css_version"

CSS_DIR = "generateblocks"

# Request field -> option replaced wholesale when the field is present
_STYLE_OPTIONS = {
    "global_styles": GLOBAL_STYLES_OPTION,
    "defaults": DEFAULTS_OPTION,
    "settings": SETTINGS_OPTION,
}


def _output(**properties):
    return {
        "type": "object",
        "properties": {"success": {"type": "boolean"}, **properties, "message": {"type": "string"}},
        "required": ["success", "message"],
    }


def _as_dict(value):
    return dict(value) if isinstance(value, dict) else {}


class GenerateBlocksProvider:
    name = "generateblocks"
    version = "1"

    def get_abilities(self) -> list[AbilityDescriptor]:
        return [
            AbilityDescriptor(
                name="generateblocks/get-global-styles",
                label="Get GenerateBlocks Global Styles",
                description="Retrieves GenerateBlocks global styles, defaults, and settings.",
                input_schema={
                    "type": "object",
                    "properties": {
                        "include_defaults": {
                            "type": "boolean",
                            "default": True,
                            "description": "Include default settings in response.",
                        },
                    },
                    "additionalProperties": False,
                },
                output_schema=_output(
                    global_styles={"type": "array"},
                    defaults={"type": "object"},
                    settings={"type": "object"},
                ),
                permission="edit_theme_options",
                handler=self.get_global_styles,
                annotations=AbilityAnnotations(readonly=True, idempotent=True),
                provider=self.name,
            ),
            AbilityDescriptor(
                name="generateblocks/update-global-styles",
                label="Update GenerateBlocks Global Styles",
                description=(
                    "Updates GenerateBlocks global styles, defaults, and settings. "
                    "Global styles are replaced entirely."
                ),
                input_schema={
                    "type": "object",
                    "properties": {
                        "global_styles": {"type": "array", "description": "Complete global styles array to save."},
                        "defaults": {"type": "object", "description": "Default settings object to save."},
                        "settings": {"type": "object", "description": "GenerateBlocks settings object to save."},
                    },
                    "additionalProperties": False,
                },
                output_schema=_output(),
                permission="edit_theme_options",
                handler=self.update_global_styles,
                annotations=AbilityAnnotations(idempotent=True),
                provider=self.name,
            ),
            AbilityDescriptor(
                name="generateblocks/clear-cache",
                label="Clear GenerateBlocks Cache",
                description="Clears GenerateBlocks CSS cache by deleting generated CSS files.",
                input_schema={
                    "type": "object",
                    "properties": {
                        "confirm": {
                            "type": "boolean",
                            "default": True,
                            "description": "Confirm cache clear operation.",
                        },
                    },
                    "additionalProperties": False,
                },
                output_schema=_output(deleted={"type": "integer"}),
                permission="edit_theme_options",
                handler=self.clear_cache,
                annotations=AbilityAnnotations(idempotent=True),
                provider=self.name,
            ),
        ]

    async def get_global_styles(self, params, context, host) -> AbilityResult:
        # An empty PHP array comes back from JSON as []
        styles = await host.options.get(GLOBAL_STYLES_OPTION, [])
        data = {
            "global_styles": styles if isinstance(styles, list) else [],
            "defaults": _as_dict(await host.options.get(DEFAULTS_OPTION, {})),
            "settings": _as_dict(await host.options.get(SETTINGS_OPTION, {})),
        }
        if not params.get("include_defaults", True):
            del data["defaults"]
        return AbilityResult.ok("GenerateBlocks settings retrieved successfully", **data)

    async def update_global_styles(self, params, context, host) -> AbilityResult:
        if not any(params.get(field) for field in _STYLE_OPTIONS):
            return AbilityResult.err("No styles, defaults, or settings provided to update")

        written = []
        for field, option in _STYLE_OPTIONS.items():
            if await host.options.apply(option, value_action(params, field)):
                written.append(option)

        host.log.info("GenerateBlocks styles updated", extra={"options": written})
        return AbilityResult.ok("GenerateBlocks settings updated successfully")

    async def clear_cache(self, params, context, host) -> AbilityResult:
        if not params.get("confirm", True):
            return AbilityResult.err("Confirmation required to clear cache.")

        deleted = 0
        for path in await host.files.glob(CSS_DIR, "*.css"):
            # Best effort: a file that cannot be removed is skipped
            if await host.files.delete(path):
                deleted += 1
        await host.options.delete(CSS_VERSION_OPTION)

        host.log.info("GenerateBlocks CSS cleared", extra={"deleted": deleted})
        return AbilityResult.ok(f"Cleared {deleted} GenerateBlocks CSS file(s)", deleted=deleted)
