"""GeneratePress abilities: theme info, options, settings, page meta and Elements.

Every handler reaches WordPress through the host it is handed:

- ``host.theme`` for theme identity, Premium status and the dynamic CSS rebuild
- ``host.options`` for ``wp_options`` rows (caller-supplied names are screened
  against the option allow-list first)
- ``host.posts`` for page meta and ``gp_elements`` posts

Handlers answer every semantic problem with ``success: False``; the executor
has already rejected structurally invalid input.
"""

from __future__ import annotations

from typing import Any

from gp_abilities.abilities.allowlist import (
    is_allowed_meta_key,
    partition_keys,
    usable_key,
)
from gp_abilities.abilities.base import AbilityAnnotations, AbilityDescriptor, AbilityResult
from gp_abilities.abilities.sanitize import sanitize_text_field, sanitize_title
from gp_abilities.abilities.updates import (
    DELETE,
    Set,
    flag_action,
    nullable_action,
    text_action,
    value_action,
)

from . import schemas
from .sections import build_sections

ELEMENTS_POST_TYPE = "gp_elements"

ELEMENT_TYPE_KEY = "_generate_element_type"
ELEMENT_CONTENT_KEY = "_generate_element_content"

DEFAULT_ELEMENT_META_KEYS = (
    ELEMENT_TYPE_KEY,
    ELEMENT_CONTENT_KEY,
    "_generate_hook_type",
    "_generate_hook",
    "_generate_custom_hook",
    "_generate_hook_priority",
    "_generate_hook_execute_php",
    "_generate_element_display_conditions",
    "_generate_element_exclude_conditions",
    "_generate_element_user_conditions",
)

# Request field -> meta key, stored through sanitize_text_field
_ELEMENT_TEXT_META = {
    "element_type": ELEMENT_TYPE_KEY,
    "hook": "_generate_hook",
    "custom_hook": "_generate_custom_hook",
    "hook_type": "_generate_hook_type",
}

_ELEMENT_CONDITION_META = {
    "display_conditions": "_generate_element_display_conditions",
    "exclude_conditions": "_generate_element_exclude_conditions",
    "user_conditions": "_generate_element_user_conditions",
}

PAGE_META_FIELDS = {
    "disable_headline": "_generate-disable-headline",
    "disable_nav": "_generate-disable-nav",
    "disable_footer": "_generate-disable-footer",
    "disable_footer_widgets": "_generate-disable-footer-widgets",
    "sidebar_layout": "_generate-sidebar-layout-meta",
    "content_area": "_generate-content-area-meta",
    "transparent_header": "_generate-transparent-header",
    "sticky_header": "_generate-sticky-navigation-meta",
}

SETTINGS_OPTION = "generate_settings"
DYNAMIC_CSS_OPTIONS = ("generate_dynamic_css_output", "generate_dynamic_css_cached_version")

_ELEMENTS_MISSING = "GeneratePress Elements are not available (gp_elements post type missing)."

_ABSENT = object()

_READONLY = AbilityAnnotations(readonly=True, idempotent=True)
_WRITE = AbilityAnnotations()
_IDEMPOTENT_WRITE = AbilityAnnotations(idempotent=True)


def _clamp(value: Any, low: int, high: int | None = None) -> int:
    n = max(low, int(value))
    return min(high, n) if high is not None else n


def _as_dict(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def _merge_meta_keys(extra: Any) -> list[str]:
    """Default element meta keys plus the allowed extras, without duplicates."""
    keys = list(DEFAULT_ELEMENT_META_KEYS)
    for key in extra or []:
        if usable_key(key) and is_allowed_meta_key(key) and key not in keys:
            keys.append(key)
    return keys


class GeneratePressProvider:
    name = "generatepress"
    version = "1"

    def get_abilities(self) -> list[AbilityDescriptor]:
        def ability(
            name, label, description, input_schema, output_schema, handler, annotations,
            permission="edit_theme_options",
        ):
            return AbilityDescriptor(
                name=name,
                label=label,
                description=description,
                input_schema=input_schema,
                output_schema=output_schema,
                permission=permission,
                handler=handler,
                annotations=annotations,
                provider=self.name,
            )

        return [
            ability(
                "generatepress/get-info",
                "Get GeneratePress Theme Info",
                "Get active theme information and GeneratePress Premium status.",
                schemas.GET_INFO_INPUT,
                schemas.GET_INFO_OUTPUT,
                self.get_info,
                _READONLY,
            ),
            ability(
                "generatepress/clear-cache",
                "Clear GeneratePress Cache",
                "Clears GeneratePress dynamic CSS cache to force regeneration.",
                schemas.CLEAR_CACHE_INPUT,
                schemas.CLEAR_CACHE_OUTPUT,
                self.clear_cache,
                _WRITE,
            ),
            ability(
                "generatepress/list-options",
                "List GeneratePress Options",
                "List GeneratePress/GenerateBlocks options available in wp_options.",
                schemas.LIST_OPTIONS_INPUT,
                schemas.LIST_OPTIONS_OUTPUT,
                self.list_options,
                _READONLY,
                permission="manage_options",
            ),
            ability(
                "generatepress/get-options",
                "Get GeneratePress Options",
                "Get specific GeneratePress/GenerateBlocks options by name.",
                schemas.GET_OPTIONS_INPUT,
                schemas.GET_OPTIONS_OUTPUT,
                self.get_options,
                _READONLY,
                permission="manage_options",
            ),
            ability(
                "generatepress/update-options",
                "Update GeneratePress Options",
                "Update or delete GeneratePress/GenerateBlocks options by name.",
                schemas.UPDATE_OPTIONS_INPUT,
                schemas.UPDATE_OPTIONS_OUTPUT,
                self.update_options,
                _WRITE,
                permission="manage_options",
            ),
            ability(
                "generatepress/get-settings",
                "Get GeneratePress Settings",
                "Retrieves GeneratePress theme settings including colors, typography, layout, and global styles.",
                schemas.GET_SETTINGS_INPUT,
                schemas.GET_SETTINGS_OUTPUT,
                self.get_settings,
                _READONLY,
            ),
            ability(
                "generatepress/update-settings",
                "Update GeneratePress Settings",
                "Updates GeneratePress theme settings. Merges with existing settings - only provided keys are updated.",
                schemas.UPDATE_SETTINGS_INPUT,
                schemas.UPDATE_SETTINGS_OUTPUT,
                self.update_settings,
                _IDEMPOTENT_WRITE,
            ),
            ability(
                "generatepress/get-page-meta",
                "Get GeneratePress Page Meta",
                "Retrieves GeneratePress page-specific meta values for a post or page.",
                schemas.GET_PAGE_META_INPUT,
                schemas.GET_PAGE_META_OUTPUT,
                self.get_page_meta,
                _READONLY,
            ),
            ability(
                "generatepress/update-page-meta",
                "Update GeneratePress Page Meta",
                "Updates GeneratePress page-specific settings like disabling title, sidebar layout, "
                "content width, navigation, and footer.",
                schemas.UPDATE_PAGE_META_INPUT,
                schemas.UPDATE_PAGE_META_OUTPUT,
                self.update_page_meta,
                _IDEMPOTENT_WRITE,
            ),
            ability(
                "generatepress/list-elements",
                "List GeneratePress Elements",
                "Lists GeneratePress Elements (gp_elements) with optional filters.",
                schemas.LIST_ELEMENTS_INPUT,
                schemas.LIST_ELEMENTS_OUTPUT,
                self.list_elements,
                _READONLY,
            ),
            ability(
                "generatepress/get-element",
                "Get GeneratePress Element",
                "Retrieves a GeneratePress Element (gp_elements) by ID.",
                schemas.GET_ELEMENT_INPUT,
                schemas.GET_ELEMENT_OUTPUT,
                self.get_element,
                _READONLY,
            ),
            ability(
                "generatepress/create-element",
                "Create GeneratePress Element",
                "Creates a new GeneratePress Element (gp_elements) with meta and content.",
                schemas.CREATE_ELEMENT_INPUT,
                schemas.ELEMENT_ID_OUTPUT,
                self.create_element,
                _WRITE,
            ),
            ability(
                "generatepress/update-element",
                "Update GeneratePress Element",
                "Updates an existing GeneratePress Element (gp_elements).",
                schemas.UPDATE_ELEMENT_INPUT,
                schemas.ELEMENT_ID_OUTPUT,
                self.update_element,
                _WRITE,
            ),
            ability(
                "generatepress/delete-element",
                "Delete GeneratePress Element",
                "Deletes a GeneratePress Element (gp_elements) by ID.",
                schemas.DELETE_ELEMENT_INPUT,
                schemas.ELEMENT_ID_OUTPUT,
                self.delete_element,
                AbilityAnnotations(destructive=True),
            ),
        ]

    # ------------------------------------------------------------------
    # Theme
    # ------------------------------------------------------------------

    async def get_info(self, params, context, host) -> AbilityResult:
        theme = await host.theme.identity()
        premium = await host.theme.premium()
        return AbilityResult.ok(
            "Theme info retrieved successfully",
            theme=theme.to_dict(),
            premium_active=premium.active,
            premium_version=premium.version or "",
        )

    async def _clear_dynamic_css(self, host) -> None:
        for name in DYNAMIC_CSS_OPTIONS:
            await host.options.delete(name)
        if not await host.theme.regenerate_dynamic_css():
            host.log.debug("Dynamic CSS rebuild not supported by the active theme")

    async def clear_cache(self, params, context, host) -> AbilityResult:
        if not params.get("confirm", True):
            return AbilityResult.err("Confirmation required to clear cache.")
        await self._clear_dynamic_css(host)
        host.log.info("Cleared GeneratePress dynamic CSS")
        return AbilityResult.ok("GeneratePress cache cleared successfully")

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    async def list_options(self, params, context, host) -> AbilityResult:
        limit = _clamp(params.get("limit", 200), 1, 500)
        offset = _clamp(params.get("offset", 0), 0)
        requested = [p for p in params.get("prefixes") or [] if isinstance(p, str)]

        rows, used = await host.options.list_rows(requested, limit, offset)
        return AbilityResult.ok(
            "Options listed successfully",
            options=[row.to_dict() for row in rows],
            used_prefixes=used,
        )

    async def get_options(self, params, context, host) -> AbilityResult:
        names = params.get("options") or []
        if not names:
            return AbilityResult.err("No option names provided.")

        keys = partition_keys(names, await host.options.name_filter())

        values: dict[str, Any] = {}
        missing: list[str] = []
        for name in keys.allowed:
            value = await host.options.get(name, _ABSENT)
            if value is _ABSENT:
                missing.append(name)
            else:
                values[name] = value

        return AbilityResult.ok(
            "Options retrieved successfully",
            options=values,
            missing=missing,
            rejected=keys.rejected,
        )

    async def update_options(self, params, context, host) -> AbilityResult:
        updates = _as_dict(params.get("updates"))
        deletes = params.get("deletes") or []
        if not updates and not deletes:
            return AbilityResult.err("No updates or deletes provided.")

        allowed = await host.options.name_filter()

        updated: list[str] = []
        deleted: list[str] = []
        rejected: list[str] = []

        # Each key commits on its own; an earlier write is not undone if a later one fails.
        update_keys = partition_keys(updates, allowed)
        rejected.extend(update_keys.rejected)
        for name in update_keys.allowed:
            action = nullable_action(updates, name)
            await host.options.apply(name, action)
            (deleted if action == DELETE else updated).append(name)

        delete_keys = partition_keys(deletes, allowed)
        rejected.extend(delete_keys.rejected)
        for name in delete_keys.allowed:
            await host.options.apply(name, DELETE)
            deleted.append(name)

        host.log.info(
            "Options updated",
            extra={"updated": len(updated), "deleted": len(deleted), "rejected": len(rejected)},
        )
        return AbilityResult.ok(
            "Options updated successfully",
            updated=updated,
            deleted=deleted,
            rejected=rejected,
        )

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def get_settings(self, params, context, host) -> AbilityResult:
        settings = _as_dict(await host.options.get(SETTINGS_OPTION, {}))
        global_colors = settings.get("global_colors")
        if global_colors is None:
            global_colors = []

        if not settings and not global_colors:
            return AbilityResult.err("GeneratePress settings not found - is the theme active?")

        section = params.get("section", "all")
        return AbilityResult.ok(
            "GeneratePress settings retrieved successfully",
            settings=build_sections(settings, global_colors, section),
        )

    async def update_settings(self, params, context, host) -> AbilityResult:
        incoming = _as_dict(params.get("settings"))
        global_colors = params.get("global_colors") or []
        if not incoming and not global_colors:
            return AbilityResult.err("No settings provided to update")

        if incoming:
            current = _as_dict(await host.options.get(SETTINGS_OPTION, {}))
            current.update(incoming)
            await host.options.update(SETTINGS_OPTION, current)

        if global_colors:
            # Global colors live inside generate_settings, not in an option of their own
            current = _as_dict(await host.options.get(SETTINGS_OPTION, {}))
            current["global_colors"] = global_colors
            await host.options.update(SETTINGS_OPTION, current)

        await self._clear_dynamic_css(host)
        host.log.info("GeneratePress settings updated", extra={"keys": sorted(incoming)})
        return AbilityResult.ok("GeneratePress settings updated successfully")

    # ------------------------------------------------------------------
    # Page meta
    # ------------------------------------------------------------------

    async def get_page_meta(self, params, context, host) -> AbilityResult:
        if not params.get("id"):
            return AbilityResult.err("Post ID is required")
        post_id = int(params["id"])
        if await host.posts.get(post_id) is None:
            return AbilityResult.err(f"Post {post_id} not found")

        meta = {label: await host.posts.get_meta(post_id, key) for label, key in PAGE_META_FIELDS.items()}

        keys = partition_keys(params.get("meta_keys") or [], is_allowed_meta_key)
        raw_meta = {key: await host.posts.get_meta(post_id, key) for key in keys.allowed}

        return AbilityResult.ok(
            "GeneratePress page meta retrieved",
            id=post_id,
            meta=meta,
            raw_meta=raw_meta,
            rejected=keys.rejected,
        )

    async def update_page_meta(self, params, context, host) -> AbilityResult:
        if not params.get("id"):
            return AbilityResult.err("Post ID is required")
        post_id = int(params["id"])
        if await host.posts.get(post_id) is None:
            return AbilityResult.err(f"Post {post_id} not found")

        updated: list[str] = []
        for label, meta_key in PAGE_META_FIELDS.items():
            value = params.get(label)
            if value is None:
                continue
            if isinstance(value, bool):
                await host.posts.apply_meta(post_id, meta_key, flag_action(params, label))
                updated.append(f"{label} = true" if value else f"{label} = false (removed)")
                continue
            action = text_action(params, label)
            if isinstance(action, Set):
                await host.posts.apply_meta(post_id, meta_key, Set(sanitize_text_field(value)))
                updated.append(f"{label} = {value}")
            else:
                await host.posts.apply_meta(post_id, meta_key, action)
                updated.append(f"{label} = '' (removed)")

        # Disallowed custom keys are skipped without being reported
        custom = _as_dict(params.get("custom_meta"))
        for meta_key in partition_keys(custom, is_allowed_meta_key).allowed:
            action = nullable_action(custom, meta_key)
            await host.posts.apply_meta(post_id, meta_key, action)
            updated.append(f"{meta_key} = null (removed)" if action == DELETE else f"{meta_key} updated")

        if not updated:
            return AbilityResult.err("No valid settings provided to update")

        host.log.info("Page meta updated", extra={"post_id": post_id, "changes": len(updated)})
        return AbilityResult.ok(f"GeneratePress page meta updated for post {post_id}", updated=updated)

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    async def _load_element(self, host, element_id: int):
        post = await host.posts.get(element_id)
        if post is None or post.post_type != ELEMENTS_POST_TYPE:
            return None
        return post

    async def _element_content(self, host, post) -> Any:
        content = await host.posts.get_meta(post.id, ELEMENT_CONTENT_KEY)
        return post.content if content == "" else content

    async def _element_meta(self, host, post_id: int, keys: list[str], include_content: bool) -> dict[str, Any]:
        return {
            key: await host.posts.get_meta(post_id, key)
            for key in keys
            if include_content or key != ELEMENT_CONTENT_KEY
        }

    async def _apply_element_fields(self, host, post_id: int, params: dict[str, Any]) -> None:
        for field, meta_key in _ELEMENT_TEXT_META.items():
            action = value_action(params, field)
            if isinstance(action, Set):
                await host.posts.apply_meta(post_id, meta_key, Set(sanitize_text_field(action.value)))

        priority = value_action(params, "priority")
        if isinstance(priority, Set):
            await host.posts.apply_meta(post_id, "_generate_hook_priority", Set(int(priority.value)))

        await host.posts.apply_meta(post_id, "_generate_hook_execute_php", flag_action(params, "execute_php"))

        for field, meta_key in _ELEMENT_CONDITION_META.items():
            if isinstance(params.get(field), list):
                await host.posts.apply_meta(post_id, meta_key, Set(params[field]))

        extra = _as_dict(params.get("meta"))
        for meta_key in partition_keys(extra, is_allowed_meta_key).allowed:
            await host.posts.apply_meta(post_id, meta_key, nullable_action(extra, meta_key))

    async def list_elements(self, params, context, host) -> AbilityResult:
        if not await host.posts.type_exists(ELEMENTS_POST_TYPE):
            return AbilityResult.err(_ELEMENTS_MISSING)

        include_meta = bool(params.get("include_meta", False))
        include_content = bool(params.get("include_content", False))
        meta_keys = _merge_meta_keys(params.get("meta_keys") if include_meta else None)

        meta_equals = {}
        if params.get("element_type"):
            meta_equals[ELEMENT_TYPE_KEY] = sanitize_text_field(params["element_type"])

        result = await host.posts.query(
            post_type=ELEMENTS_POST_TYPE,
            status=sanitize_text_field(params.get("status", "any")),
            meta_equals=meta_equals,
            search=sanitize_text_field(params.get("search", "")),
            per_page=_clamp(params.get("per_page", 50), 1, 200),
            page=_clamp(params.get("page", 1), 1),
            orderby=params.get("orderby", "modified"),
            order=params.get("order", "DESC"),
        )

        elements = []
        for post in result.posts:
            item: dict[str, Any] = {
                "id": post.id,
                "title": post.title,
                "status": post.status,
                "slug": post.slug,
                "modified_gmt": post.modified_gmt,
            }
            element_type = await host.posts.get_meta(post.id, ELEMENT_TYPE_KEY)
            if element_type != "":
                item["element_type"] = element_type
            if include_meta:
                item["meta"] = await self._element_meta(host, post.id, meta_keys, include_content)
            if include_content:
                item["content"] = await self._element_content(host, post)
            elements.append(item)

        return AbilityResult.ok(
            "GeneratePress elements retrieved successfully",
            elements=elements,
            total=result.total,
            pages=result.pages,
        )

    async def get_element(self, params, context, host) -> AbilityResult:
        if not params.get("id"):
            return AbilityResult.err("Element ID is required.")
        if not await host.posts.type_exists(ELEMENTS_POST_TYPE):
            return AbilityResult.err(_ELEMENTS_MISSING)
        post = await self._load_element(host, int(params["id"]))
        if post is None:
            return AbilityResult.err("Element not found.")

        include_meta = bool(params.get("include_meta", True))
        include_content = bool(params.get("include_content", True))

        content = await self._element_content(host, post) if include_content else ""
        meta = {}
        if include_meta:
            meta = await self._element_meta(
                host, post.id, _merge_meta_keys(params.get("meta_keys")), include_content
            )

        return AbilityResult.ok(
            "GeneratePress element retrieved successfully",
            id=post.id,
            title=post.title,
            status=post.status,
            slug=post.slug,
            element_type=await host.posts.get_meta(post.id, ELEMENT_TYPE_KEY),
            content=content,
            post_content=post.content,
            meta=meta,
        )

    async def create_element(self, params, context, host) -> AbilityResult:
        if not await host.posts.type_exists(ELEMENTS_POST_TYPE):
            return AbilityResult.err(_ELEMENTS_MISSING)

        title = sanitize_text_field(params.get("title") or "")
        if title == "":
            return AbilityResult.err("Element title is required.")

        status = params.get("status")
        slug = params.get("slug")
        content = params.get("content")
        content = "" if content is None else content

        post_id = await host.posts.insert(
            post_type=ELEMENTS_POST_TYPE,
            title=title,
            status=sanitize_text_field(status) if status is not None else "publish",
            slug=sanitize_title(slug) if slug is not None else "",
            content=content,
        )
        if content != "":
            await host.posts.apply_meta(post_id, ELEMENT_CONTENT_KEY, Set(content))
        await self._apply_element_fields(host, post_id, params)

        host.log.info("Element created", extra={"post_id": post_id})
        return AbilityResult.ok("GeneratePress element created successfully", id=post_id)

    async def update_element(self, params, context, host) -> AbilityResult:
        if not params.get("id"):
            return AbilityResult.err("Element ID is required.")
        if not await host.posts.type_exists(ELEMENTS_POST_TYPE):
            return AbilityResult.err(_ELEMENTS_MISSING)
        post = await self._load_element(host, int(params["id"]))
        if post is None:
            return AbilityResult.err("Element not found.")

        fields: dict[str, Any] = {}
        if params.get("title") is not None:
            fields["title"] = sanitize_text_field(params["title"])
        if params.get("status") is not None:
            fields["status"] = sanitize_text_field(params["status"])
        if params.get("slug") is not None:
            fields["slug"] = sanitize_title(params["slug"])
        if "content" in params:
            fields["content"] = params["content"] or ""
        if fields:
            await host.posts.update(post.id, fields)

        if "content" in params:
            await host.posts.apply_meta(post.id, ELEMENT_CONTENT_KEY, Set(params["content"] or ""))
        await self._apply_element_fields(host, post.id, params)

        host.log.info("Element updated", extra={"post_id": post.id, "fields": sorted(fields)})
        return AbilityResult.ok("GeneratePress element updated successfully", id=post.id)

    async def delete_element(self, params, context, host) -> AbilityResult:
        if not params.get("id"):
            return AbilityResult.err("Element ID is required.")
        if not await host.posts.type_exists(ELEMENTS_POST_TYPE):
            return AbilityResult.err(_ELEMENTS_MISSING)
        post_id = int(params["id"])
        if await self._load_element(host, post_id) is None:
            return AbilityResult.err("Element not found.")

        force = bool(params.get("force", False))
        if not await host.posts.delete(post_id, force=force):
            return AbilityResult.err("Failed to delete element.")

        host.log.info("Element deleted", extra={"post_id": post_id, "force": force})
        return AbilityResult.ok("GeneratePress element deleted successfully", id=post_id)
