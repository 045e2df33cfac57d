"""JSON schemas for the GeneratePress abilities.

Numeric paging inputs carry no ``minimum``/``maximum``: out-of-range values are
clamped by the handlers instead of being rejected.
"""

from __future__ import annotations

from typing import Any


def _closed(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "object",
        "properties": properties,
        "additionalProperties": False,
    }
    if required:
        schema["required"] = required
    return schema


def _output(**properties: Any) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "success": {"type": "boolean"},
            **properties,
            "message": {"type": "string"},
        },
        "required": ["success", "message"],
    }


_STRING_LIST = {"type": "array", "items": {"type": "string"}}

_CONFIRM = {"type": "boolean", "default": True, "description": "Confirm cache clear operation."}

SIDEBAR_LAYOUTS = ["", "right-sidebar", "left-sidebar", "no-sidebar", "both-sidebars", "both-left", "both-right"]
CONTENT_AREAS = ["", "full-width", "contained", "full-width-content"]
SETTINGS_SECTIONS = ["all", "colors", "typography", "layout", "buttons", "site_identity"]
ELEMENT_ORDERBY = ["date", "modified", "title", "menu_order", "ID"]


GET_INFO_INPUT = _closed({})
GET_INFO_OUTPUT = _output(
    theme={"type": "object"},
    premium_active={"type": "boolean"},
    premium_version={"type": "string"},
)

CLEAR_CACHE_INPUT = _closed({"confirm": _CONFIRM})
CLEAR_CACHE_OUTPUT = _output()

LIST_OPTIONS_INPUT = _closed(
    {
        "prefixes": {
            **_STRING_LIST,
            "description": "Optional list of prefixes to filter (defaults to GeneratePress/GenerateBlocks prefixes).",
        },
        "limit": {"type": "integer", "default": 200, "description": "Maximum options to return (1-500)."},
        "offset": {"type": "integer", "default": 0, "description": "Offset for pagination."},
    }
)
LIST_OPTIONS_OUTPUT = _output(
    options={
        "type": "array",
        "items": {
            "type": "object",
            "properties": {"option_name": {"type": "string"}, "autoload": {"type": "string"}},
        },
    },
    used_prefixes=_STRING_LIST,
)

GET_OPTIONS_INPUT = _closed(
    {"options": {**_STRING_LIST, "description": "Option names to retrieve."}},
    required=["options"],
)
GET_OPTIONS_OUTPUT = _output(
    options={"type": "object"},
    missing=_STRING_LIST,
    rejected=_STRING_LIST,
)

UPDATE_OPTIONS_INPUT = _closed(
    {
        "updates": {"type": "object", "description": "Map of option names to values. Use null to delete."},
        "deletes": {**_STRING_LIST, "description": "Option names to delete."},
    }
)
UPDATE_OPTIONS_OUTPUT = _output(updated=_STRING_LIST, deleted=_STRING_LIST, rejected=_STRING_LIST)

GET_SETTINGS_INPUT = _closed(
    {
        "section": {
            "type": "string",
            "enum": SETTINGS_SECTIONS,
            "default": "all",
            "description": "Which settings section to retrieve.",
        }
    }
)
GET_SETTINGS_OUTPUT = _output(settings={"type": "object"})

UPDATE_SETTINGS_INPUT = _closed(
    {
        "settings": {"type": "object", "description": "Settings to update (merged with existing)."},
        "global_colors": {"type": "array", "description": "Global colors array to update."},
    },
    required=["settings"],
)
UPDATE_SETTINGS_OUTPUT = _output()

GET_PAGE_META_INPUT = _closed(
    {
        "id": {"type": "integer", "description": "Post or page ID to retrieve."},
        "meta_keys": {**_STRING_LIST, "description": "Additional GeneratePress meta keys to include."},
    },
    required=["id"],
)
GET_PAGE_META_OUTPUT = _output(
    id={"type": "integer"},
    meta={"type": "object"},
    raw_meta={"type": "object"},
    rejected=_STRING_LIST,
)

UPDATE_PAGE_META_INPUT = _closed(
    {
        "id": {"type": "integer", "description": "Post or page ID to update."},
        "disable_headline": {"type": "boolean", "description": "Disable the page/post title."},
        "disable_nav": {"type": "boolean", "description": "Disable primary navigation."},
        "disable_footer": {"type": "boolean", "description": "Disable site footer."},
        "disable_footer_widgets": {"type": "boolean", "description": "Disable footer widgets."},
        "sidebar_layout": {
            "type": "string",
            "enum": SIDEBAR_LAYOUTS,
            "description": "Sidebar layout for this page.",
        },
        "content_area": {"type": "string", "enum": CONTENT_AREAS, "description": "Content area style."},
        "transparent_header": {"type": "boolean", "description": "Use transparent header on this page."},
        "sticky_header": {"type": "boolean", "description": "Use sticky header on this page."},
        "custom_meta": {
            "type": "object",
            "description": "Additional GeneratePress meta keys to update. Use null to delete.",
        },
    },
    required=["id"],
)
UPDATE_PAGE_META_OUTPUT = _output(updated=_STRING_LIST)

LIST_ELEMENTS_INPUT = _closed(
    {
        "status": {"type": "string", "default": "any", "description": "Post status filter (publish, draft, any)."},
        "element_type": {"type": "string", "description": "Filter by element type (hook, block, header, layout, etc)."},
        "search": {"type": "string", "description": "Search term for element titles."},
        "per_page": {"type": "integer", "default": 50, "description": "Elements per page (1-200)."},
        "page": {"type": "integer", "default": 1, "description": "Page number."},
        "orderby": {"type": "string", "enum": ELEMENT_ORDERBY, "default": "modified", "description": "Order by field."},
        "order": {"type": "string", "enum": ["ASC", "DESC"], "default": "DESC", "description": "Sort direction."},
        "include_meta": {"type": "boolean", "default": False, "description": "Include element meta fields."},
        "include_content": {"type": "boolean", "default": False, "description": "Include element content."},
        "meta_keys": {
            **_STRING_LIST,
            "description": "Additional meta keys to include when include_meta is true.",
        },
    }
)
LIST_ELEMENTS_OUTPUT = _output(
    elements={"type": "array", "items": {"type": "object"}},
    total={"type": "integer"},
    pages={"type": "integer"},
)

GET_ELEMENT_INPUT = _closed(
    {
        "id": {"type": "integer", "description": "Element ID."},
        "include_meta": {"type": "boolean", "default": True, "description": "Include element meta fields."},
        "include_content": {"type": "boolean", "default": True, "description": "Include element content."},
        "meta_keys": {**_STRING_LIST, "description": "Additional meta keys to include."},
    },
    required=["id"],
)
GET_ELEMENT_OUTPUT = _output(
    id={"type": "integer"},
    title={"type": "string"},
    status={"type": "string"},
    slug={"type": "string"},
    element_type={},
    content={},
    post_content={"type": "string"},
    meta={"type": "object"},
)

# Shared by create and update; update adds "id" and relaxes "title".
_ELEMENT_FIELDS: dict[str, Any] = {
    "title": {"type": "string", "description": "Element title."},
    "status": {"type": "string", "description": "Post status (publish, draft)."},
    "slug": {"type": "string", "description": "Optional slug for the element."},
    "element_type": {"type": "string", "description": "Element type (hook, block, header, layout, etc)."},
    "content": {"type": "string", "description": "Element content (stored in _generate_element_content)."},
    "hook": {"type": "string", "description": "Hook name for hook elements."},
    "custom_hook": {"type": "string", "description": "Custom hook name when hook type is custom."},
    "hook_type": {"type": "string", "description": "Hook type (hook or custom)."},
    "priority": {"type": "integer", "description": "Hook priority."},
    "execute_php": {"type": "boolean", "description": "Enable execute PHP for hook elements."},
    "display_conditions": {"type": "array", "description": "Display conditions array for elements."},
    "exclude_conditions": {"type": "array", "description": "Exclude conditions array for elements."},
    "user_conditions": {"type": "array", "description": "User conditions array for elements."},
}

CREATE_ELEMENT_INPUT = _closed(
    {
        **_ELEMENT_FIELDS,
        "status": {**_ELEMENT_FIELDS["status"], "default": "publish"},
        "meta": {
            "type": "object",
            "description": "Additional element meta to set (keys must start with _generate_).",
        },
    },
    required=["title"],
)

UPDATE_ELEMENT_INPUT = _closed(
    {
        "id": {"type": "integer", "description": "Element ID to update."},
        **_ELEMENT_FIELDS,
        "meta": {
            "type": "object",
            "description": "Additional element meta to set (keys must start with _generate_). Use null to delete.",
        },
    },
    required=["id"],
)

ELEMENT_ID_OUTPUT = _output(id={"type": "integer"})

DELETE_ELEMENT_INPUT = _closed(
    {
        "id": {"type": "integer", "description": "Element ID to delete."},
        "force": {"type": "boolean", "default": False, "description": "Force delete (bypass trash)."},
    },
    required=["id"],
)
