"""Split the flat ``generate_settings`` bag into the sections get-settings reports."""

from __future__ import annotations

from typing import Any

COLOR_KEYS = (
    "global_colors", "background_color", "text_color", "link_color", "link_color_hover",
    "header_background_color", "header_text_color", "header_link_color",
    "navigation_background_color", "navigation_text_color", "navigation_background_hover",
    "sidebar_widget_title_color", "sidebar_widget_text_color",
    "footer_background_color", "footer_text_color", "footer_link_color",
    "entry_meta_link_color", "entry_meta_link_color_hover",
)

TYPOGRAPHY_KEYS = (
    "font_body", "body_font_weight", "body_font_size", "body_line_height",
    "font_heading_1", "heading_1_weight", "heading_1_font_size",
    "font_heading_2", "heading_2_weight", "heading_2_font_size",
    "font_heading_3", "heading_3_weight", "heading_3_font_size",
    "font_buttons", "buttons_font_weight", "buttons_font_size",
)

LAYOUT_KEYS = (
    "container_width", "content_layout_setting", "content_width",
    "sidebar_width", "sidebar_layout", "header_layout_setting",
    "footer_widget_setting", "back_to_top",
)

BUTTON_KEYS = (
    "form_button_background_color", "form_button_background_color_hover",
    "form_button_text_color", "form_button_text_color_hover",
    "form_button_border_radius",
)

SECTION_KEYS: dict[str, tuple[str, ...]] = {
    "colors": COLOR_KEYS,
    "typography": TYPOGRAPHY_KEYS,
    "layout": LAYOUT_KEYS,
    "buttons": BUTTON_KEYS,
}


def _pick(settings: dict[str, Any], keys: tuple[str, ...]) -> dict[str, Any]:
    # null values count as unset
    return {k: settings[k] for k in keys if settings.get(k) is not None}


def build_sections(settings: dict[str, Any], global_colors: Any, section: str = "all") -> dict[str, Any]:
    """Return the requested view of ``settings``.

    A category appears only when at least one of its keys is set. ``colors``
    and ``all`` always carry ``global_colors``; ``all`` adds the raw bag as
    ``all_settings``. ``site_identity`` has no keys of its own and yields ``{}``.
    """
    result: dict[str, Any] = {}
    if section in ("all", "colors"):
        result["global_colors"] = global_colors
    for name, keys in SECTION_KEYS.items():
        if section not in ("all", name):
            continue
        picked = _pick(settings, keys)
        if picked:
            result[name] = picked
    if section == "all":
        result["all_settings"] = settings
    return result
