"""Unit tests for the GeneratePress ability provider.

Handlers are called directly with a host from ``FakeHostBuilder`` so every
test can seed the in-memory site and then inspect what was written.
"""

from __future__ import annotations

import asyncio

from hypothesis import given, settings
from hypothesis import strategies as st

from gp_abilities.abilities.contracts import assert_provider_contract
from gp_abilities.abilities.testing import ADMIN_CONTEXT, FakeHostBuilder

from plugins.generatepress.manifest import PLUGIN_MANIFEST
from plugins.generatepress.plugin import GeneratePressProvider


# ---------------------------------------------------------------------------
# Contract gate.
# Fails if the manifest, schemas, or descriptor cross-references are invalid.
# ---------------------------------------------------------------------------


def test_contract() -> None:
    """Assert that GeneratePressProvider satisfies the provider contract."""
    assert_provider_contract(GeneratePressProvider, manifest=PLUGIN_MANIFEST)


_CTX = ADMIN_CONTEXT

_SETTINGS = {
    "text_color": "#222222",
    "link_color": None,
    "font_body": "Inter",
    "container_width": 1200,
    "form_button_text_color": "#ffffff",
    "custom_key": 1,
    "global_colors": [{"name": "Contrast", "slug": "contrast", "color": "#222222"}],
}


# ---------------------------------------------------------------------------
# Theme info and cache
# ---------------------------------------------------------------------------


async def test_get_info_child_theme_with_premium(provider, builder) -> None:
    host = (
        builder.with_theme(
            "gp-child", "generatepress", name="GP Child", parent_name="GeneratePress", parent_version="3.5.1"
        )
        .with_premium("2.5.0")
        .build()
    )

    result = await provider.get_info({}, _CTX, host)

    assert result.success
    assert result.data["theme"] == {
        "name": "GP Child",
        "version": "1.0.0",
        "template": "generatepress",
        "stylesheet": "gp-child",
        "is_child": True,
        "parent_name": "GeneratePress",
        "parent_version": "3.5.1",
        "is_generatepress": True,
    }
    assert result.data["premium_active"] is True
    assert result.data["premium_version"] == "2.5.0"


async def test_get_info_other_theme(provider, builder) -> None:
    result = await provider.get_info({}, _CTX, builder.with_theme("astra").build())

    assert result.data["theme"]["is_generatepress"] is False
    assert result.data["theme"]["parent_name"] == ""
    assert result.data["premium_active"] is False
    assert result.data["premium_version"] == ""


async def test_clear_cache_requires_confirmation(provider, builder) -> None:
    builder.with_option("generate_dynamic_css_output", "body{}").with_option("generate_dynamic_css_cached_version", "3")
    host = builder.build()

    result = await provider.clear_cache({"confirm": False}, _CTX, host)

    assert not result.success
    assert result.message == "Confirmation required to clear cache."
    assert "generate_dynamic_css_output" in builder.store.options
    assert builder.store.dynamic_css_regenerations == 0


async def test_clear_cache(provider, builder) -> None:
    builder.with_option("generate_dynamic_css_output", "body{}").with_option("generate_dynamic_css_cached_version", "3")
    host = builder.build()

    result = await provider.clear_cache({}, _CTX, host)

    assert result.success
    assert result.message == "GeneratePress cache cleared successfully"
    assert builder.store.options == {}
    assert builder.store.dynamic_css_regenerations == 1


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


async def test_list_options_clamps_paging(provider, builder) -> None:
    for i in range(501):
        builder.with_option(f"generate_opt_{i:03d}", i)
    host = builder.build()

    big = await provider.list_options({"limit": 1000}, _CTX, host)
    assert len(big.data["options"]) == 500

    one = await provider.list_options({"limit": 0}, _CTX, host)
    assert one.data["options"] == [{"option_name": "generate_opt_000", "autoload": "yes"}]

    negative = await provider.list_options({"limit": 2, "offset": -5}, _CTX, host)
    assert [o["option_name"] for o in negative.data["options"]] == ["generate_opt_000", "generate_opt_001"]


async def test_list_options_prefixes(provider, builder) -> None:
    builder.with_option("gp_font_manager", []).with_option("generate_settings", {}).with_option("siteurl", "x")
    builder.with_option("theme_mods_generatepress", {"custom_logo": 5})
    host = builder.build()

    result = await provider.list_options({"prefixes": ["gp_", "site", 7]}, _CTX, host)
    assert result.data["used_prefixes"] == ["gp_"]
    assert [o["option_name"] for o in result.data["options"]] == ["gp_font_manager", "theme_mods_generatepress"]

    fallback = await provider.list_options({}, _CTX, host)
    assert fallback.data["used_prefixes"] == ["generate_", "gp_", "generatepress_", "generateblocks_"]
    assert "siteurl" not in [o["option_name"] for o in fallback.data["options"]]


async def test_get_options_partitions(provider, builder) -> None:
    host = builder.with_option("generate_settings", _SETTINGS).with_option("theme_mods_generatepress", {"a": 1}).build()

    result = await provider.get_options(
        {"options": ["generate_settings", "theme_mods_generatepress", "siteurl", "generate_missing", ""]},
        _CTX,
        host,
    )

    assert result.success
    assert result.data["options"] == {"generate_settings": _SETTINGS, "theme_mods_generatepress": {"a": 1}}
    assert result.data["missing"] == ["generate_missing"]
    assert result.data["rejected"] == ["siteurl"]


async def test_get_options_child_theme_mods(provider, builder) -> None:
    host = builder.with_theme("gp-child", "generatepress").with_option("theme_mods_gp-child", {"b": 2}).build()

    result = await provider.get_options({"options": ["theme_mods_gp-child", "theme_mods_astra"]}, _CTX, host)

    assert result.data["options"] == {"theme_mods_gp-child": {"b": 2}}
    assert result.data["rejected"] == ["theme_mods_astra"]


async def test_get_options_empty(provider, builder) -> None:
    result = await provider.get_options({"options": []}, _CTX, builder.build())
    assert not result.success
    assert result.message == "No option names provided."


_option_names = st.one_of(
    st.sampled_from(["generate_settings", "gp_a", "generateblocks_b", "theme_mods_generatepress", "siteurl", ""]),
    st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", max_size=20),
)


@settings(max_examples=50, deadline=None)
@given(names=st.lists(_option_names, min_size=1, max_size=12))
def test_get_options_every_key_lands_in_one_partition(names) -> None:
    builder = FakeHostBuilder().for_provider("generatepress")
    builder.with_option("generate_settings", {}).with_option("gp_a", 1)
    provider = GeneratePressProvider()

    result = asyncio.run(provider.get_options({"options": names}, _CTX, builder.build()))
    if not result.success:
        return

    options, missing, rejected = result.data["options"], result.data["missing"], result.data["rejected"]
    for name in names:
        if name == "":
            continue
        hits = (name in options) + (name in missing) + (name in rejected)
        assert hits == 1, name


async def test_update_options_rejects_unknown_delete(provider, builder) -> None:
    host = builder.build()

    result = await provider.update_options(
        {"updates": {"generate_settings": {"text_color": "#000"}}, "deletes": ["unknown_key"]}, _CTX, host
    )

    assert result.success
    assert result.data == {"updated": ["generate_settings"], "deleted": [], "rejected": ["unknown_key"]}
    assert builder.store.options == {"generate_settings": {"text_color": "#000"}}


async def test_update_options_null_deletes(provider, builder) -> None:
    host = builder.with_option("generate_a", 1).with_option("gp_b", 2).with_option("blogname", "x").build()

    result = await provider.update_options(
        {"updates": {"generate_a": None, "blogname": "y"}, "deletes": ["gp_b"]}, _CTX, host
    )

    assert result.data == {"updated": [], "deleted": ["generate_a", "gp_b"], "rejected": ["blogname"]}
    assert builder.store.options == {"blogname": "x"}


async def test_update_options_empty_touches_nothing(provider, builder) -> None:
    host = builder.with_option("generate_a", 1).build()

    result = await provider.update_options({"updates": {}, "deletes": []}, _CTX, host)

    assert not result.success
    assert result.message == "No updates or deletes provided."
    assert builder.store.options == {"generate_a": 1}


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


async def test_get_settings_all(provider, builder) -> None:
    host = builder.with_option("generate_settings", _SETTINGS).build()

    result = await provider.get_settings({}, _CTX, host)

    settings_view = result.data["settings"]
    assert result.message == "GeneratePress settings retrieved successfully"
    assert settings_view["global_colors"] == _SETTINGS["global_colors"]
    assert settings_view["colors"] == {"global_colors": _SETTINGS["global_colors"], "text_color": "#222222"}
    assert settings_view["typography"] == {"font_body": "Inter"}
    assert settings_view["layout"] == {"container_width": 1200}
    assert settings_view["buttons"] == {"form_button_text_color": "#ffffff"}
    assert settings_view["all_settings"] == _SETTINGS


async def test_get_settings_single_section(provider, builder) -> None:
    host = builder.with_option("generate_settings", _SETTINGS).build()

    typography = await provider.get_settings({"section": "typography"}, _CTX, host)
    assert typography.data["settings"] == {"typography": {"font_body": "Inter"}}

    identity = await provider.get_settings({"section": "site_identity"}, _CTX, host)
    assert identity.success
    assert identity.data["settings"] == {}


async def test_get_settings_missing(provider, builder) -> None:
    result = await provider.get_settings({}, _CTX, builder.build())
    assert not result.success
    assert result.message == "GeneratePress settings not found - is the theme active?"


async def test_update_settings_merges_and_is_idempotent(provider, builder) -> None:
    host = builder.with_option("generate_settings", {"text_color": "#111", "font_body": "Inter"}).build()
    payload = {"settings": {"text_color": "#333"}, "global_colors": [{"slug": "base", "color": "#fff"}]}

    first = await provider.update_settings(payload, _CTX, host)
    after_first = dict(builder.store.options["generate_settings"])
    await provider.update_settings(payload, _CTX, builder.build())

    assert first.success
    assert first.message == "GeneratePress settings updated successfully"
    assert after_first == {
        "text_color": "#333",
        "font_body": "Inter",
        "global_colors": [{"slug": "base", "color": "#fff"}],
    }
    assert builder.store.options["generate_settings"] == after_first
    assert builder.store.dynamic_css_regenerations == 2


async def test_update_settings_empty(provider, builder) -> None:
    result = await provider.update_settings({"settings": {}}, _CTX, builder.build())
    assert not result.success
    assert result.message == "No settings provided to update"


# ---------------------------------------------------------------------------
# Page meta
# ---------------------------------------------------------------------------


async def test_get_page_meta(provider, builder) -> None:
    builder.with_post(
        "page", "About", meta={"_generate-disable-headline": "true", "_generate_custom": "x", "_edit_lock": "1"}
    )
    post_id = builder.last_post_id

    result = await provider.get_page_meta(
        {"id": post_id, "meta_keys": ["_generate_custom", "_edit_lock", ""]}, _CTX, builder.build()
    )

    assert result.success
    assert result.data["id"] == post_id
    assert result.data["meta"]["disable_headline"] == "true"
    assert result.data["meta"]["sidebar_layout"] == ""
    assert set(result.data["meta"]) == {
        "disable_headline",
        "disable_nav",
        "disable_footer",
        "disable_footer_widgets",
        "sidebar_layout",
        "content_area",
        "transparent_header",
        "sticky_header",
    }
    assert result.data["raw_meta"] == {"_generate_custom": "x"}
    assert result.data["rejected"] == ["_edit_lock"]


async def test_get_page_meta_missing_post(provider, builder) -> None:
    host = builder.build()

    assert (await provider.get_page_meta({"id": 999}, _CTX, host)).message == "Post 999 not found"
    assert (await provider.get_page_meta({"id": 0}, _CTX, host)).message == "Post ID is required"


async def test_update_page_meta_flag_true(provider, builder) -> None:
    post_id = builder.with_post("page", "Home").last_post_id

    result = await provider.update_page_meta({"id": post_id, "disable_headline": True}, _CTX, builder.build())

    assert result.success
    assert result.data["updated"] == ["disable_headline = true"]
    assert builder.store.meta[post_id]["_generate-disable-headline"] == "true"


async def test_update_page_meta_flag_false_removes(provider, builder) -> None:
    post_id = builder.with_post("page", "Home", meta={"_generate-disable-headline": "true"}).last_post_id

    result = await provider.update_page_meta({"id": post_id, "disable_headline": False}, _CTX, builder.build())

    assert result.data["updated"] == ["disable_headline = false (removed)"]
    assert "_generate-disable-headline" not in builder.store.meta[post_id]


async def test_update_page_meta_text_and_custom(provider, builder) -> None:
    post_id = builder.with_post(
        "page", "Home", meta={"_generate-content-area-meta": "full-width", "_generate_y": "old"}
    ).last_post_id

    result = await provider.update_page_meta(
        {
            "id": post_id,
            "sidebar_layout": "no-sidebar",
            "content_area": "",
            "custom_meta": {"_generate_x": "1", "_generate_y": None, "_thumbnail_id": 9},
        },
        _CTX,
        builder.build(),
    )

    assert result.message == f"GeneratePress page meta updated for post {post_id}"
    assert result.data["updated"] == [
        "sidebar_layout = no-sidebar",
        "content_area = '' (removed)",
        "_generate_x updated",
        "_generate_y = null (removed)",
    ]
    assert builder.store.meta[post_id] == {"_generate-sidebar-layout-meta": "no-sidebar", "_generate_x": "1"}


async def test_update_page_meta_nothing_valid(provider, builder) -> None:
    post_id = builder.with_post("page", "Home").last_post_id

    result = await provider.update_page_meta(
        {"id": post_id, "custom_meta": {"_thumbnail_id": 9}}, _CTX, builder.build()
    )

    assert not result.success
    assert result.message == "No valid settings provided to update"
    assert builder.store.meta[post_id] == {}


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------


async def test_elements_unavailable(provider, builder) -> None:
    host = builder.without_post_type("gp_elements").build()
    for handler, params in (
        (provider.list_elements, {}),
        (provider.get_element, {"id": 1}),
        (provider.create_element, {"title": "Header Hook"}),
        (provider.update_element, {"id": 1}),
        (provider.delete_element, {"id": 1}),
    ):
        result = await handler(params, _CTX, host)
        assert not result.success
        assert result.message == "GeneratePress Elements are not available (gp_elements post type missing)."


async def test_list_elements_filters_and_shapes(provider, builder) -> None:
    builder.with_element(
        "Footer Hook",
        meta={"_generate_element_type": "hook", "_generate_hook": "wp_footer", "_generate_element_content": "<p>x</p>"},
        modified_gmt="2024-01-02 00:00:00",
    )
    hook_id = builder.last_post_id
    builder.with_element("Header", meta={"_generate_element_type": "header"}, modified_gmt="2024-01-03 00:00:00")
    builder.with_element("Untyped", modified_gmt="2024-01-01 00:00:00")
    host = builder.build()

    everything = await provider.list_elements({}, _CTX, host)
    assert everything.data["total"] == 3
    assert [e["title"] for e in everything.data["elements"]] == ["Header", "Footer Hook", "Untyped"]
    assert "element_type" not in everything.data["elements"][2]
    assert "meta" not in everything.data["elements"][0]

    hooks = await provider.list_elements(
        {"element_type": "hook", "include_meta": True, "include_content": True, "meta_keys": ["_generate_extra", "x"]},
        _CTX,
        host,
    )
    (item,) = hooks.data["elements"]
    assert item["id"] == hook_id
    assert item["element_type"] == "hook"
    assert item["content"] == "<p>x</p>"
    assert item["meta"]["_generate_hook"] == "wp_footer"
    assert item["meta"]["_generate_element_content"] == "<p>x</p>"
    assert item["meta"]["_generate_extra"] == ""
    assert "x" not in item["meta"]


async def test_list_elements_clamps_per_page(provider, builder) -> None:
    for i in range(3):
        builder.with_element(f"Element {i}")
    host = builder.build()

    result = await provider.list_elements({"per_page": 0, "page": -1}, _CTX, host)
    assert len(result.data["elements"]) == 1
    assert result.data["pages"] == 3

    result = await provider.list_elements({"per_page": 5000}, _CTX, host)
    assert len(result.data["elements"]) == 3
    assert result.data["pages"] == 1


async def test_get_element(provider, builder) -> None:
    builder.with_element(
        "Top Bar",
        meta={"_generate_element_type": "block", "_generate_custom": "c"},
        content="<!-- wp:paragraph -->",
        slug="top-bar",
    )
    element_id = builder.last_post_id
    host = builder.build()

    result = await provider.get_element({"id": element_id, "meta_keys": ["_generate_custom"]}, _CTX, host)

    assert result.success
    assert result.data["title"] == "Top Bar"
    assert result.data["slug"] == "top-bar"
    assert result.data["element_type"] == "block"
    # No content meta stored, so the post body is reported
    assert result.data["content"] == "<!-- wp:paragraph -->"
    assert result.data["post_content"] == "<!-- wp:paragraph -->"
    assert result.data["meta"]["_generate_custom"] == "c"

    bare = await provider.get_element(
        {"id": element_id, "include_meta": False, "include_content": False}, _CTX, host
    )
    assert bare.data["meta"] == {}
    assert bare.data["content"] == ""


async def test_get_element_rejects_other_post_types(provider, builder) -> None:
    page_id = builder.with_post("page", "About").last_post_id
    host = builder.build()

    assert (await provider.get_element({"id": page_id}, _CTX, host)).message == "Element not found."
    assert (await provider.get_element({"id": 0}, _CTX, host)).message == "Element ID is required."


async def test_create_element_title_only(provider, builder) -> None:
    result = await provider.create_element({"title": "Header Hook"}, _CTX, builder.build())

    assert result.success
    assert result.message == "GeneratePress element created successfully"
    element_id = result.data["id"]
    post = builder.store.posts[element_id]
    assert post.post_type == "gp_elements"
    assert post.status == "publish"
    assert post.slug == "header-hook"
    assert builder.store.meta[element_id] == {}


async def test_create_element_full(provider, builder) -> None:
    conditions = [{"rule": "general:site", "object": ""}]
    result = await provider.create_element(
        {
            "title": "<b>Footer</b> Hook",
            "status": "draft",
            "slug": "My Footer",
            "element_type": "hook",
            "hook": "generate_after_header",
            "priority": 20,
            "execute_php": True,
            "content": "<p>Hi</p>",
            "display_conditions": conditions,
            "meta": {"_generate_custom": "x", "_thumbnail_id": 1},
        },
        _CTX,
        builder.build(),
    )

    element_id = result.data["id"]
    post = builder.store.posts[element_id]
    assert (post.title, post.status, post.slug, post.content) == ("Footer Hook", "draft", "my-footer", "<p>Hi</p>")
    assert builder.store.meta[element_id] == {
        "_generate_element_content": "<p>Hi</p>",
        "_generate_element_type": "hook",
        "_generate_hook": "generate_after_header",
        "_generate_hook_priority": 20,
        "_generate_hook_execute_php": "true",
        "_generate_element_display_conditions": conditions,
        "_generate_custom": "x",
    }


async def test_create_element_blank_title(provider, builder) -> None:
    result = await provider.create_element({"title": "  <i></i> "}, _CTX, builder.build())
    assert not result.success
    assert result.message == "Element title is required."
    assert builder.store.posts == {}


async def test_update_element(provider, builder) -> None:
    builder.with_element(
        "Old",
        meta={
            "_generate_hook_execute_php": "true",
            "_generate_custom": "x",
            "_generate_element_content": "old",
        },
        content="old",
    )
    element_id = builder.last_post_id

    result = await provider.update_element(
        {"id": element_id, "title": "New", "content": "", "execute_php": False, "meta": {"_generate_custom": None}},
        _CTX,
        builder.build(),
    )

    assert result.success
    assert result.data["id"] == element_id
    post = builder.store.posts[element_id]
    assert (post.title, post.content) == ("New", "")
    assert builder.store.meta[element_id] == {"_generate_element_content": ""}


async def test_update_element_leaves_absent_fields(provider, builder) -> None:
    builder.with_element("Keep", meta={"_generate_hook": "wp_head"}, slug="keep")
    element_id = builder.last_post_id

    await provider.update_element({"id": element_id, "priority": 5}, _CTX, builder.build())

    post = builder.store.posts[element_id]
    assert (post.title, post.slug) == ("Keep", "keep")
    assert builder.store.meta[element_id] == {"_generate_hook": "wp_head", "_generate_hook_priority": 5}


async def test_delete_element_trash_then_force(provider, builder) -> None:
    element_id = builder.with_element("Gone").last_post_id
    host = builder.build()

    trashed = await provider.delete_element({"id": element_id}, _CTX, host)
    assert trashed.success
    assert trashed.message == "GeneratePress element deleted successfully"
    assert builder.store.posts[element_id].status == "trash"

    forced = await provider.delete_element({"id": element_id, "force": True}, _CTX, host)
    assert forced.success
    assert element_id not in builder.store.posts

    missing = await provider.delete_element({"id": element_id}, _CTX, host)
    assert missing.message == "Element not found."
