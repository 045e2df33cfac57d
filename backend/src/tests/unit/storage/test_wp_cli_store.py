"""Unit tests for the WP-CLI store.

``asyncio.create_subprocess_exec`` is replaced with a fake process so no
``wp`` binary is needed; each test scripts the stdout/stderr/exit code the
command would produce and inspects the argv the store built.
"""

from __future__ import annotations

import asyncio
import base64
import json
import re

import pytest

from gp_abilities.core.exceptions import StoreError
from gp_abilities.storage import MISSING, PostQuery
from gp_abilities.storage import wp_cli
from gp_abilities.storage.wp_cli import WpCliStore, extract_json_blob, parse_json_output


class _FakeProcess:
    def __init__(self, stdout: str = "", stderr: str = "", returncode: int = 0, delay: float = 0.0):
        self._stdout = stdout.encode()
        self._stderr = stderr.encode()
        self._delay = delay
        self.returncode = returncode
        self.killed = False

    async def communicate(self):
        if self._delay:
            await asyncio.sleep(self._delay)
        return self._stdout, self._stderr

    def kill(self) -> None:
        self.killed = True

    async def wait(self) -> int:
        return self.returncode


class _Recorder:
    """Stands in for create_subprocess_exec, replaying scripted processes in order."""

    def __init__(self, *processes: _FakeProcess):
        self.processes = list(processes)
        self.calls: list[list[str]] = []

    async def __call__(self, *argv, **kwargs):
        self.calls.append(list(argv))
        return self.processes.pop(0)


def _result(value) -> _FakeProcess:
    return _FakeProcess(stdout=json.dumps({"result": value}))


def _eval_args(argv: list[str]) -> dict:
    """Decode the base64 argument block a ``wp eval`` call carries."""
    script = argv[argv.index("eval") + 1]
    encoded = re.search(r"base64_decode\('([^']+)'\)", script).group(1)
    return json.loads(base64.b64decode(encoded))


@pytest.fixture
def wp():
    return WpCliStore(wp_path="/var/www/site", wp_cli_path="/usr/local/bin/wp", timeout=5, user="admin")


def _install(monkeypatch, *processes: _FakeProcess) -> _Recorder:
    recorder = _Recorder(*processes)
    monkeypatch.setattr(wp_cli.asyncio, "create_subprocess_exec", recorder)
    return recorder


class TestOutputParsing:
    def test_extract_first_balanced_object(self) -> None:
        text = 'Success: done {"a": {"b": "}"}, "c": [1, 2]} trailing {"x": 1}'
        assert extract_json_blob(text) == '{"a": {"b": "}"}, "c": [1, 2]}'

    def test_extract_array_before_object(self) -> None:
        assert extract_json_blob('[{"a": 1}]') == '[{"a": 1}]'

    def test_extract_none(self) -> None:
        assert extract_json_blob("") is None
        assert extract_json_blob("no json here") is None
        assert extract_json_blob('{"unterminated": ') is None

    def test_parse_skips_php_noise_and_ansi(self) -> None:
        out = (
            "PHP Deprecated:  Creation of dynamic property in /wp/x.php on line 3\n"
            "\x1b[33mWarning: something {odd}\x1b[0m\n"
            '{"result": {"ok": true}}\n'
        )
        assert parse_json_output(out) == {"result": {"ok": True}}

    def test_parse_raises_without_json(self) -> None:
        with pytest.raises(ValueError, match="no JSON"):
            parse_json_output("Error: nothing")


class TestProcessPlumbing:
    async def test_global_flags(self, wp, monkeypatch) -> None:
        recorder = _install(monkeypatch, _result(True))
        await wp.post_type_exists("gp_elements")

        argv = recorder.calls[0]
        assert argv[0] == "/usr/local/bin/wp"
        assert argv[1] == "--path=/var/www/site"
        assert "--no-color" in argv
        assert argv[-1] == "--user=admin"

    async def test_nonzero_exit_raises_store_error(self, wp, monkeypatch) -> None:
        stderr = "Error: This does not seem to be a WordPress installation."
        _install(monkeypatch, _FakeProcess(stderr=stderr, returncode=1))
        with pytest.raises(StoreError, match="does not seem to be a WordPress installation"):
            await wp.get_theme()

    async def test_timeout_kills_process(self, wp, monkeypatch) -> None:
        wp.timeout = 0.01
        proc = _FakeProcess(delay=1.0)
        _install(monkeypatch, proc)
        with pytest.raises(StoreError, match="timeout"):
            await wp.get_premium()
        assert proc.killed

    async def test_missing_binary(self, wp, monkeypatch) -> None:
        async def boom(*argv, **kwargs):
            raise FileNotFoundError("wp")

        monkeypatch.setattr(wp_cli.asyncio, "create_subprocess_exec", boom)
        with pytest.raises(StoreError, match="cannot start WP-CLI"):
            await wp.uploads_basedir()

    async def test_unparseable_eval_output(self, wp, monkeypatch) -> None:
        _install(monkeypatch, _FakeProcess(stdout="Fatal error: oops"))
        with pytest.raises(StoreError, match="unparseable output"):
            await wp.post_type_exists("gp_elements")


class TestOptions:
    async def test_missing_marker_maps_to_default(self, wp, monkeypatch) -> None:
        recorder = _install(monkeypatch, _result("__gp_abilities_missing__"), _result({"a": 1}))

        assert await wp.get_option("generate_settings") is MISSING
        assert await wp.get_option("generate_settings") == {"a": 1}
        assert _eval_args(recorder.calls[0])["name"] == "generate_settings"

    async def test_update_sends_json(self, wp, monkeypatch) -> None:
        recorder = _install(monkeypatch, _FakeProcess(stdout="Success: Updated 'generate_settings' option."))
        await wp.update_option("generate_settings", {"text_color": "#222"})

        argv = recorder.calls[0]
        i = argv.index("option")
        assert argv[i : i + 5] == ["option", "update", "generate_settings", '{"text_color": "#222"}', "--format=json"]

    async def test_list_options_rows(self, wp, monkeypatch) -> None:
        recorder = _install(monkeypatch, _result([{"option_name": "generate_settings", "autoload": "yes"}]))
        rows = await wp.list_options(["generate_"], ["theme_mods_generatepress"], limit=10, offset=5)

        assert [r.to_dict() for r in rows] == [{"option_name": "generate_settings", "autoload": "yes"}]
        assert _eval_args(recorder.calls[0]) == {
            "prefixes": ["generate_"],
            "names": ["theme_mods_generatepress"],
            "limit": 10,
            "offset": 5,
        }


class TestPosts:
    async def test_get_theme(self, wp, monkeypatch) -> None:
        _install(
            monkeypatch,
            _result(
                {
                    "name": "Child",
                    "version": "1.0",
                    "template": "generatepress",
                    "stylesheet": "child",
                    "parent_name": "GeneratePress",
                    "parent_version": "3.5.1",
                    "parent_template": "generatepress",
                }
            ),
        )
        theme = await wp.get_theme()
        assert theme.is_child
        assert theme.is_generatepress

    async def test_insert_parses_porcelain_id(self, wp, monkeypatch) -> None:
        recorder = _install(monkeypatch, _FakeProcess(stdout="42\n"))
        post_id = await wp.insert_post(post_type="gp_elements", title="Top Bar", status="draft", slug="top-bar")

        assert post_id == 42
        argv = recorder.calls[0]
        assert "--post_type=gp_elements" in argv
        assert "--post_name=top-bar" in argv
        assert argv.index("--post_name=top-bar") < argv.index("--porcelain")

    async def test_insert_without_id_raises(self, wp, monkeypatch) -> None:
        _install(monkeypatch, _FakeProcess(stdout="Success: maybe"))
        with pytest.raises(StoreError, match="no post ID"):
            await wp.insert_post(post_type="gp_elements", title="X", status="publish")

    async def test_update_maps_columns(self, wp, monkeypatch) -> None:
        recorder = _install(monkeypatch, _FakeProcess(stdout="Success: Updated post 7."))
        await wp.update_post(7, {"title": "New", "slug": "new"})
        assert "--post_title=New" in recorder.calls[0]
        assert "--post_name=new" in recorder.calls[0]

    async def test_delete_trashes_custom_post_types(self, wp, monkeypatch) -> None:
        recorder = _install(monkeypatch, _result(True), _result(True), _result(False))
        assert await wp.delete_post(7) is True
        assert await wp.delete_post(7, force=True) is True
        assert await wp.delete_post(8) is False

        trash_script = recorder.calls[0][recorder.calls[0].index("eval") + 1]
        force_script = recorder.calls[1][recorder.calls[1].index("eval") + 1]
        assert "wp_trash_post" in trash_script
        assert "wp_delete_post" in force_script
        assert _eval_args(recorder.calls[0]) == {"id": 7}

    async def test_query_builds_wp_query_args(self, wp, monkeypatch) -> None:
        row = {
            "id": 3,
            "post_type": "gp_elements",
            "title": "Hook",
            "status": "publish",
            "slug": "hook",
            "content": "",
            "date_gmt": "2024-01-01 00:00:00",
            "modified_gmt": "2024-01-02 00:00:00",
            "menu_order": 0,
        }
        recorder = _install(monkeypatch, _result({"posts": [row], "total": 11}))
        result = await wp.query_posts(
            PostQuery(post_type="gp_elements", meta_equals={"_generate_element_type": "hook"}, per_page=5, page=2)
        )

        assert result.total == 11
        assert result.pages == 3
        assert result.posts[0].title == "Hook"
        args = _eval_args(recorder.calls[0])
        assert args["posts_per_page"] == 5
        assert args["paged"] == 2
        assert args["meta_query"] == [{"key": "_generate_element_type", "value": "hook", "compare": "="}]
