# WP-CLI store
# Invariants:
# - All WordPress access goes through _run(); callers never build global flags.
# - Every command gets --path=<site> --no-color; --user=<login> when configured.
# - Reads that need exact WordPress semantics (get_option with a marker,
#   get_post_meta(..., true), WP_Query) run through `wp eval` and print one
#   JSON envelope {"result": ...}; arguments travel base64-encoded JSON so no
#   value is ever interpolated into PHP source.
# - Output parsing strips ANSI and PHP/WP noise, then extracts the JSON blob.
# - Logs: one PASS/FAIL line per command.

from __future__ import annotations

import asyncio
import base64
import fnmatch
import json
import os
import re
import time
from pathlib import Path
from typing import Any

from ..core.exceptions import StoreError
from ..core.logging import get_logger
from .base import MISSING, OptionRow, Post, PostQuery, PostQueryResult, PremiumInfo, ThemeInfo

logger = get_logger(__name__)

# Hush update checks and PHP notices so stdout stays parseable
_WP_ENV = {
    "WP_CLI_DISABLE_AUTO_CHECK_UPDATE": "1",
    "WP_CLI_SILENCE_PHP_ERRORS": "1",
    "WP_CLI_PHP_ARGS": "-d display_errors=0 -d display_startup_errors=0",
}

# ── Noise filters ───────────────────────────────────────────────────────────────
ANSI_RE = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")
NOISE_PREFIXES = (
    "PHP Warning:", "PHP Notice:", "PHP Deprecated:", "PHP Fatal error:",
    "Warning:", "Notice:", "Deprecated:", "Fatal error:", "PHP:",
)
NOISE_PATTERNS = (
    re.compile(r"^#\d+:"),  # stack frames
    re.compile(r"^'trace'\s*=>"),
)

_MISSING_MARKER = "__gp_abilities_missing__"


def _strip_ansi(s: str) -> str:
    return ANSI_RE.sub("", s)


def _drop_noise_lines(text: str) -> list[str]:
    out: list[str] = []
    for ln in (line.strip() for line in text.splitlines()):
        if not ln:
            continue
        if ln.startswith(NOISE_PREFIXES):
            continue
        if any(p.search(ln) for p in NOISE_PATTERNS):
            continue
        out.append(ln)
    return out


def extract_json_blob(s: str) -> str | None:
    """Return the first balanced JSON object/array found in text.

    Scans for the earliest '[' or '{' and returns the substring spanning the
    matching bracket, tolerating strings and escapes. None if not found.
    """
    if not s:
        return None
    lb, lb2 = s.find("["), s.find("{")
    if lb == -1 and lb2 == -1:
        return None
    if lb == -1 or (lb2 != -1 and lb2 < lb):
        start, open_c, close_c = lb2, "{", "}"
    else:
        start, open_c, close_c = lb, "[", "]"

    depth = 0
    in_str = False
    esc = False
    for i in range(start, len(s)):
        ch = s[i]
        if in_str:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch == open_c:
            depth += 1
        elif ch == close_c:
            depth -= 1
            if depth == 0:
                return s[start : i + 1]
    return None


def parse_json_output(text: str) -> Any:
    """Parse WP-CLI stdout that should hold JSON, ignoring surrounding noise."""
    cleaned = "\n".join(_drop_noise_lines(_strip_ansi(text))).strip()
    blob = extract_json_blob(cleaned)
    if blob is None:
        raise ValueError(f"no JSON in output: {cleaned[:200]!r}")
    return json.loads(blob)


def _php_args(args: dict[str, Any]) -> str:
    encoded = base64.b64encode(json.dumps(args).encode("utf-8")).decode("ascii")
    return f"$a = json_decode(base64_decode('{encoded}'), true);"


_THEME_PHP = """
$t = wp_get_theme();
$p = $t->parent();
$r = array(
    'name' => $t->get('Name'),
    'version' => $t->get('Version'),
    'template' => $t->get_template(),
    'stylesheet' => $t->get_stylesheet(),
    'parent_name' => $p ? $p->get('Name') : '',
    'parent_version' => $p ? $p->get('Version') : '',
    'parent_template' => $p ? $p->get_template() : '',
);
"""

_PREMIUM_PHP = """
$r = array(
    'active' => class_exists('GP_Premium') || defined('GP_PREMIUM_VERSION'),
    'version' => defined('GP_PREMIUM_VERSION') ? GP_PREMIUM_VERSION : '',
);
"""

_REGENERATE_CSS_PHP = """
$r = function_exists('generate_update_dynamic_css_cache');
if ($r) { generate_update_dynamic_css_cache(); }
"""

_POST_FIELDS_PHP = """
$row = function ($p) {
    return array(
        'id' => (int) $p->ID,
        'post_type' => $p->post_type,
        'title' => $p->post_title,
        'status' => $p->post_status,
        'slug' => $p->post_name,
        'content' => $p->post_content,
        'date_gmt' => $p->post_date_gmt,
        'modified_gmt' => $p->post_modified_gmt,
        'menu_order' => (int) $p->menu_order,
    );
};
"""

_QUERY_PHP = _POST_FIELDS_PHP + """
$q = new WP_Query($a);
$r = array('posts' => array_map($row, $q->posts), 'total' => (int) $q->found_posts);
"""

_GET_POST_PHP = _POST_FIELDS_PHP + """
$p = get_post((int) $a['id']);
$r = $p ? $row($p) : null;
"""

_LIST_OPTIONS_PHP = """
global $wpdb;
$c = array();
foreach ($a['prefixes'] as $prefix) {
    $c[] = $wpdb->prepare('option_name LIKE %s', $wpdb->esc_like($prefix) . '%');
}
foreach ($a['names'] as $name) {
    $c[] = $wpdb->prepare('option_name = %s', $name);
}
$r = $c ? $wpdb->get_results(
    'SELECT option_name, autoload FROM ' . $wpdb->options . ' WHERE ' . implode(' OR ', $c)
    . ' ORDER BY option_name ASC LIMIT ' . (int) $a['limit'] . ' OFFSET ' . (int) $a['offset'],
    ARRAY_A
) : array();
"""

_ORDERBY = {"date": "date", "modified": "modified", "title": "title", "menu_order": "menu_order", "ID": "ID"}


class WpCliStore:
    """``WordPressStore`` backed by the ``wp`` command line on the same host."""

    def __init__(
        self,
        *,
        wp_path: str,
        wp_cli_path: str = "wp",
        timeout: float = 60.0,
        user: str | None = None,
    ) -> None:
        self.wp_path = wp_path
        self.wp_cli_path = wp_cli_path
        self.timeout = timeout
        self.user = user

    # -- process plumbing -------------------------------------------------

    def _argv(self, parts: list[str]) -> list[str]:
        argv = [self.wp_cli_path, f"--path={self.wp_path}", *parts]
        if "--no-color" not in argv:
            argv.append("--no-color")
        if self.user:
            argv.append(f"--user={self.user}")
        return argv

    async def _run(self, parts: list[str]) -> tuple[int, str, str]:
        argv = self._argv(parts)
        shown = "wp " + " ".join(parts[:3])
        env = {**os.environ, **_WP_ENV}
        t0 = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            raise StoreError(shown, f"cannot start WP-CLI: {e}") from e
        try:
            out_b, err_b = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            dt = time.monotonic() - t0
            logger.error("FAIL: %s timeout after %.1fs", shown, dt)
            raise StoreError(shown, f"timeout after {dt:.1f}s") from None

        dt = time.monotonic() - t0
        out = out_b.decode("utf-8", errors="replace")
        err = err_b.decode("utf-8", errors="replace")
        if proc.returncode == 0:
            logger.debug("PASS: %s (%.1fs)", shown, dt)
        else:
            logger.debug("FAIL: %s exit=%s (%.1fs)", shown, proc.returncode, dt)
        return proc.returncode, out, err

    async def _checked(self, parts: list[str]) -> str:
        code, out, err = await self._run(parts)
        if code != 0:
            clean_err = "\n".join(_drop_noise_lines(_strip_ansi(err))) or f"exit code {code}"
            logger.error("FAIL: wp %s\nSTDERR: %s", " ".join(parts[:3]), clean_err)
            raise StoreError("wp " + " ".join(parts[:2]), clean_err)
        return out

    async def _eval(self, php: str, args: dict[str, Any] | None = None) -> Any:
        """Run PHP that assigns ``$r`` and return ``$r`` decoded from JSON."""
        script = _php_args(args or {}) + php + "\necho wp_json_encode(array('result' => $r));"
        out = await self._checked(["eval", script])
        try:
            return parse_json_output(out)["result"]
        except (ValueError, KeyError, TypeError) as e:
            raise StoreError("wp eval", f"unparseable output: {e}") from e

    # -- options ------------------------------------------------------------

    async def get_option(self, name: str, default: Any = MISSING) -> Any:
        value = await self._eval(
            "$r = get_option($a['name'], $a['marker']);",
            {"name": name, "marker": _MISSING_MARKER},
        )
        return default if value == _MISSING_MARKER else value

    async def update_option(self, name: str, value: Any) -> None:
        await self._checked(["option", "update", name, json.dumps(value), "--format=json"])

    async def delete_option(self, name: str) -> bool:
        return bool(await self._eval("$r = delete_option($a['name']);", {"name": name}))

    async def list_options(self, prefixes: list[str], names: list[str], limit: int, offset: int) -> list[OptionRow]:
        rows = await self._eval(
            _LIST_OPTIONS_PHP, {"prefixes": prefixes, "names": names, "limit": limit, "offset": offset}
        )
        return [OptionRow(r["option_name"], r.get("autoload", "yes")) for r in rows or []]

    # -- theme ----------------------------------------------------------------

    async def get_theme(self) -> ThemeInfo:
        data = await self._eval(_THEME_PHP)
        return ThemeInfo(**{k: str(v or "") for k, v in data.items()})

    async def get_premium(self) -> PremiumInfo:
        data = await self._eval(_PREMIUM_PHP)
        return PremiumInfo(active=bool(data.get("active")), version=str(data.get("version") or ""))

    async def regenerate_dynamic_css(self) -> bool:
        return bool(await self._eval(_REGENERATE_CSS_PHP))

    # -- posts ----------------------------------------------------------------

    async def post_type_exists(self, post_type: str) -> bool:
        return bool(await self._eval("$r = post_type_exists($a['type']);", {"type": post_type}))

    async def get_post(self, post_id: int) -> Post | None:
        data = await self._eval(_GET_POST_PHP, {"id": post_id})
        return Post(**data) if data else None

    async def insert_post(
        self, *, post_type: str, title: str, status: str, slug: str = "", content: str = ""
    ) -> int:
        parts = [
            "post", "create",
            f"--post_type={post_type}",
            f"--post_title={title}",
            f"--post_status={status}",
            f"--post_content={content}",
            "--porcelain",
        ]
        if slug:
            parts.insert(-1, f"--post_name={slug}")
        out = await self._checked(parts)
        lines = _drop_noise_lines(_strip_ansi(out))
        try:
            return int(lines[-1])
        except (IndexError, ValueError):
            raise StoreError("wp post create", f"no post ID in output: {out[:200]!r}") from None

    async def update_post(self, post_id: int, fields: dict[str, Any]) -> None:
        column = {"title": "post_title", "status": "post_status", "slug": "post_name", "content": "post_content"}
        parts = ["post", "update", str(post_id)]
        parts += [f"--{column[k]}={v}" for k, v in fields.items()]
        await self._checked(parts)

    async def delete_post(self, post_id: int, force: bool = False) -> bool:
        # `wp post delete` without --force refuses to trash custom post types
        php = (
            "$r = (bool) wp_delete_post((int) $a['id'], true);"
            if force
            else "$r = (bool) wp_trash_post((int) $a['id']);"
        )
        return bool(await self._eval(php, {"id": post_id}))

    async def query_posts(self, query: PostQuery) -> PostQueryResult:
        args: dict[str, Any] = {
            "post_type": query.post_type,
            "post_status": query.status,
            "posts_per_page": query.per_page,
            "paged": query.page,
            "orderby": _ORDERBY.get(query.orderby, "modified"),
            "order": query.order,
            "s": query.search,
        }
        if query.meta_equals:
            args["meta_query"] = [
                {"key": k, "value": v, "compare": "="} for k, v in query.meta_equals.items()
            ]
        data = await self._eval(_QUERY_PHP, args)
        return PostQueryResult(
            posts=[Post(**p) for p in data.get("posts", [])],
            total=int(data.get("total", 0)),
            per_page=query.per_page,
        )

    # -- post meta ------------------------------------------------------------

    async def get_post_meta(self, post_id: int, key: str) -> Any:
        return await self._eval("$r = get_post_meta((int) $a['id'], $a['key'], true);", {"id": post_id, "key": key})

    async def update_post_meta(self, post_id: int, key: str, value: Any) -> None:
        await self._eval(
            "$r = update_post_meta((int) $a['id'], $a['key'], $a['value']);",
            {"id": post_id, "key": key, "value": value},
        )

    async def delete_post_meta(self, post_id: int, key: str) -> bool:
        return bool(
            await self._eval("$r = delete_post_meta((int) $a['id'], $a['key']);", {"id": post_id, "key": key})
        )

    # -- uploads --------------------------------------------------------------

    async def uploads_basedir(self) -> str:
        return str(await self._eval("$u = wp_upload_dir(); $r = $u['basedir'];"))

    async def list_files(self, directory: str, pattern: str) -> list[str]:
        path = Path(directory)
        if not path.is_dir():
            return []
        return sorted(str(p) for p in path.iterdir() if p.is_file() and fnmatch.fnmatch(p.name, pattern))

    async def delete_file(self, path: str) -> bool:
        try:
            os.unlink(path)
        except OSError as e:
            logger.warning("Failed to delete file", extra={"path": path, "error": str(e)})
            return False
        return True
