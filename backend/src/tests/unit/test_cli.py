"""Tests for the gp-abilities command line."""

import json

from gp_abilities.cli import main


def test_list(capsys) -> None:
    assert main(["list", "--category", "site"]) == 0
    abilities = json.loads(capsys.readouterr().out)
    assert len(abilities) == 17
    assert {"name": "generatepress/get-info", "label": "Get GeneratePress Theme Info", "category": "site"} in abilities


def test_describe(capsys) -> None:
    assert main(["describe", "generateblocks/clear-cache"]) == 0
    assert json.loads(capsys.readouterr().out)["output_schema"]["properties"]["deleted"] == {"type": "integer"}


def test_describe_unknown(capsys) -> None:
    assert main(["describe", "generateblocks/nope"]) == 2
    assert json.loads(capsys.readouterr().out)["error"]["code"] == "ABILITY_NOT_FOUND"


def test_run(store, capsys) -> None:
    store.seed_option("generate_settings", {"text_color": "#222"})
    code = main(["run", "generatepress/get-options", "--input", '{"options": ["generate_settings"]}'])
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["options"] == {"generate_settings": {"text_color": "#222"}}


def test_run_semantic_failure(store, capsys) -> None:
    assert main(["run", "generatepress/get-settings"]) == 1
    assert json.loads(capsys.readouterr().out)["success"] is False


def test_run_rejected_input(store, capsys) -> None:
    assert main(["run", "generatepress/get-options", "--input", "{}"]) == 2
    assert json.loads(capsys.readouterr().out)["error"]["code"] == "ABILITY_INVALID_INPUT"


def test_run_bad_json(store, capsys) -> None:
    assert main(["run", "generatepress/get-info", "--input", "{not json"]) == 2
    assert "not valid JSON" in capsys.readouterr().err
