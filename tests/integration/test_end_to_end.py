from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from staticpod_validator.cli.main import app


runner = CliRunner()
FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


def test_cli_validate_valid_json():
    result = runner.invoke(app, ["validate", str(FIXTURES / "staticpod_valid.yaml"), "--output", "json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["reports"][0]["allowed"] is True
    assert data["reports"][0]["name"] == "yurt-hub"
    assert data["warnings"] == []


def test_cli_validate_invalid_exits_nonzero():
    result = runner.invoke(app, ["validate", str(FIXTURES / "staticpod_invalid.yaml"), "--output", "json"])
    assert result.exit_code == 1
    report = json.loads(result.stdout)["reports"][0]
    assert report["allowed"] is False
    assert report["reason"] == "Invalid"
    assert [(v["path"], v["kind"]) for v in report["violations"]] == [
        ("spec.StaticPodManifest", "FieldValueRequired"),
        ("spec.upgradeStrategy", "FieldValueNotSupported"),
    ]


def test_cli_validate_mixed_kinds():
    result = runner.invoke(app, ["validate", str(FIXTURES / "mixed.yaml"), "--output", "json"])
    assert result.exit_code == 1
    reports = json.loads(result.stdout)["reports"]
    assert [(r["name"], r["allowed"], r["reason"]) for r in reports] == [
        ("ota-pod", True, None),
        ("not-a-static-pod", False, "BadRequest"),
    ]
    assert reports[1]["message"] == "expected a StaticPod but got a UnstructuredObject"


def test_cli_unknown_format_and_missing_file():
    result = runner.invoke(app, ["validate", str(FIXTURES / "staticpod_valid.yaml"), "--output", "xml"])
    assert result.exit_code == 2
    result = runner.invoke(app, ["validate", str(FIXTURES / "nope.yaml")])
    assert result.exit_code == 1


def test_cli_review_update():
    result = runner.invoke(app, ["review", str(FIXTURES / "review_update.json")])
    assert result.exit_code == 0
    resp = json.loads(result.stdout)["response"]
    assert resp["uid"] == "705ab4f5-6393-11e8-b7cc-42010a800002"
    assert resp["allowed"] is False

    result = runner.invoke(app, ["review", str(FIXTURES / "review_update.json"), "--skip-previous-on-update"])
    assert json.loads(result.stdout)["response"]["allowed"] is True
