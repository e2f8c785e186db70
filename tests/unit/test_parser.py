from __future__ import annotations

from pathlib import Path

import pytest

from staticpod_validator.core.exceptions import ParseError
from staticpod_validator.models.resources import StaticPod, UnstructuredObject
from staticpod_validator.parsers.yaml_parser import parse_files


FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


def test_parse_static_pod():
    out = parse_files([str(FIXTURES / "staticpod_valid.yaml")])
    assert len(out.objects) == 1
    sp = out.objects[0].obj
    assert isinstance(sp, StaticPod)
    assert sp.metadata.name == "yurt-hub"
    assert sp.spec.static_pod_manifest == "yurthub"
    assert sp.spec.upgrade_strategy.type == "AdvancedRollingUpdate"
    assert sp.spec.upgrade_strategy.max_unavailable == "10%"
    assert sp.spec.template["spec"]["hostNetwork"] is True


def test_parse_multi_document_mixed_kinds():
    out = parse_files([str(FIXTURES / "mixed.yaml")])
    kinds = [type(o.obj) for o in out.objects]
    assert kinds == [StaticPod, UnstructuredObject]
    assert out.objects[1].obj.kind == "ConfigMap"
    assert out.objects[1].source.endswith("mixed.yaml#1")


def test_parse_list_and_warnings(tmp_path):
    f = tmp_path / "list.yaml"
    f.write_text(
        "kind: List\nitems:\n- kind: StaticPod\n  metadata: {name: a}\n---\n- just\n- a list\n",
        encoding="utf-8",
    )
    out = parse_files([str(f)])
    assert [o.obj.metadata.name for o in out.objects] == ["a"]
    assert len(out.warnings) == 1


def test_parse_missing_file():
    with pytest.raises(ParseError, match="File not found"):
        parse_files(["does/not/exist.yaml"])


def test_parse_bad_yaml(tmp_path):
    f = tmp_path / "bad.yaml"
    f.write_text("kind: StaticPod\nmetadata: [unclosed\n", encoding="utf-8")
    with pytest.raises(ParseError, match="YAML parse error"):
        parse_files([str(f)])


def test_parse_undecodable_static_pod(tmp_path):
    f = tmp_path / "sp.yaml"
    f.write_text("kind: StaticPod\nspec:\n  upgradeStrategy: OTA\n", encoding="utf-8")
    with pytest.raises(ParseError, match="cannot decode StaticPod"):
        parse_files([str(f)])
