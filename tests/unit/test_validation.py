from __future__ import annotations

import pytest

from staticpod_validator.core.field import new_path
from staticpod_validator.core.validation import (
    MAX_UNAVAILABLE_REQUIRED_MESSAGE,
    TEMPLATE_CONVERSION_MESSAGE,
    UPGRADE_STRATEGY_RULES,
    validate,
)
from staticpod_validator.models.resources import StaticPod, UpgradeStrategyType
from staticpod_validator.models.results import FieldViolation, ViolationKind


VALID_TEMPLATE = {"spec": {"containers": [{"name": "nginx", "image": "nginx:1.25"}]}}


def make_static_pod(manifest="m1", strategy_type="OTA", max_unavailable=None, template=None):
    strategy = {"type": strategy_type}
    if max_unavailable is not None:
        strategy["maxUnavailable"] = max_unavailable
    return StaticPod.model_validate(
        {
            "metadata": {"name": "sp", "namespace": "kube-system"},
            "spec": {
                "staticPodManifest": manifest,
                "upgradeStrategy": strategy,
                "template": VALID_TEMPLATE if template is None else template,
            },
        }
    )


class StubValidator:
    def __init__(self, violations=None):
        self.violations = violations or []
        self.calls = []

    def validate(self, template, path, options):
        self.calls.append((template, str(path), options))
        return list(self.violations)


def test_ota_with_manifest_is_valid():
    res = validate(make_static_pod())
    assert res.valid
    assert res.violations == []


def test_empty_manifest_and_bogus_type_report_two_violations():
    res = validate(make_static_pod(manifest="", strategy_type="bogus"))
    assert not res.valid
    assert [(v.path, v.kind) for v in res.violations] == [
        ("spec.StaticPodManifest", ViolationKind.REQUIRED),
        ("spec.upgradeStrategy", ViolationKind.NOT_SUPPORTED),
    ]


def test_not_supported_lists_exactly_three_values():
    res = validate(make_static_pod(strategy_type="Recreate"))
    (v,) = res.violations
    assert v.kind is ViolationKind.NOT_SUPPORTED
    assert v.supported == ["auto", "OTA", "AdvancedRollingUpdate"]
    assert v.value == "Recreate"


def test_empty_strategy_type_is_not_supported():
    res = validate(make_static_pod(strategy_type=""))
    assert [v.kind for v in res.violations] == [ViolationKind.NOT_SUPPORTED]


@pytest.mark.parametrize("strategy_type", ["auto", "AdvancedRollingUpdate"])
def test_max_unavailable_required_for_rolling_types(strategy_type):
    res = validate(make_static_pod(strategy_type=strategy_type))
    (v,) = res.violations
    assert v.path == "spec.upgradeStrategy"
    assert v.kind is ViolationKind.REQUIRED
    assert v.message == "max-unavailable is required in AdvancedRollingUpdate mode"

    assert validate(make_static_pod(strategy_type=strategy_type, max_unavailable=1)).valid
    assert validate(make_static_pod(strategy_type=strategy_type, max_unavailable="25%")).valid


def test_max_unavailable_range_is_not_checked():
    assert validate(make_static_pod(strategy_type="auto", max_unavailable=-5)).valid
    assert validate(make_static_pod(strategy_type="auto", max_unavailable="250%")).valid


@pytest.mark.parametrize("max_unavailable", [None, 0, 3, "50%"])
def test_ota_never_fails_on_max_unavailable(max_unavailable):
    assert validate(make_static_pod(strategy_type="OTA", max_unavailable=max_unavailable)).valid


def test_rule_table_covers_every_strategy_type():
    assert set(UPGRADE_STRATEGY_RULES) == set(UpgradeStrategyType)
    assert UPGRADE_STRATEGY_RULES[UpgradeStrategyType.AUTO].message == MAX_UNAVAILABLE_REQUIRED_MESSAGE
    assert not UPGRADE_STRATEGY_RULES[UpgradeStrategyType.OTA].requires_max_unavailable


@pytest.mark.parametrize(
    "template",
    [
        "not-a-template",
        ["a", "list"],
        {"spec": {"containers": "nginx"}},
        {"spec": {"containers": [{"name": 5, "image": "nginx"}]}},
    ],
)
def test_conversion_failure_short_circuits(template):
    stub = StubValidator([FieldViolation(path="template.spec", kind=ViolationKind.INVALID, message="x")])
    sp = make_static_pod(manifest="", strategy_type="bogus", template=template)
    res = validate(sp, template_validator=stub)
    assert len(res.violations) == 1
    v = res.violations[0]
    assert v.path == "template"
    assert v.kind is ViolationKind.REQUIRED
    assert v.message == TEMPLATE_CONVERSION_MESSAGE
    assert stub.calls == []


def test_structural_violations_come_before_spec_violations():
    structural = FieldViolation(path="template.spec.containers", kind=ViolationKind.REQUIRED)
    stub = StubValidator([structural])
    res = validate(make_static_pod(manifest=""), template_validator=stub)
    assert [v.path for v in res.violations] == ["template.spec.containers", "spec.StaticPodManifest"]
    (_, path, options) = stub.calls[0]
    assert path == "template"
    assert options.allow_invalid_label_value is False


def test_stub_violations_alone_reject():
    stub = StubValidator([FieldViolation(path="template.spec", kind=ViolationKind.INVALID, value=1, message="bad")])
    res = validate(make_static_pod(), template_validator=stub)
    assert not res.valid
    assert len(res.violations) == 1


def test_default_template_validator_runs():
    res = validate(make_static_pod(template={"spec": {"containers": []}}))
    assert [v.path for v in res.violations] == ["template.spec.containers"]


def test_null_template_converts_to_empty_template():
    sp = make_static_pod()
    sp.spec.template = None
    res = validate(sp)
    assert [v.path for v in res.violations] == ["template.spec.containers"]


def test_validate_is_idempotent():
    sp = make_static_pod(manifest="", strategy_type="auto", template={"spec": {"containers": [{"name": "Bad_Name"}]}})
    first = validate(sp)
    second = validate(sp)
    assert first == second
    assert [str(v) for v in first.violations] == [str(v) for v in second.violations]


def test_success_is_logged(caplog):
    caplog.set_level("INFO", logger="staticpod_validator.core.validation")
    validate(make_static_pod())
    assert "Validate StaticPod kube-system/sp successfully" in caplog.text


def test_spec_path_is_rooted_at_spec():
    assert str(new_path("spec").child("StaticPodManifest")) == "spec.StaticPodManifest"


@pytest.mark.parametrize("strategy_type", ["Auto", "ota", "advancedRollingUpdate"])
def test_strategy_type_matching_is_case_sensitive(strategy_type):
    res = validate(make_static_pod(strategy_type=strategy_type, max_unavailable=1))
    (v,) = res.violations
    assert v.kind is ViolationKind.NOT_SUPPORTED
    assert v.value == strategy_type
    assert v.supported == ["auto", "OTA", "AdvancedRollingUpdate"]


def test_nulled_strategy_fields_decode_as_zero_values():
    sp = StaticPod.model_validate(
        {
            "metadata": {"name": "sp"},
            "spec": {
                "staticPodManifest": "m1",
                "upgradeStrategy": {"type": "OTA", "maxUnavailable": None},
                "template": VALID_TEMPLATE,
            },
            "status": None,
        }
    )
    assert validate(sp).valid
