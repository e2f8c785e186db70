"""Rule engine for StaticPod resources."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from staticpod_validator.core.exceptions import ConversionError
from staticpod_validator.core.field import Path, new_path, not_supported, required
from staticpod_validator.models.pod import convert_pod_template
from staticpod_validator.models.resources import StaticPod, StaticPodSpec, UpgradeStrategyType
from staticpod_validator.models.results import FieldViolation, ValidationResult
from staticpod_validator.podvalidation.validator import (
    DefaultPodTemplateValidator,
    PodTemplateValidator,
    PodValidationOptions,
)


logger = logging.getLogger(__name__)

TEMPLATE_CONVERSION_MESSAGE = "template field should be a valid pod template"
MAX_UNAVAILABLE_REQUIRED_MESSAGE = "max-unavailable is required in AdvancedRollingUpdate mode"


@dataclass(frozen=True)
class StrategyRule:
    requires_max_unavailable: bool
    message: str = ""


UPGRADE_STRATEGY_RULES: Dict[UpgradeStrategyType, StrategyRule] = {
    UpgradeStrategyType.AUTO: StrategyRule(True, MAX_UNAVAILABLE_REQUIRED_MESSAGE),
    UpgradeStrategyType.OTA: StrategyRule(False),
    UpgradeStrategyType.ADVANCED_ROLLING_UPDATE: StrategyRule(True, MAX_UNAVAILABLE_REQUIRED_MESSAGE),
}

_missing = set(UpgradeStrategyType) - set(UPGRADE_STRATEGY_RULES)
if _missing:  # pragma: no cover - guards edits to the table
    raise RuntimeError(f"no upgrade strategy rule for {sorted(t.value for t in _missing)}")

SUPPORTED_STRATEGY_TYPES: List[str] = [t.value for t in UpgradeStrategyType]


def validate(
    obj: StaticPod,
    template_validator: Optional[PodTemplateValidator] = None,
    options: Optional[PodValidationOptions] = None,
) -> ValidationResult:
    """Validate one StaticPod.

    A template that cannot be converted yields a single violation and skips
    every other check. Otherwise structural template violations come first,
    followed by spec-level violations.
    """
    template_validator = template_validator or DefaultPodTemplateValidator()
    options = options or PodValidationOptions()
    template_path = new_path("template")

    try:
        template = convert_pod_template(obj.spec.template)
    except ConversionError as e:
        logger.debug("StaticPod %s: %s", obj.key(), e)
        return ValidationResult(violations=[required(template_path, TEMPLATE_CONVERSION_MESSAGE)])

    all_errs: List[FieldViolation] = []
    all_errs.extend(template_validator.validate(template, template_path, options))
    all_errs.extend(validate_static_pod_spec(obj.spec, new_path("spec")))

    if all_errs:
        logger.debug("StaticPod %s rejected with %d violation(s)", obj.key(), len(all_errs))
        return ValidationResult(violations=all_errs)

    logger.info("Validate StaticPod %s successfully ...", obj.key())
    return ValidationResult()


def validate_static_pod_spec(spec: StaticPodSpec, path: Path) -> List[FieldViolation]:
    errs: List[FieldViolation] = []

    if spec.static_pod_manifest == "":
        errs.append(required(path.child("StaticPodManifest"), "StaticPodManifest is required"))

    strategy = spec.upgrade_strategy
    strategy_path = path.child("upgradeStrategy")
    try:
        strategy_type = UpgradeStrategyType(strategy.type)
    except ValueError:
        errs.append(not_supported(strategy_path, strategy.type, SUPPORTED_STRATEGY_TYPES))
        return errs

    rule = UPGRADE_STRATEGY_RULES[strategy_type]
    if rule.requires_max_unavailable and strategy.max_unavailable is None:
        errs.append(required(strategy_path, rule.message))

    return errs
