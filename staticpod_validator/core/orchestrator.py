from __future__ import annotations

from dataclasses import dataclass
from typing import List

from staticpod_validator.core.exceptions import AdmissionError, InvalidError
from staticpod_validator.core.handler import HandlerConfig, StaticPodHandler
from staticpod_validator.models.results import ObjectReport, RunResult
from staticpod_validator.parsers.yaml_parser import LoadedObject, ParseOutput, parse_files
from staticpod_validator.podvalidation.validator import PodValidationOptions


@dataclass(slots=True)
class ValidationConfig:
    allow_invalid_label_value: bool = False
    allow_requests_above_limits: bool = False

    def handler_config(self) -> HandlerConfig:
        return HandlerConfig(
            pod_validation_options=PodValidationOptions(
                allow_invalid_label_value=self.allow_invalid_label_value,
                allow_requests_above_limits=self.allow_requests_above_limits,
            )
        )


def orchestrate(paths: List[str], cfg: ValidationConfig) -> RunResult:
    """Validate every object found in ``paths`` as if it were being created."""
    parsed: ParseOutput = parse_files(paths)
    handler = StaticPodHandler(cfg.handler_config())

    reports = [_check(handler, loaded) for loaded in parsed.objects]
    return RunResult(reports=reports, warnings=sorted(set(parsed.warnings)))


def _check(handler: StaticPodHandler, loaded: LoadedObject) -> ObjectReport:
    obj = loaded.obj
    report = ObjectReport(
        source=loaded.source,
        name=obj.metadata.name or None,
        namespace=obj.metadata.namespace,
        kind=obj.kind,
        allowed=True,
    )
    try:
        handler.validate_create(obj)
    except AdmissionError as e:
        report.allowed = False
        report.reason = e.reason
        report.message = str(e)
        if isinstance(e, InvalidError):
            report.violations = e.violations
    return report
