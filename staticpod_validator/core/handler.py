from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from staticpod_validator.core.exceptions import BadRequestError, GroupKind, InvalidError
from staticpod_validator.core.validation import validate
from staticpod_validator.models.resources import GROUP, KIND, StaticPod
from staticpod_validator.podvalidation.validator import (
    DefaultPodTemplateValidator,
    PodTemplateValidator,
    PodValidationOptions,
)


STATIC_POD_GROUP_KIND = GroupKind(group=GROUP, kind=KIND)


@dataclass(slots=True)
class HandlerConfig:
    # Re-check the stored object on update after the candidate passes.
    validate_previous_on_update: bool = True
    pod_validation_options: PodValidationOptions = field(default_factory=PodValidationOptions)


class StaticPodHandler:
    """Create/update/delete admission hooks for StaticPod.

    Each hook returns ``None`` when the request is admitted and raises an
    :class:`~staticpod_validator.core.exceptions.AdmissionError` otherwise.
    """

    def __init__(
        self,
        config: Optional[HandlerConfig] = None,
        template_validator: Optional[PodTemplateValidator] = None,
    ):
        self.config = config or HandlerConfig()
        self.template_validator = template_validator or DefaultPodTemplateValidator()

    def validate_create(self, obj: Any) -> None:
        self._validate(_expect_static_pod(obj))

    def validate_update(self, old_obj: Any, new_obj: Any) -> None:
        new_sp = _expect_static_pod(new_obj)
        old_sp = _expect_static_pod(old_obj)

        self._validate(new_sp)
        if self.config.validate_previous_on_update:
            self._validate(old_sp)

    def validate_delete(self, obj: Any) -> None:
        return None

    def _validate(self, sp: StaticPod) -> None:
        result = validate(
            sp,
            template_validator=self.template_validator,
            options=self.config.pod_validation_options,
        )
        if not result.valid:
            raise InvalidError(STATIC_POD_GROUP_KIND, sp.metadata.name, result.violations)


def _expect_static_pod(obj: Any) -> StaticPod:
    if not isinstance(obj, StaticPod):
        raise BadRequestError(f"expected a StaticPod but got a {type(obj).__name__}")
    return obj
