from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from staticpod_validator.models.results import FieldViolation


class ValidatorError(Exception):
    """Base exception for validator errors."""


class ParseError(ValidatorError):
    """Raised when loading YAML/JSON manifests fails fatally."""


class ConversionError(ValidatorError):
    """Raised when a pod template cannot be converted to the canonical schema."""


@dataclass(frozen=True)
class GroupKind:
    group: str
    kind: str

    def __str__(self) -> str:
        if not self.group:
            return self.kind
        return f"{self.kind}.{self.group}"


class AdmissionError(ValidatorError):
    """An admission outcome that rejects the request."""

    reason = "InternalError"
    code = 500

    def details(self) -> Dict[str, Any] | None:
        return None

    def to_status(self) -> Dict[str, Any]:
        status: Dict[str, Any] = {
            "apiVersion": "v1",
            "kind": "Status",
            "metadata": {},
            "status": "Failure",
            "message": str(self),
            "reason": self.reason,
            "code": self.code,
        }
        details = self.details()
        if details is not None:
            status["details"] = details
        return status


class BadRequestError(AdmissionError):
    """The request carried an object of the wrong type or an undecodable one."""

    reason = "BadRequest"
    code = 400


class InvalidError(AdmissionError):
    """One or more field violations were found on a named resource."""

    reason = "Invalid"
    code = 422

    def __init__(self, group_kind: GroupKind, name: str, violations: List[FieldViolation]):
        self.group_kind = group_kind
        self.name = name
        self.violations = list(violations)
        super().__init__(self._message())

    def _message(self) -> str:
        errs = [str(v) for v in self.violations]
        if len(errs) == 1:
            joined = errs[0]
        else:
            joined = "[" + ", ".join(errs) + "]"
        return f'{self.group_kind} "{self.name}" is invalid: {joined}'

    def details(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "group": self.group_kind.group,
            "kind": self.group_kind.kind,
            "causes": [
                {
                    "reason": v.kind.value,
                    "message": v.detail_message(),
                    "field": v.path,
                }
                for v in self.violations
            ],
        }
