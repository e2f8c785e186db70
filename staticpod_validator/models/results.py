from __future__ import annotations

import json
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel


class ViolationKind(str, Enum):
    REQUIRED = "FieldValueRequired"
    NOT_SUPPORTED = "FieldValueNotSupported"
    INVALID = "FieldValueInvalid"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ViolationKind.REQUIRED: "Required value",
    ViolationKind.NOT_SUPPORTED: "Unsupported value",
    ViolationKind.INVALID: "Invalid value",
}


def _quote(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value)
    if value is None:
        return "null"
    if isinstance(value, BaseModel):
        return json.dumps(value.model_dump(by_alias=True, mode="json"), sort_keys=True)
    if isinstance(value, (int, float, bool)):
        return json.dumps(value)
    return repr(value)


class FieldViolation(BaseModel):
    path: str
    kind: ViolationKind
    message: str = ""
    value: Any = None
    supported: List[str] = []

    def detail_message(self) -> str:
        """Kind description plus detail, without the field path."""
        if self.kind is ViolationKind.REQUIRED:
            return f"{self.kind.description}: {self.message}" if self.message else self.kind.description
        parts = [f"{self.kind.description}: {_quote(self.value)}"]
        if self.supported:
            parts.append("supported values: " + ", ".join(json.dumps(s) for s in self.supported))
        if self.message:
            parts.append(self.message)
        return ": ".join(parts)

    def __str__(self) -> str:
        return f"{self.path}: {self.detail_message()}"


class ValidationResult(BaseModel):
    violations: List[FieldViolation] = []

    @property
    def valid(self) -> bool:
        return not self.violations


class ObjectReport(BaseModel):
    """Outcome for one object handed to the CLI."""

    source: str
    name: Optional[str] = None
    namespace: Optional[str] = None
    kind: Optional[str] = None
    allowed: bool
    reason: Optional[str] = None
    message: Optional[str] = None
    violations: List[FieldViolation] = []


class RunResult(BaseModel):
    reports: List[ObjectReport]
    warnings: List[str] = []

    @property
    def all_allowed(self) -> bool:
        return all(r.allowed for r in self.reports)
