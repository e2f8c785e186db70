from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from staticpod_validator.models.results import FieldViolation, ViolationKind


@dataclass(frozen=True)
class Path:
    """A dotted field path such as ``template.spec.containers[0].name``."""

    name: str
    parent: Optional["Path"] = None
    index: Optional[int] = None

    def child(self, name: str, *more: str) -> "Path":
        p = Path(name, parent=self)
        for m in more:
            p = Path(m, parent=p)
        return p

    def at(self, index: int) -> "Path":
        return Path("", parent=self, index=index)

    def key(self, key: str) -> "Path":
        return Path(f"[{key}]", parent=self)

    def __str__(self) -> str:
        if self.parent is None:
            return self.name
        base = str(self.parent)
        if self.index is not None:
            return f"{base}[{self.index}]"
        if self.name.startswith("["):
            return f"{base}{self.name}"
        return f"{base}.{self.name}" if base else self.name


def new_path(name: str, *more: str) -> Path:
    p = Path(name)
    return p.child(*more) if more else p


def required(path: Path, detail: str = "") -> FieldViolation:
    return FieldViolation(path=str(path), kind=ViolationKind.REQUIRED, message=detail)


def not_supported(path: Path, value: Any, valid_values: Iterable[str]) -> FieldViolation:
    return FieldViolation(
        path=str(path),
        kind=ViolationKind.NOT_SUPPORTED,
        value=value,
        supported=list(valid_values),
    )


def invalid(path: Path, value: Any, detail: str) -> FieldViolation:
    return FieldViolation(path=str(path), kind=ViolationKind.INVALID, value=value, message=detail)
