from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Union

import yaml
from pydantic import ValidationError

from staticpod_validator.core.exceptions import ParseError
from staticpod_validator.models.resources import StaticPod, UnstructuredObject, decode_object


@dataclass(slots=True)
class LoadedObject:
    source: str
    obj: Union[StaticPod, UnstructuredObject]


@dataclass(slots=True)
class ParseOutput:
    objects: List[LoadedObject]
    warnings: List[str]


def load_documents(path: Path) -> List[Any]:
    """Read every YAML (or JSON) document in ``path``."""
    if not path.exists():
        raise ParseError(f"File not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            return list(yaml.safe_load_all(f))
    except yaml.YAMLError as e:
        raise ParseError(f"YAML parse error in {path}: {e}") from e


def parse_files(paths: List[str]) -> ParseOutput:
    objects: List[LoadedObject] = []
    warnings: List[str] = []

    for p in paths:
        path = Path(p)
        for i, doc in enumerate(load_documents(path)):
            if doc is None:
                continue
            source = f"{path}#{i}"
            if not isinstance(doc, dict):
                warnings.append(f"{source}: document is a {type(doc).__name__}, not an object; skipping")
                continue
            if doc.get("kind") == "List":
                items = doc.get("items") or []
                for j, item in enumerate(items):
                    if isinstance(item, dict):
                        objects.append(LoadedObject(f"{source}.items[{j}]", _decode(item, source)))
                continue
            objects.append(LoadedObject(source, _decode(doc, source)))

    return ParseOutput(objects=objects, warnings=warnings)


def _decode(doc: dict, source: str) -> Union[StaticPod, UnstructuredObject]:
    try:
        return decode_object(doc)
    except ValidationError as e:
        raise ParseError(f"{source}: cannot decode StaticPod: {e}") from e
