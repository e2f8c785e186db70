from __future__ import annotations

import math
import re


_QUANTITY_PATTERN = re.compile(
    r"^(?P<val>[+-]?(?:\d+(?:\.\d*)?|\.\d+))(?P<suffix>Ki|Mi|Gi|Ti|Pi|Ei|n|u|m|k|M|G|T|P|E|[eE][+-]?\d+)?$"
)

_BINARY = {
    "Ki": 1024.0,
    "Mi": 1024.0 ** 2,
    "Gi": 1024.0 ** 3,
    "Ti": 1024.0 ** 4,
    "Pi": 1024.0 ** 5,
    "Ei": 1024.0 ** 6,
}

_DECIMAL = {
    "n": 1e-9,
    "u": 1e-6,
    "m": 1e-3,
    "k": 1e3,
    "M": 1e6,
    "G": 1e9,
    "T": 1e12,
    "P": 1e15,
    "E": 1e18,
}


def parse_quantity(value: str | int | float) -> float:
    """Parse a Kubernetes resource quantity to its value in base units.

    - 500m => 0.5
    - 128Mi => 134217728.0
    - 1e3 => 1000.0

    Raises ``ValueError`` for malformed quantities and for ones too large to
    represent as a float.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid quantity: {value}")
    try:
        q = _to_float(value)
    except OverflowError as e:
        raise ValueError(f"Quantity out of range: {value}") from e
    if not math.isfinite(q):
        raise ValueError(f"Quantity out of range: {value}")
    return q


def _to_float(value: str | int | float) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    s = str(value).strip()
    m = _QUANTITY_PATTERN.match(s)
    if not m:
        raise ValueError(f"Invalid quantity: {value}")
    val = float(m.group("val"))
    suffix = m.group("suffix")
    if not suffix:
        return val
    if suffix in _BINARY:
        return val * _BINARY[suffix]
    if suffix in _DECIMAL:
        return val * _DECIMAL[suffix]
    # decimal exponent, e.g. 1e3
    return val * 10.0 ** int(suffix[1:])
