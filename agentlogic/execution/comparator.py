"""
Pass/fail decision for one executed test case.

Both sides are reduced to a canonical JSON text (object keys sorted, array
order kept) and compared for exact equality. There is no type coercion and
no floating-point tolerance.
"""

import json
import math
from typing import Any


def _normalize(value: Any) -> Any:
    # bool is an int subclass; keep it out of the number branch
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, float):
        # JSON has one number type: 5.0 and 5 are the same value
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return value
    if isinstance(value, dict):
        return {str(key): _normalize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    return value


def canonicalize(value: Any) -> str:
    """Serialize a value to its canonical JSON form."""
    return json.dumps(
        _normalize(value),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def outputs_match(actual: Any, expected: Any) -> bool:
    return canonicalize(actual) == canonicalize(expected)
