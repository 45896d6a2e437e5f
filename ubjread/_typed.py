"""Typed bridge - map a decoded object onto a dataclass or pydantic model.

The decoded tree is first re-serialized to JSON text and parsed back, so
the target only ever sees JSON-shaped data (dict / list / str / int /
float / bool / None).  Object keys are then matched to field names
case-insensitively and the result is validated by pydantic, which does
the actual conversion.  Any validation failure surfaces as
UbjError(ERR_SHAPE).
"""

from __future__ import annotations

import dataclasses
import json
import typing
from typing import Any, Dict

from pydantic import BaseModel, TypeAdapter, ValidationError

from ._errors import ERR_SHAPE, UbjError


def structure(obj: Dict[str, Any], cls: Any) -> Any:
    """Convert a decoded object into an instance of `cls`."""
    plain = json.loads(json.dumps(obj))
    try:
        return TypeAdapter(cls).validate_python(_fold_keys(plain, cls))
    except ValidationError as e:
        raise UbjError(ERR_SHAPE, str(e))


def _field_types(cls: Any) -> Dict[str, Any]:
    """Field name -> annotation for dataclasses and pydantic models."""
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        return {name: f.annotation for name, f in cls.model_fields.items()}
    if isinstance(cls, type) and dataclasses.is_dataclass(cls):
        hints = typing.get_type_hints(cls)
        return {f.name: hints.get(f.name, Any) for f in dataclasses.fields(cls)}
    return {}


def _fold_keys(value: Any, tp: Any) -> Any:
    """Rename object keys to the target's field names, ignoring case.

    Walks the annotations of `tp` so nested records are renamed too.  A
    later key wins over an earlier one that differs only in case.
    """
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin in (list, tuple) and isinstance(value, list):
        item_tp = args[0] if args else Any
        return [_fold_keys(v, item_tp) for v in value]
    if origin is dict and isinstance(value, dict):
        val_tp = args[1] if len(args) == 2 else Any
        return {k: _fold_keys(v, val_tp) for k, v in value.items()}
    if origin is not None and args and origin not in (list, tuple, dict):
        # Optional[T] and other unions.
        return _fold_union(value, args)

    if not isinstance(value, dict):
        return value

    fields = _field_types(tp)
    if not fields:
        return value
    by_lower = {name.lower(): name for name in fields}
    out: Dict[str, Any] = {}
    for k, v in value.items():
        name = by_lower.get(k.lower(), k)
        out[name] = _fold_keys(v, fields.get(name, Any))
    return out


def _fold_union(value: Any, args: tuple) -> Any:
    # Rename against the first member that declares fields or items.
    for arg in args:
        if arg is type(None):
            continue
        if _field_types(arg) or typing.get_origin(arg) in (list, tuple, dict):
            return _fold_keys(value, arg)
    return value
