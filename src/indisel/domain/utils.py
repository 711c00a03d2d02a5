"""Domain layer utilities."""

import types
from collections.abc import Mapping
from dataclasses import MISSING, fields, is_dataclass
from enum import Enum
from typing import Any, TypeVar, Union, cast, get_args, get_origin, get_type_hints

D = TypeVar("D")


def dict_to_dataclass(dc_type: type[D], values: Mapping[str, Any]) -> D:
    """Recursively build a dataclass instance from a nested mapping.

    Args:
        dc_type: The dataclass type to build.
        values: The mapping containing the data.

    Returns:
        An instance of dc_type populated with data from values.

    Note:
        - Keys in values that are not fields of dc_type are ignored.
        - All fields without defaults must be present in values.
        - Nested dataclasses, enums, `X | None`, `tuple[X, ...]`, `list[X]`
          and `Mapping[str, X]` field types are converted; anything else is
          passed through unchanged.
    """

    if not is_dataclass(dc_type):
        raise TypeError(f"{dc_type} is not a dataclass type")
    type_hints = get_type_hints(dc_type)
    kwargs = {}
    for field in fields(dc_type):
        if not field.init:
            continue
        if field.name in values:
            field_type = type_hints.get(field.name, field.type)
            kwargs[field.name] = _convert(field_type, values[field.name])
        elif field.default is MISSING and field.default_factory is MISSING:
            raise KeyError(f"Missing required field '{field.name}'")
    return cast(D, dc_type(**kwargs))


def _convert(field_type: Any, value: Any) -> Any:
    origin = get_origin(field_type)
    if origin is None:
        if is_dataclass(field_type) and isinstance(value, Mapping):
            return dict_to_dataclass(cast(type[Any], field_type), value)
        if isinstance(field_type, type) and issubclass(field_type, Enum):
            return value if isinstance(value, field_type) else field_type(value)
        return value

    args = get_args(field_type)
    if origin in (Union, types.UnionType):
        if value is None:
            return None
        non_none = [arg for arg in args if arg is not types.NoneType]
        return _convert(non_none[0], value) if len(non_none) == 1 else value
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:  # pylint: disable=magic-value-comparison
        return tuple(_convert(args[0], item) for item in value)
    if origin is list:
        return [_convert(args[0], item) for item in value]
    if origin in (dict, Mapping):
        return {key: _convert(args[1], item) for key, item in value.items()}
    return value
