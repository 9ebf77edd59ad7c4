from dataclasses import MISSING, fields, is_dataclass
from functools import reduce
from typing import Any, Type, get_type_hints


def deep_merge(left: dict, right: dict) -> dict:
    """Return a new dict with ``right`` merged over ``left``, recursing into nested dicts."""
    merged = dict(left)
    for key, value in right.items():
        if isinstance(left_value := merged.get(key), dict) and isinstance(value, dict):
            merged[key] = deep_merge(left_value, value)
        else:
            merged[key] = value
    return merged


def extract_defaults(cls) -> dict[str, Any]:
    result = {}
    for f in fields(cls):
        if f.default is not MISSING:
            result[f.name] = f.default
        elif f.default_factory is not MISSING:  # type: ignore
            result[f.name] = f.default_factory()  # type: ignore
    return result


def build_subconfigs(values: dict, obj: Type) -> dict:
    """Instantiate nested dataclass configs from plain dicts.

    Only direct dataclass-typed fields are handled; ``Sub | None`` or
    ``list[Sub]`` stay as given.
    """
    dtypes: dict[str, Type] = get_type_hints(obj)
    built = dict(values)
    for k, v in values.items():
        if isinstance(v, dict) and (subconfig_type := dtypes.get(k)) and is_dataclass(subconfig_type):
            built[k] = subconfig_type(**build_subconfigs(v, subconfig_type))

    return built


class LayeredMixin:
    """Mixin building a dataclass config from layers, highest priority first."""

    def __init__(self, *layers: dict[str, Any]):
        self._fields = {f.name for f in fields(self.__class__)}  # type: ignore[arg-type]
        self._layers = [{k: layer[k] for k in layer.keys() & self._fields} for layer in layers]

        defaults = extract_defaults(self.__class__)
        merged = reduce(deep_merge, reversed(self._layers), {})
        super().__init__(**build_subconfigs(defaults | merged, type(self)))

    def is_set(self, name: str) -> bool:
        return any(name in layer for layer in self._layers)
