# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import inspect
import operator
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .._errors import InvalidSpecError

__all__ = (
    "ConflictPolicy",
    "PropertyKind",
    "ForwardSpec",
    "Resolver",
    "inspect_kind",
    "via",
)

Resolver = Callable[[Any], Any]


class ConflictPolicy(str, Enum):
    """What to do when the target already owns a forwarded name."""

    ERROR = "error"
    SKIP = "skip"
    OVERRIDE = "override"


class PropertyKind(str, Enum):
    """Shape of a delegate member, deciding which forwarder is installed."""

    DATA = "data"
    ACCESSOR = "accessor"
    METHOD = "method"


def _coerce_enum(enum_cls: type[Enum], value: Any, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as e:
        raise InvalidSpecError.from_value(
            value,
            expected=" | ".join(m.value for m in enum_cls),
            message=f"Invalid {field}: {value!r}",
            cause=e,
        ) from e


def _normalize_properties(properties: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(properties, str):
        properties = (properties,)
    names = tuple(properties)
    if not names:
        raise InvalidSpecError("At least one property name is required")

    seen: set[str] = set()
    for name in names:
        if not isinstance(name, str) or not name.isidentifier():
            raise InvalidSpecError.from_value(
                name,
                expected="identifier",
                message=f"Property name {name!r} is not a valid identifier",
            )
        if name.startswith("__") and name.endswith("__"):
            raise InvalidSpecError(
                f"Cannot forward special name {name!r}",
                details={"name": name},
            )
        if name in seen:
            raise InvalidSpecError(
                f"Duplicate property name {name!r}",
                details={"name": name, "properties": list(names)},
            )
        seen.add(name)
    return names


@dataclass(frozen=True, slots=True, init=False)
class ForwardSpec:
    """Declarative description of one forwarding installation.

    ``resolver`` is called with the accessed object on every get, set and
    delete; its result is never cached. ``shape`` optionally pins the kind of
    some members so a plan can be computed before any delegate exists.
    """

    resolver: Resolver
    properties: tuple[str, ...]
    conflict_policy: ConflictPolicy
    shape: tuple[tuple[str, PropertyKind], ...]

    def __init__(
        self,
        resolver: Resolver,
        properties: str | Iterable[str],
        conflict_policy: ConflictPolicy | str | None = None,
        shape: Mapping[str, PropertyKind | str] | None = None,
    ) -> None:
        if not callable(resolver):
            raise InvalidSpecError.from_value(
                resolver, expected="callable", message="Resolver must be callable"
            )
        names = _normalize_properties(properties)

        if conflict_policy is None:
            from ..config import settings

            conflict_policy = settings.DEFAULT_CONFLICT_POLICY
        policy = _coerce_enum(ConflictPolicy, conflict_policy, "conflict policy")

        kinds: list[tuple[str, PropertyKind]] = []
        for name, kind in (shape or {}).items():
            if name not in names:
                raise InvalidSpecError(
                    f"Shape entry {name!r} is not a forwarded property",
                    details={"name": name, "properties": list(names)},
                )
            kinds.append((name, _coerce_enum(PropertyKind, kind, "property kind")))

        object.__setattr__(self, "resolver", resolver)
        object.__setattr__(self, "properties", names)
        object.__setattr__(self, "conflict_policy", policy)
        object.__setattr__(self, "shape", tuple(kinds))

    def declared_kind(self, name: str) -> PropertyKind | None:
        for key, kind in self.shape:
            if key == name:
                return kind
        return None

    def with_policy(self, conflict_policy: ConflictPolicy | str) -> "ForwardSpec":
        return type(self)(
            self.resolver, self.properties, conflict_policy, dict(self.shape)
        )


_MISSING = object()


def inspect_kind(delegate: Any, name: str) -> PropertyKind:
    """Classify ``name`` on a representative delegate without invoking it.

    Raises:
        InvalidSpecError: If the delegate has no such member.
    """
    instance_dict = getattr(delegate, "__dict__", None)
    if (
        not isinstance(delegate, type)
        and isinstance(instance_dict, Mapping)
        and name in instance_dict
    ):
        return PropertyKind.DATA

    attr = inspect.getattr_static(delegate, name, _MISSING)
    if attr is _MISSING:
        # members served by __getattr__ only
        if hasattr(delegate, name):
            return PropertyKind.DATA
        raise InvalidSpecError(
            f"Delegate {type(delegate).__name__} has no member {name!r}",
            details={"name": name, "delegate": type(delegate).__name__},
        )

    if isinstance(attr, (staticmethod, classmethod)) or inspect.isroutine(attr):
        return PropertyKind.METHOD
    if inspect.ismemberdescriptor(attr):
        return PropertyKind.DATA
    if inspect.isdatadescriptor(attr) or (
        hasattr(attr, "__get__") and not callable(attr)
    ):
        return PropertyKind.ACCESSOR
    return PropertyKind.DATA


def via(path: str) -> Resolver:
    """Resolver reading a (dotted) attribute path off the accessed object."""
    return operator.attrgetter(path)
