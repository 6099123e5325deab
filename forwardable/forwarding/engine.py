# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Installs forwarding specs on classes and instances.

A class target receives the forwarders in its own namespace. An instance
target is moved onto a private subclass of its class because attribute
descriptors only take effect through a type. Every install on an instance
builds a new host holding the previous forwarders plus the new ones, so a
shallow copy, which shares its original's class, is unaffected by later
installs on either object.

Installation happens in two phases. Planning classifies every requested name
and decides install/skip/conflict for each without touching the target; the
apply phase only runs when no ``error``-policy conflict was found, so a failed
call leaves the target exactly as it was.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .._errors import ConflictError, InvalidSpecError
from .descriptors import ForwardedMember, forwarder_for
from .spec import (
    ConflictPolicy,
    ForwardSpec,
    PropertyKind,
    Resolver,
    inspect_kind,
)

__all__ = (
    "PlanAction",
    "PlanStep",
    "plan_forwarding",
    "install_forwarding",
    "install_specs",
    "forwarding_specs",
    "is_forwarded",
)

logger = logging.getLogger(__name__)

_SPECS_ATTR = "__forwarding_specs__"
_HOST_ATTR = "__forwarding_host__"
_NO_DELEGATE = object()


class PlanAction(str, Enum):
    INSTALL = "install"
    OVERRIDE = "override"
    SKIP = "skip"
    CONFLICT = "conflict"


@dataclass(frozen=True, slots=True)
class PlanStep:
    spec: ForwardSpec
    name: str
    kind: PropertyKind
    action: PlanAction


def _is_host(cls: type) -> bool:
    return cls.__dict__.get(_HOST_ATTR, False) is True


def _slot_descriptor(cls: type, name: str) -> Any:
    for klass in cls.__mro__:
        attr = klass.__dict__.get(name)
        if attr is None or isinstance(attr, ForwardedMember):
            continue
        return attr if inspect.ismemberdescriptor(attr) else None
    return None


def _filled_slots(target: Any) -> set[str]:
    names: set[str] = set()
    for klass in type(target).__mro__:
        for key, attr in klass.__dict__.items():
            if not inspect.ismemberdescriptor(attr):
                continue
            try:
                attr.__get__(target, type(target))
            except AttributeError:
                continue
            names.add(key)
    return names


def _own_names(target: Any) -> set[str]:
    """Names the target owns directly, excluding inherited members."""
    if isinstance(target, type):
        return set(target.__dict__)

    names = _filled_slots(target)
    instance_dict = getattr(target, "__dict__", None)
    if isinstance(instance_dict, Mapping):
        names.update(instance_dict)
    host = type(target)
    if _is_host(host):
        names.update(
            k for k, v in host.__dict__.items() if isinstance(v, ForwardedMember)
        )
    return names


def _clear_own(target: Any, name: str) -> None:
    """Drop an instance-level value for ``name`` before a forwarder replaces it."""
    instance_dict = getattr(target, "__dict__", None)
    if isinstance(instance_dict, dict):
        instance_dict.pop(name, None)
    slot = _slot_descriptor(type(target), name)
    if slot is not None:
        try:
            slot.__delete__(target)
        except AttributeError:
            pass  # slot already empty


def _resolve_kind(spec: ForwardSpec, name: str, delegate: Any) -> PropertyKind:
    declared = spec.declared_kind(name)
    if delegate is _NO_DELEGATE:
        return declared or PropertyKind.DATA
    # presence is checked even when the kind is declared
    inspected = inspect_kind(delegate, name)
    return declared or inspected


def plan_forwarding(
    target: Any, *specs: ForwardSpec, delegate: Any = _NO_DELEGATE
) -> list[PlanStep]:
    """Compute what installing ``specs`` in order would do to ``target``.

    Names installed by an earlier spec count as owned by the time a later
    spec is planned. The target is not modified.
    """
    owned = _own_names(target)
    steps: list[PlanStep] = []
    for spec in specs:
        if not isinstance(spec, ForwardSpec):
            raise InvalidSpecError.from_value(
                spec, expected="ForwardSpec", message="Expected a ForwardSpec"
            )
        for name in spec.properties:
            kind = _resolve_kind(spec, name, delegate)
            if name not in owned:
                action = PlanAction.INSTALL
            elif spec.conflict_policy is ConflictPolicy.SKIP:
                action = PlanAction.SKIP
            elif spec.conflict_policy is ConflictPolicy.OVERRIDE:
                action = PlanAction.OVERRIDE
            else:
                action = PlanAction.CONFLICT
            if action is not PlanAction.SKIP:
                owned.add(name)
            steps.append(PlanStep(spec, name, kind, action))
    return steps


def _host_class(target: Any) -> type:
    """Return the class that should carry forwarders for ``target``."""
    if isinstance(target, type):
        return target

    cls = type(target)
    namespace = {
        "__slots__": (),
        "__module__": cls.__module__,
        "__qualname__": cls.__qualname__,
        _HOST_ATTR: True,
        _SPECS_ATTR: (),
    }
    if _is_host(cls):
        # carry the current forwarders over; the old host may be shared by copies
        namespace[_SPECS_ATTR] = cls.__dict__.get(_SPECS_ATTR, ())
        namespace.update(
            (k, v) for k, v in cls.__dict__.items() if isinstance(v, ForwardedMember)
        )
        cls = cls.__base__

    host = type(cls)(cls.__name__, (cls,), namespace)
    try:
        object.__setattr__(target, "__class__", host)
    except TypeError as e:
        raise InvalidSpecError.from_value(
            target,
            expected="instance of a user-defined class",
            message=f"Cannot install forwarding on {cls.__name__} instances",
            cause=e,
        ) from e
    logger.debug(f"Created forwarding host class for {cls.__qualname__} instance")
    return host


def install_specs(
    target: Any, *specs: ForwardSpec, delegate: Any = _NO_DELEGATE
) -> Any:
    """Install several forwarding specs on ``target`` in declaration order.

    Args:
        target: Class or instance receiving the forwarders.
        *specs: Specs applied in order; each uses its own conflict policy.
        delegate: Optional representative delegate. When given, every
            forwarded name must exist on it and its members decide the kind
            of forwarder installed.

    Returns:
        The target, mutated.

    Raises:
        InvalidSpecError: A name is missing on the representative delegate
            or the target cannot carry forwarders.
        ConflictError: An ``error``-policy spec collides with an owned
            member. Nothing has been installed when this is raised.
    """
    if not specs:
        return target

    steps = plan_forwarding(target, *specs, delegate=delegate)
    conflicts = [s.name for s in steps if s.action is PlanAction.CONFLICT]
    if conflicts:
        raise ConflictError(
            f"{_describe(target)} already defines {', '.join(map(repr, conflicts))}",
            details={"names": conflicts, "target": _describe(target)},
        )

    specs_before = forwarding_specs(target)
    host = _host_class(target)

    for step in steps:
        if step.action is PlanAction.SKIP:
            logger.debug(f"Skipped forwarding {step.name!r} on {_describe(target)}")
            continue
        if step.action is PlanAction.OVERRIDE:
            if not isinstance(target, type):
                _clear_own(target, step.name)
            logger.debug(f"Overriding {step.name!r} on {_describe(target)}")
        setattr(host, step.name, forwarder_for(step.name, step.spec.resolver, step.kind))

    setattr(host, _SPECS_ATTR, specs_before + tuple(specs))
    logger.debug(
        f"Installed {sum(s.action is not PlanAction.SKIP for s in steps)} "
        f"forwarder(s) on {_describe(target)}"
    )
    return target


def install_forwarding(
    target: Any,
    resolver: Resolver | ForwardSpec,
    properties: str | Iterable[str] | None = None,
    conflict_policy: ConflictPolicy | str | None = None,
    *,
    shape: Mapping[str, PropertyKind | str] | None = None,
    delegate: Any = _NO_DELEGATE,
) -> Any:
    """Forward ``properties`` of ``target`` to ``resolver(target)``.

    Accepts either a ready ``ForwardSpec`` or the parts to build one.

    Example:
        >>> class Panel:
        ...     def __init__(self, controller):
        ...         self.controller = controller
        >>> install_forwarding(Panel, via("controller"), ["title", "refresh"])
    """
    if isinstance(resolver, ForwardSpec):
        if properties is not None or conflict_policy is not None or shape:
            raise InvalidSpecError(
                "Pass either a ForwardSpec or its parts, not both"
            )
        spec = resolver
    else:
        if properties is None:
            raise InvalidSpecError("No properties to forward")
        spec = ForwardSpec(resolver, properties, conflict_policy, shape)
    return install_specs(target, spec, delegate=delegate)


def forwarding_specs(target: Any) -> tuple[ForwardSpec, ...]:
    """Specs installed on ``target`` itself, in installation order."""
    cls = target if isinstance(target, type) else type(target)
    if not isinstance(target, type) and not _is_host(cls):
        return ()
    return cls.__dict__.get(_SPECS_ATTR, ())


def is_forwarded(target: Any, name: str) -> bool:
    cls = target if isinstance(target, type) else type(target)
    if not isinstance(target, type) and not _is_host(cls):
        return False
    return isinstance(cls.__dict__.get(name), ForwardedMember)


def _describe(target: Any) -> str:
    if isinstance(target, type):
        return f"class {target.__qualname__}"
    return f"{type(target).__qualname__} instance"
