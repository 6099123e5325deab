# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Multiton registry mapping base callables to their composable wrapper.

The registry never keeps a base callable alive. Python has no ephemeron
tables, so the wrapper is anchored on the base itself (a private attribute in
the base's ``__dict__``) while the registry only holds weak references keyed
by ``id(base)``. Base and wrapper reference each other and are reclaimed
together by the garbage collector.

A bound method is recreated on every attribute access, so its wrapper is
anchored on the instance it is bound to instead and the entry lives as long
as that instance.

Callables that cannot carry the anchor or cannot be weakly referenced
(builtins, classes, slotted callable objects, methods of such objects) are
pinned with strong references for the lifetime of the registry.
"""

from __future__ import annotations

import inspect
import itertools
import logging
import threading
import weakref
from collections.abc import Callable
from typing import Any

from .._errors import InvalidSpecError
from .function import ComposableFunction, FailurePolicy, is_bound_method

__all__ = (
    "ComposableRegistry",
    "default_registry",
    "extend",
    "remove",
    "constituents_of",
    "is_composable",
)

logger = logging.getLogger(__name__)

_registry_ids = itertools.count()


def _check_callable(value: Any, role: str) -> None:
    if not callable(value):
        raise InvalidSpecError.from_value(
            value, expected="callable", message=f"{role} must be callable"
        )
    if inspect.iscoroutinefunction(value):
        raise InvalidSpecError.from_value(
            value,
            expected="synchronous callable",
            message=f"{role} must not be a coroutine function",
        )


class ComposableRegistry:
    """Process-wide or isolated association from base callable to wrapper.

    Guarantees at most one ``ComposableFunction`` per base callable for as
    long as the base is alive. Lookup-and-create is serialized by a lock;
    calling a wrapper takes no registry lock.
    """

    def __init__(self, *, failure_policy: FailurePolicy | str | None = None):
        if failure_policy is None:
            from ..config import settings

            failure_policy = settings.DEFAULT_FAILURE_POLICY
        self.failure_policy = FailurePolicy(failure_policy)
        self._lock = threading.RLock()
        self._anchor = f"__composable_{next(_registry_ids)}__"
        # id(base) or (id(instance), id(function)) -> (weak owner, weak wrapper)
        self._weak: dict[Any, tuple[weakref.ref, weakref.ref]] = {}
        # key -> (base, wrapper), strong
        self._pinned: dict[Any, tuple[Callable[..., Any], ComposableFunction]] = {}

    @staticmethod
    def _pin_key(fn: Callable[..., Any]) -> Any:
        # bound methods compare by (__self__, function)
        return fn if is_bound_method(fn) else id(fn)

    @staticmethod
    def _weak_key(fn: Callable[..., Any]) -> tuple[Any, Any]:
        """Return ``(key, owner)`` where ``owner`` is what the entry lives as long as.

        A bound method is a fresh object on every access, so its entry is
        keyed by and tied to the instance it is bound to.
        """
        if inspect.ismethod(fn):
            return (id(fn.__self__), id(fn.__func__)), fn.__self__
        return id(fn), fn

    def _find(self, fn: Callable[..., Any]) -> ComposableFunction | None:
        key, owner = self._weak_key(fn)
        entry = self._weak.get(key)
        if entry is not None:
            owner_ref, wrapper_ref = entry
            if owner_ref() is owner:
                return wrapper_ref()
        pinned = self._pinned.get(self._pin_key(fn))
        if pinned is not None:
            return pinned[1]
        return None

    def _anchor_wrapper(self, fn: Callable[..., Any], wrapper: ComposableFunction) -> bool:
        if is_bound_method(fn) and not inspect.ismethod(fn):
            return False  # builtin bound method
        key, owner = self._weak_key(fn)
        namespace = getattr(owner, "__dict__", None)
        if type(namespace) is not dict:
            return False

        entries = self._weak

        def _reap(ref: weakref.ref) -> None:
            entry = entries.get(key)
            if entry is not None and entry[0] is ref:
                del entries[key]

        try:
            owner_ref = weakref.ref(owner, _reap)
        except TypeError:
            return False
        if owner is fn:
            namespace[self._anchor] = wrapper
        else:
            namespace.setdefault(self._anchor, {})[fn.__func__] = wrapper
        entries[key] = (owner_ref, weakref.ref(wrapper))
        return True

    def lookup(self, fn: Callable[..., Any]) -> ComposableFunction | None:
        """Return the wrapper registered for ``fn`` (a base or a wrapper), if any."""
        if isinstance(fn, ComposableFunction):
            return fn if self._find(fn.base) is fn else None
        return self._find(fn)

    def _wrapper_for(self, fn: Callable[..., Any]) -> ComposableFunction:
        with self._lock:
            wrapper = self._find(fn)
            if wrapper is not None:
                return wrapper
            wrapper = ComposableFunction(fn, failure_policy=self.failure_policy)
            if not self._anchor_wrapper(fn, wrapper):
                self._pinned[self._pin_key(fn)] = (fn, wrapper)
                logger.debug(f"Pinned composable wrapper for {fn!r}")
            logger.debug(f"Created composable wrapper for {fn!r}")
            return wrapper

    def extend(
        self, fn: Callable[..., Any], *constituents: Callable[..., Any]
    ) -> ComposableFunction:
        """Register ``constituents`` to run after ``fn`` and return its wrapper.

        ``fn`` may be a plain callable or an existing wrapper. Constituents
        already present are ignored; new ones are appended in order.

        Raises:
            InvalidSpecError: An argument is not a synchronous callable, or a
                wrapper would become its own constituent.
        """
        _check_callable(fn, "Base")
        for c in constituents:
            _check_callable(c, "Constituent")

        if isinstance(fn, ComposableFunction):
            wrapper = fn
        else:
            existing = self._find(fn)
            wrapper = existing if existing is not None else self._wrapper_for(fn)

        if any(c is wrapper for c in constituents):
            raise InvalidSpecError(
                f"{wrapper!r} cannot be its own constituent",
                details={"function": repr(wrapper)},
            )
        if constituents:
            added = wrapper._add(*constituents)
            logger.debug(f"Extended {wrapper!r} with {added} new constituent(s)")
        return wrapper

    def remove(self, fn: Callable[..., Any], constituent: Callable[..., Any]) -> None:
        """Drop ``constituent`` from the wrapper of ``fn``; no-op if absent."""
        wrapper = fn if isinstance(fn, ComposableFunction) else self._find(fn)
        if wrapper is None:
            return
        if wrapper._discard(constituent):
            logger.debug(f"Removed constituent from {wrapper!r}")

    def constituents_of(self, fn: Callable[..., Any]) -> tuple[Callable[..., Any], ...]:
        """Ordered, immutable snapshot of the constituents of ``fn``."""
        wrapper = fn if isinstance(fn, ComposableFunction) else self._find(fn)
        return () if wrapper is None else wrapper.constituents

    def __contains__(self, fn: object) -> bool:
        return callable(fn) and self.lookup(fn) is not None

    def __len__(self) -> int:
        live = sum(1 for base_ref, _ in list(self._weak.values()) if base_ref() is not None)
        return live + len(self._pinned)

    def __repr__(self) -> str:
        return f"<ComposableRegistry entries={len(self)} policy={self.failure_policy.value}>"


default_registry = ComposableRegistry()


def extend(fn: Callable[..., Any], *constituents: Callable[..., Any]) -> ComposableFunction:
    return default_registry.extend(fn, *constituents)


def remove(fn: Callable[..., Any], constituent: Callable[..., Any]) -> None:
    default_registry.remove(fn, constituent)


def constituents_of(fn: Callable[..., Any]) -> tuple[Callable[..., Any], ...]:
    return default_registry.constituents_of(fn)


def is_composable(obj: Any) -> bool:
    return isinstance(obj, ComposableFunction)
