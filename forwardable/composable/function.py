# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import functools
import inspect
import logging
import threading
from collections.abc import Callable
from enum import Enum
from types import MethodType
from typing import Any

from .._errors import InvocationError

__all__ = ("FailurePolicy", "ComposableFunction")

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    """How a composable call reacts to a failing constituent.

    A failing base always propagates unchanged and no constituent runs.
    """

    FAIL_FAST = "fail_fast"  # first constituent error propagates, rest skipped
    CONTINUE = "continue"  # run all, then raise InvocationError if any failed


def is_bound_method(fn: Any) -> bool:
    return inspect.ismethod(fn) or (
        inspect.isbuiltin(fn) and not inspect.ismodule(getattr(fn, "__self__", None))
    )


def _same(a: Callable, b: Callable) -> bool:
    # bound methods are recreated on every attribute access
    if a is b:
        return True
    return type(a) is type(b) and is_bound_method(a) and a == b


class ComposableFunction:
    """Callable running ``base`` and then each constituent with the same arguments.

    Instances are created by ``ComposableRegistry``; mutate constituents
    through the registry. Stored on a class, a wrapper binds like a method
    and the instance is passed to base and constituents alike.
    """

    def __init__(
        self,
        base: Callable[..., Any],
        *,
        failure_policy: FailurePolicy | str = FailurePolicy.FAIL_FAST,
    ):
        self._base = base
        self._constituents: tuple[Callable[..., Any], ...] = ()
        self._lock = threading.RLock()
        self.failure_policy = FailurePolicy(failure_policy)
        functools.update_wrapper(self, base, updated=())

    @property
    def base(self) -> Callable[..., Any]:
        return self._base

    @property
    def constituents(self) -> tuple[Callable[..., Any], ...]:
        return self._constituents

    @property
    def _name(self) -> str:
        return getattr(self._base, "__qualname__", repr(self._base))

    def _add(self, *constituents: Callable[..., Any]) -> int:
        with self._lock:
            current = list(self._constituents)
            for c in constituents:
                if not any(_same(c, existing) for existing in current):
                    current.append(c)
            added = len(current) - len(self._constituents)
            self._constituents = tuple(current)
        return added

    def _discard(self, constituent: Callable[..., Any]) -> bool:
        with self._lock:
            kept = tuple(c for c in self._constituents if not _same(c, constituent))
            removed = len(kept) != len(self._constituents)
            self._constituents = kept
        return removed

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        constituents = self._constituents
        result = self._base(*args, **kwargs)

        if self.failure_policy is FailurePolicy.FAIL_FAST:
            for constituent in constituents:
                constituent(*args, **kwargs)
            return result

        errors: list[Exception] = []
        for constituent in constituents:
            try:
                constituent(*args, **kwargs)
            except Exception as e:
                logger.debug(
                    f"Constituent {getattr(constituent, '__qualname__', constituent)!r} "
                    f"of {self._name!r} failed: {e}"
                )
                errors.append(e)
        if errors:
            raise InvocationError(
                f"{len(errors)} constituent(s) of {self._name!r} failed",
                errors=errors,
                result=result,
                details={"function": self._name, "failed": len(errors)},
            )
        return result

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return MethodType(self, obj)

    def __repr__(self) -> str:
        return f"<ComposableFunction {self._name} +{len(self._constituents)}>"
