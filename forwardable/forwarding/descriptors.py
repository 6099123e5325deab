# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Accessor objects placed on forwarding targets."""

from typing import Any

from .spec import PropertyKind, Resolver

__all__ = ("ForwardedMember", "ForwardedAttribute", "ForwardedMethod", "forwarder_for")


class ForwardedMember:
    """Reads through to a delegate resolved per access.

    Subclasses define ``__set__`` and ``__delete__``, which makes every
    installed forwarder a data descriptor.
    """

    __slots__ = ("name", "resolver", "kind")

    def __init__(self, name: str, resolver: Resolver, kind: PropertyKind):
        self.name = name
        self.resolver = resolver
        self.kind = kind

    def _resolve(self, obj: Any) -> Any:
        delegate = self.resolver(obj)
        if delegate is None:
            raise AttributeError(
                f"{type(obj).__name__!r} object forwards {self.name!r} "
                "but its delegate is unresolved"
            )
        return delegate

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return getattr(self._resolve(obj), self.name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} ({self.kind.value})>"


class ForwardedAttribute(ForwardedMember):
    """Getter/setter pair for ``data`` and ``accessor`` members."""

    __slots__ = ()

    def __set__(self, obj: Any, value: Any) -> None:
        setattr(self._resolve(obj), self.name, value)

    def __delete__(self, obj: Any) -> None:
        delattr(self._resolve(obj), self.name)


class ForwardedMethod(ForwardedMember):
    """Read-only passthrough of a method bound to the current delegate."""

    __slots__ = ()

    def __set__(self, obj: Any, value: Any) -> None:
        raise AttributeError(f"forwarded method {self.name!r} is read-only")

    def __delete__(self, obj: Any) -> None:
        raise AttributeError(f"forwarded method {self.name!r} cannot be deleted")


def forwarder_for(name: str, resolver: Resolver, kind: PropertyKind) -> ForwardedMember:
    if kind is PropertyKind.METHOD:
        return ForwardedMethod(name, resolver, kind)
    return ForwardedAttribute(name, resolver, kind)
