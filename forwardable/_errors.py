# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

__all__ = (
    "ForwardableError",
    "InvalidSpecError",
    "ConflictError",
    "InvocationError",
)


class ForwardableError(Exception):
    """Base for all forwardable errors.

    Carries a human message, a machine-readable ``code`` and a ``details``
    mapping suitable for structured logging.
    """

    default_message: ClassVar[str] = "Forwardable error"
    code: ClassVar[str] = "forwardable_error"
    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause  # preserves traceback
        self.message = message or self.default_message
        self.details = details or {}

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "code": type(self).code,
            "message": self.message,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> BaseException | None:
        """Get the cause of this error, if any."""
        return self.__cause__

    @classmethod
    def from_value(
        cls,
        value: Any,
        *,
        expected: str | None = None,
        message: str | None = None,
        cause: BaseException | None = None,
        **extra: Any,
    ):
        """Create an error describing an offending value."""
        details = {
            "value": repr(value),
            "type": type(value).__name__,
            **({"expected": expected} if expected else {}),
            **extra,
        }
        return cls(message=message, details=details, cause=cause)


class InvalidSpecError(ForwardableError):
    """A forwarding spec or composable argument is malformed."""

    default_message = "Invalid specification"
    code = "invalid_spec"
    __slots__ = ()


class ConflictError(ForwardableError):
    """Forwarded names collide with members the target already owns."""

    default_message = "Forwarded member conflicts with an existing member"
    code = "conflict"
    __slots__ = ()

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.details.get("names", ()))


class InvocationError(ForwardableError):
    """One or more constituents failed under the continue-on-error policy.

    ``result`` holds what the base callable returned, ``errors`` the
    constituent exceptions in the order they were raised.
    """

    default_message = "Composable constituents failed"
    code = "invocation_failed"
    __slots__ = ("errors", "result")

    def __init__(
        self,
        message: str | None = None,
        *,
        errors: list[Exception] | None = None,
        result: Any = None,
        details: dict[str, Any] | None = None,
    ):
        self.errors = tuple(errors or ())
        self.result = result
        cause = (
            ExceptionGroup(message or self.default_message, list(self.errors))
            if self.errors
            else None
        )
        super().__init__(message, details=details, cause=cause)
