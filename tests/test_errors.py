# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for forwardable error classes."""

import pytest

from forwardable._errors import (
    ConflictError,
    ForwardableError,
    InvalidSpecError,
    InvocationError,
)


class TestForwardableError:
    """Tests for base ForwardableError class."""

    def test_default_initialization(self):
        error = ForwardableError()
        assert str(error) == "Forwardable error"
        assert error.message == "Forwardable error"
        assert error.details == {}

    def test_custom_message(self):
        error = ForwardableError("Custom error message")
        assert str(error) == "Custom error message"

    def test_with_cause(self):
        cause = ValueError("Original error")
        error = ForwardableError("Wrapped error", cause=cause)
        assert error.get_cause() is cause
        assert error.__cause__ is cause

    def test_to_dict_basic(self):
        error = ForwardableError("Test error")
        assert error.to_dict() == {
            "error": "ForwardableError",
            "code": "forwardable_error",
            "message": "Test error",
        }

    def test_to_dict_with_details_and_cause(self):
        error = ForwardableError("Error", details={"field": "value"}, cause=KeyError("k"))
        result = error.to_dict(include_cause=True)
        assert result["details"] == {"field": "value"}
        assert "KeyError" in result["cause"]

    def test_to_dict_without_cause(self):
        assert "cause" not in ForwardableError("Error").to_dict(include_cause=True)

    def test_from_value(self):
        error = InvalidSpecError.from_value(
            42, expected="callable", message="Resolver must be callable", name="r"
        )
        assert error.message == "Resolver must be callable"
        assert error.details == {
            "value": "42",
            "type": "int",
            "expected": "callable",
            "name": "r",
        }


class TestSubclasses:
    @pytest.mark.parametrize(
        "cls, code",
        [
            (InvalidSpecError, "invalid_spec"),
            (ConflictError, "conflict"),
            (InvocationError, "invocation_failed"),
        ],
    )
    def test_hierarchy_and_codes(self, cls, code):
        error = cls()
        assert isinstance(error, ForwardableError)
        assert error.to_dict()["code"] == code
        assert error.message == cls.default_message

    def test_conflict_names(self):
        error = ConflictError("clash", details={"names": ["a", "b"]})
        assert error.names == ("a", "b")
        assert ConflictError().names == ()

    def test_invocation_error_groups_causes(self):
        errors = [ValueError("a"), TypeError("b")]
        error = InvocationError("failed", errors=errors, result=10)
        assert error.result == 10
        assert error.errors == tuple(errors)
        group = error.get_cause()
        assert isinstance(group, ExceptionGroup)
        assert list(group.exceptions) == errors

    def test_invocation_error_without_errors(self):
        error = InvocationError()
        assert error.errors == ()
        assert error.get_cause() is None

    def test_can_be_raised_and_caught_as_base(self):
        with pytest.raises(ForwardableError):
            raise ConflictError("boom")
