# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for configuration module."""

import pytest
from pydantic import ValidationError

from forwardable.composable import ComposableRegistry, FailurePolicy
from forwardable.config import ForwardableSettings, settings
from forwardable.forwarding import ConflictPolicy, ForwardSpec


class TestForwardableSettings:
    def test_singleton_pattern(self):
        assert ForwardableSettings._instance is settings

    def test_frozen_settings(self):
        with pytest.raises(ValidationError):
            settings.LOG_LEVEL = "DEBUG"

    def test_default_values(self, monkeypatch):
        for var in (
            "FORWARDABLE_DEFAULT_CONFLICT_POLICY",
            "FORWARDABLE_DEFAULT_FAILURE_POLICY",
            "FORWARDABLE_LOG_LEVEL",
        ):
            monkeypatch.delenv(var, raising=False)
        config = ForwardableSettings(_env_file=None)
        assert config.DEFAULT_CONFLICT_POLICY == "error"
        assert config.DEFAULT_FAILURE_POLICY == "fail_fast"
        assert config.LOG_LEVEL == "INFO"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("FORWARDABLE_DEFAULT_CONFLICT_POLICY", "skip")
        monkeypatch.setenv("forwardable_default_failure_policy", "continue")
        config = ForwardableSettings(_env_file=None)
        assert config.DEFAULT_CONFLICT_POLICY == "skip"
        assert config.DEFAULT_FAILURE_POLICY == "continue"

    def test_invalid_value_rejected(self, monkeypatch):
        monkeypatch.setenv("FORWARDABLE_DEFAULT_CONFLICT_POLICY", "merge")
        with pytest.raises(ValidationError):
            ForwardableSettings(_env_file=None)


class TestDefaultsApplied:
    def test_conflict_policy_default(self, monkeypatch):
        monkeypatch.setattr(
            "forwardable.config.settings",
            ForwardableSettings(DEFAULT_CONFLICT_POLICY="override", _env_file=None),
        )
        spec = ForwardSpec(lambda t: t, ["foo"])
        assert spec.conflict_policy is ConflictPolicy.OVERRIDE

    def test_failure_policy_default(self, monkeypatch):
        monkeypatch.setattr(
            "forwardable.config.settings",
            ForwardableSettings(DEFAULT_FAILURE_POLICY="continue", _env_file=None),
        )
        assert ComposableRegistry().failure_policy is FailurePolicy.CONTINUE

    def test_explicit_policy_wins(self, monkeypatch):
        monkeypatch.setattr(
            "forwardable.config.settings",
            ForwardableSettings(DEFAULT_FAILURE_POLICY="continue", _env_file=None),
        )
        registry = ComposableRegistry(failure_policy="fail_fast")
        assert registry.failure_policy is FailurePolicy.FAIL_FAST
