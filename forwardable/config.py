# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ("ForwardableSettings", "settings")


class ForwardableSettings(BaseSettings, frozen=True):
    """Library defaults with environment variable support.

    Every value can be overridden with a ``FORWARDABLE_`` prefixed variable,
    e.g. ``FORWARDABLE_DEFAULT_CONFLICT_POLICY=skip``.
    """

    model_config = SettingsConfigDict(
        env_prefix="FORWARDABLE_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    DEFAULT_CONFLICT_POLICY: Literal["error", "skip", "override"] = Field(
        default="error",
        description="Policy used when install_forwarding gets no explicit one",
    )
    DEFAULT_FAILURE_POLICY: Literal["fail_fast", "continue"] = Field(
        default="fail_fast",
        description="Constituent failure policy for new composable registries",
    )
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    _instance: ClassVar[Any] = None


settings = ForwardableSettings()
ForwardableSettings._instance = settings
