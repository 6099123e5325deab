# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .function import ComposableFunction, FailurePolicy
from .registry import (
    ComposableRegistry,
    constituents_of,
    default_registry,
    extend,
    is_composable,
    remove,
)

__all__ = (
    "ComposableFunction",
    "ComposableRegistry",
    "FailurePolicy",
    "constituents_of",
    "default_registry",
    "extend",
    "is_composable",
    "remove",
)
