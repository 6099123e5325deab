# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging

from ._errors import (
    ConflictError,
    ForwardableError,
    InvalidSpecError,
    InvocationError,
)
from .composable import (
    ComposableFunction,
    ComposableRegistry,
    FailurePolicy,
    constituents_of,
    default_registry,
    extend,
    is_composable,
    remove,
)
from .config import settings
from .forwarding import (
    ConflictPolicy,
    ForwardSpec,
    PropertyKind,
    forwarding_specs,
    install_forwarding,
    install_specs,
    is_forwarded,
    via,
)
from .version import __version__

logger = logging.getLogger(__name__)
logger.setLevel(settings.LOG_LEVEL)

__all__ = (
    "__version__",
    "ComposableFunction",
    "ComposableRegistry",
    "ConflictError",
    "ConflictPolicy",
    "FailurePolicy",
    "ForwardSpec",
    "ForwardableError",
    "InvalidSpecError",
    "InvocationError",
    "PropertyKind",
    "constituents_of",
    "default_registry",
    "extend",
    "forwarding_specs",
    "install_forwarding",
    "install_specs",
    "is_composable",
    "is_forwarded",
    "logger",
    "remove",
    "settings",
    "via",
)
