# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .descriptors import ForwardedAttribute, ForwardedMember, ForwardedMethod
from .engine import (
    PlanAction,
    PlanStep,
    forwarding_specs,
    install_forwarding,
    install_specs,
    is_forwarded,
    plan_forwarding,
)
from .spec import ConflictPolicy, ForwardSpec, PropertyKind, inspect_kind, via

__all__ = (
    "ConflictPolicy",
    "ForwardSpec",
    "ForwardedAttribute",
    "ForwardedMember",
    "ForwardedMethod",
    "PlanAction",
    "PlanStep",
    "PropertyKind",
    "forwarding_specs",
    "inspect_kind",
    "install_forwarding",
    "install_specs",
    "is_forwarded",
    "plan_forwarding",
    "via",
)
