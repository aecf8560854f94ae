"""Interface-version capability negotiation for local drivers."""

from ascom_facade.capabilities.policy import (
    CONNECT_AND_DEVICE_STATE_THRESHOLD,
    MANDATORY,
    OPTIONAL,
    Fallback,
    MemberPolicy,
    PolicyKind,
    PolicyTable,
    has_connect_and_device_state,
    policy_table,
    since,
)
from ascom_facade.capabilities.shim import CapabilityShim

__all__ = [
    "CONNECT_AND_DEVICE_STATE_THRESHOLD",
    "MANDATORY",
    "OPTIONAL",
    "CapabilityShim",
    "Fallback",
    "MemberPolicy",
    "PolicyKind",
    "PolicyTable",
    "has_connect_and_device_state",
    "policy_table",
    "since",
]
