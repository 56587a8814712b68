"""Execution contexts and the capability router action bodies run against."""

from .context import ExecutionContext
from .mock import MockExecutionContext
from .router import CapabilityRouter

__all__ = [
    "CapabilityRouter",
    "ExecutionContext",
    "MockExecutionContext",
]
