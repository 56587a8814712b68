from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


class ProvisionerError(Exception):
    """Base class for errors raised by the execution engine."""


@dataclass(eq=False)
class ConfigurationError(ProvisionerError):
    """
    A package, action or file definition is malformed.

    Raised while definitions are being registered, before anything runs.
    """

    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class MissingActionError(ProvisionerError):
    """An action reference could not be resolved against the package index."""

    def __init__(self, action_ref: str):
        super().__init__(f"Action '{action_ref}' could not be found.")
        self.action_ref = action_ref


class ConfigLookupError(ProvisionerError, AttributeError):
    """A configuration field read through the capability router is absent."""

    def __init__(self, field_name: str):
        super().__init__(f"Configuration field '{field_name}' is not defined.")
        self.field_name = field_name
