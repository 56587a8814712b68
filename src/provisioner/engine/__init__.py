"""Packages, actions, configuration and trigger resolution."""

from .config import Config
from .errors import ConfigLookupError, ConfigurationError, MissingActionError, ProvisionerError
from .models import PHASES, ActionPhase, PackageManifest
from .packages import Action, ActionBody, Package, PackageIndex
from .resolver import ActionRef, CallFrame, resolve_action
from .runner import PackageRunner

__all__ = [
    "Action",
    "ActionBody",
    "ActionPhase",
    "ActionRef",
    "CallFrame",
    "Config",
    "ConfigLookupError",
    "ConfigurationError",
    "MissingActionError",
    "PHASES",
    "PackageIndex",
    "PackageManifest",
    "Package",
    "PackageRunner",
    "ProvisionerError",
    "resolve_action",
]
