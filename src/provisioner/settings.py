"""
Provisioner Settings

Centralized configuration read from the environment (and a local .env file).
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class ProvisionerSettings:
    """Configuration for the execution engine."""

    def __init__(self) -> None:
        # Logging
        self.LOG_LEVEL: str = os.getenv("PROVISIONER_LOG_LEVEL", "INFO")
        self.LOG_STRUCTURED: bool = _env_bool("PROVISIONER_LOG_STRUCTURED")

        # Tracing
        self.TRACE_CONSOLE: bool = _env_bool("PROVISIONER_TRACE_CONSOLE")

        # Remote temp files are named <TMP_PREFIX>-<content hash>
        self.TMP_PREFIX: str = os.getenv("PROVISIONER_TMP_PREFIX", "provisioner-tmp")

        # Filesystem paths
        self.TEMPLATE_CACHE: Path = Path(os.getenv("PROVISIONER_TEMPLATE_CACHE", tempfile.gettempdir()))
        packages_dir = os.getenv("PROVISIONER_PACKAGES_DIR", "").strip()
        self.PACKAGES_DIR: Optional[Path] = Path(packages_dir) if packages_dir else None

    def validate(self) -> list[str]:
        """Validate configuration and return list of issues."""
        issues = []

        if self.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            issues.append(f"ERROR: Unknown log level {self.LOG_LEVEL} (PROVISIONER_LOG_LEVEL)")

        if not self.TMP_PREFIX.strip() or self.TMP_PREFIX.endswith("/"):
            issues.append("ERROR: PROVISIONER_TMP_PREFIX must end in a file name prefix, not a directory")

        if self.PACKAGES_DIR is not None and not self.PACKAGES_DIR.exists():
            issues.append(f"WARNING: Packages directory not found at {self.PACKAGES_DIR}")

        return issues


_settings: Optional[ProvisionerSettings] = None


def get_settings() -> ProvisionerSettings:
    global _settings
    if _settings is None:
        _settings = ProvisionerSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
