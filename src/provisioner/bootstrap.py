"""
Process-level setup: observability and the package index.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from provisioner import __version__
from provisioner.engine import PackageIndex
from provisioner.observability import configure_logging, init_tracing
from provisioner.settings import ProvisionerSettings, get_settings

logger = logging.getLogger(__name__)


def init_observability(settings: Optional[ProvisionerSettings] = None) -> None:
    """Configure logging and tracing from settings."""
    settings = settings or get_settings()

    for issue in settings.validate():
        logger.warning(issue)

    level = settings.LOG_LEVEL.upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"
    configure_logging(level=level, structured=settings.LOG_STRUCTURED)
    init_tracing(
        service_name="provisioner",
        service_version=__version__,
        console_export=settings.TRACE_CONSOLE,
    )


def build_index(
    directory: Union[str, Path, None] = None,
    index: Optional[PackageIndex] = None,
) -> PackageIndex:
    """
    Load package manifests into an index.

    Falls back to PROVISIONER_PACKAGES_DIR; with neither, the index is
    returned as given (or empty).
    """
    index = index if index is not None else PackageIndex()
    if directory is None:
        directory = get_settings().PACKAGES_DIR
    if directory is None:
        return index

    count = index.load(Path(directory))
    logger.info("Loaded %d package manifest(s) from %s", count, directory)
    return index
