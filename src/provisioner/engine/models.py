from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field
from typing_extensions import Literal


ActionPhase = Literal["apply", "revert", "validate"]
PHASES = ("apply", "revert", "validate")


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_file(path: Union[str, Path], chunk_size: int = 65536) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


class PackageManifest(BaseModel):
    """
    Package defaults declared outside of code.

    Loaded from YAML by PackageIndex.load(); `defaults` is merged into the
    package's default config with the fill-missing rule, `dependents` are
    appended to the package's dependents when not already listed.
    """

    name: str = Field(min_length=1, description="Package name, e.g. nginx")
    description: Optional[str] = None
    defaults: Dict[str, Any] = Field(default_factory=dict)
    dependents: List[str] = Field(default_factory=list, description="Action references run by the package")

    model_config = {"extra": "forbid"}
