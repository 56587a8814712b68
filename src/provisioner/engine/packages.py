from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

import yaml
from pydantic import ValidationError

from .config import Config
from .errors import ConfigurationError
from .models import PHASES, PackageManifest

logger = logging.getLogger(__name__)

# Bodies receive the capability router first, then any forwarded trigger arguments.
ActionBody = Callable[..., Any]


@dataclass
class Action:
    name: str
    package: str
    apply: Optional[ActionBody] = None
    revert: Optional[ActionBody] = None
    validate: Optional[ActionBody] = None
    description: str = ""

    @property
    def ref(self) -> str:
        return f"{self.name}:{self.package}"

    def body(self, phase: str) -> Optional[ActionBody]:
        if phase not in PHASES:
            raise ValueError(f"unknown_action_phase: {phase}")
        return getattr(self, phase)

    def applies(self, fn: ActionBody) -> ActionBody:
        self.apply = fn
        return fn

    def reverts(self, fn: ActionBody) -> ActionBody:
        self.revert = fn
        return fn

    def validates(self, fn: ActionBody) -> ActionBody:
        self.validate = fn
        return fn


@dataclass
class Package:
    """
    Named bundle of actions plus default configuration.

    `dependents` lists the action references the package runner walks when
    the package is applied, reverted or validated. Generated file actions are
    appended here.
    """

    name: str
    defaults: Config = field(default_factory=Config)
    description: str = ""
    actions: Dict[str, Action] = field(default_factory=dict)
    dependents: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not (self.name or "").strip():
            raise ConfigurationError(code="package_name_missing", message="A package name must be provided")
        if not isinstance(self.defaults, Config):
            self.defaults = Config(self.defaults)

    def action(
        self,
        name: str,
        apply: Optional[ActionBody] = None,
        revert: Optional[ActionBody] = None,
        validate: Optional[ActionBody] = None,
        description: str = "",
    ) -> Action:
        return self.add_action(
            Action(name=name, package=self.name, apply=apply, revert=revert, validate=validate, description=description)
        )

    def add_action(self, action: Action) -> Action:
        if not (action.name or "").strip():
            raise ConfigurationError(code="action_name_missing", message="An action name must be provided")
        if action.name in self.actions:
            raise ConfigurationError(
                code="duplicate_action",
                message=f"Action '{action.name}' is already defined in package '{self.name}'",
                details={"package": self.name, "action": action.name},
            )
        action.package = self.name
        self.actions[action.name] = action
        return action

    def depends_on(self, action_ref: str) -> None:
        if action_ref not in self.dependents:
            self.dependents.append(action_ref)

    def file(self, **spec: Any) -> List[Action]:
        """Declare a managed file; see provisioner.files.file_action."""
        from provisioner.files.file_action import define_file

        return define_file(self, **spec)

    def merge_configuration(self, config: Config) -> Config:
        return config.merge(self.defaults)


class PackageIndex:
    """Registry of packages keyed by name. The engine only reads from it."""

    def __init__(self, packages: Optional[Mapping[str, Package]] = None):
        self._packages: Dict[str, Package] = {}
        for package in (packages or {}).values():
            self.register(package)

    def register(self, package: Package) -> Package:
        if package.name in self._packages:
            raise ConfigurationError(
                code="duplicate_package",
                message=f"Package '{package.name}' is already registered",
                details={"package": package.name},
            )
        self._packages[package.name] = package
        return package

    def get(self, name: Optional[str]) -> Optional[Package]:
        return self._packages.get((name or "").strip())

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __iter__(self) -> Iterator[Package]:
        return iter(self.list_packages())

    def __len__(self) -> int:
        return len(self._packages)

    def list_packages(self) -> List[Package]:
        return [self._packages[k] for k in sorted(self._packages.keys())]

    def load(self, directory: Path) -> int:
        """
        Apply YAML package manifests from `directory`.

        Unknown packages are created; existing ones get their defaults filled
        in (never overwritten) and their dependents extended. Returns the
        number of manifests read.
        """
        directory = Path(directory)
        if not directory.exists():
            raise FileNotFoundError(f"packages_dir_not_found: {directory}")

        manifests: List[PackageManifest] = []
        for path in sorted(directory.glob("*.y*ml")):
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            if not isinstance(data, dict):
                raise ConfigurationError(
                    code="invalid_package_manifest",
                    message=f"Package manifest must be a mapping: {path}",
                    details={"path": str(path)},
                )
            try:
                manifests.append(PackageManifest.model_validate(data))
            except ValidationError as e:
                raise ConfigurationError(
                    code="invalid_package_manifest",
                    message=f"Invalid package manifest: {path}",
                    details={"path": str(path), "errors": e.errors(include_url=False)},
                ) from e

        for manifest in manifests:
            package = self.get(manifest.name)
            if package is None:
                package = self.register(Package(name=manifest.name))
            package.defaults.merge(manifest.defaults)
            if manifest.description and not package.description:
                package.description = manifest.description
            for ref in manifest.dependents:
                package.depends_on(ref)
            logger.debug("Loaded manifest for package %s", manifest.name)

        return len(manifests)
