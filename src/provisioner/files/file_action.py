"""
Managed file actions.

A file declaration on a package generates up to two actions:

  file-content[<name>]      upload the payload and move it into place
  file-permissions[<name>]  enforce owner / group / mode (only when any is given)

Both are appended to the package's dependents so the package runner applies,
reverts and validates them with the rest of the package.

Every spec field may be a literal or a deferred computation evaluated with
the capability router when the action runs:

    pkg.file(
        template="templates/nginx.conf",
        destination=lambda r: f"/etc/nginx/sites-enabled/{r.site}",
        name="nginx-site",
        permissions=0o644,
        user="root",
    )
"""

from __future__ import annotations

import logging
import os
import posixpath
import shlex
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from provisioner.engine.errors import ConfigurationError
from provisioner.engine.packages import Action, Package
from provisioner.settings import get_settings

from .handles import parse_mode

if TYPE_CHECKING:
    from provisioner.executors.router import CapabilityRouter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deferred:
    """A spec value computed from the router at run time."""

    fn: Callable[[CapabilityRouter], Any]

    def resolve(self, router: CapabilityRouter) -> Any:
        return self.fn(router)


def resolve_value(router: CapabilityRouter, value: Any) -> Any:
    if isinstance(value, Deferred):
        return value.resolve(router)
    return value


class FileSpec(BaseModel):
    source: Any = None
    template: Any = None
    destination: Any = None
    name: Optional[str] = None
    permissions: Any = None
    user: Any = None
    group: Any = None
    create_dir: Any = Field(default=None, alias="create_dirs")
    on_apply: Optional[Callable[..., Any]] = None

    model_config = {"extra": "forbid", "populate_by_name": True, "arbitrary_types_allowed": True}

    @field_validator("source", "template", "destination", "permissions", "user", "group", "create_dir", mode="before")
    @classmethod
    def _wrap_deferred(cls, value: Any) -> Any:
        if callable(value) and not isinstance(value, Deferred):
            return Deferred(value)
        if isinstance(value, os.PathLike):
            return os.fspath(value)
        return value

    @field_validator("permissions")
    @classmethod
    def _check_permissions(cls, value: Any) -> Any:
        if value is None or isinstance(value, Deferred):
            return value
        return parse_mode(value)


def parse_file_spec(**fields: Any) -> FileSpec:
    try:
        return FileSpec.model_validate(fields)
    except ValidationError as e:
        raise ConfigurationError(
            code="invalid_file_spec",
            message=f"Invalid file specification: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


class FileAction:
    def __init__(self, package: Package, spec: FileSpec, on_apply: Optional[Callable[..., Any]] = None):
        if spec.source is None and spec.template is None:
            raise ConfigurationError(
                code="file_source_missing",
                message="A file source or template must be provided",
            )
        if spec.destination is None:
            raise ConfigurationError(
                code="file_destination_missing",
                message="A file destination must be provided",
            )
        if spec.name is None and not isinstance(spec.destination, str):
            raise ConfigurationError(
                code="file_name_missing",
                message="A file name must be provided unless destination is a string",
            )
        self.package = package
        self.spec = spec
        self.after_apply = on_apply or spec.on_apply

    @property
    def label(self) -> str:
        return self.spec.name or self.spec.destination

    def action_name(self, suffix: str) -> str:
        return f"file-{suffix}[{self.label}]"

    @property
    def manages_permissions(self) -> bool:
        return not (self.spec.permissions is None and self.spec.user is None and self.spec.group is None)

    # Spec values, resolved against the running context

    def local_path(self, r: CapabilityRouter) -> Optional[str]:
        return resolve_value(r, self.spec.source)

    def template_path(self, r: CapabilityRouter) -> Optional[str]:
        return resolve_value(r, self.spec.template)

    def local_path_for_node(self, r: CapabilityRouter) -> str:
        if self.spec.source is not None:
            return str(self.local_path(r))
        return r.template(self.template_path(r)).render_to_tempfile()

    def remote_path(self, r: CapabilityRouter) -> str:
        return str(resolve_value(r, self.spec.destination))

    def permissions(self, r: CapabilityRouter) -> Optional[int]:
        return parse_mode(resolve_value(r, self.spec.permissions))

    def user(self, r: CapabilityRouter) -> Optional[str]:
        return resolve_value(r, self.spec.user)

    def group(self, r: CapabilityRouter) -> Optional[str]:
        return resolve_value(r, self.spec.group)

    def create_dir(self, r: CapabilityRouter) -> Any:
        return resolve_value(r, self.spec.create_dir)

    def run_after_apply(self, r: CapabilityRouter) -> None:
        if self.after_apply is not None:
            self.after_apply(r)

    # Generated bodies

    def apply_content(self, r: CapabilityRouter) -> None:
        destination = self.remote_path(r)
        create_dir = self.create_dir(r)
        if create_dir:
            directory = (posixpath.dirname(destination) or ".") if create_dir is True else str(create_dir)
            r.sudo(f"mkdir -p {shlex.quote(directory)}")
            user = self.user(r)
            if user:
                owner = f"{user}:{self.group(r) or user}"
                r.sudo(f"chown {shlex.quote(owner)} {shlex.quote(directory)}")

        local_file = r.local(self.local_path_for_node(r))
        tmp_path = f"{get_settings().TMP_PREFIX}-{local_file.content_hash()[:16]}"
        local_file.copy_to(r.remote(tmp_path))
        r.sudo(f"mv {shlex.quote(tmp_path)} {shlex.quote(destination)}")
        self.run_after_apply(r)

    def revert_content(self, r: CapabilityRouter) -> None:
        r.remote(self.remote_path(r)).delete()

    def validate_content(self, r: CapabilityRouter) -> bool:
        remote = r.remote(self.remote_path(r))
        if not remote.exists():
            return False
        return r.local(self.local_path_for_node(r)).matches(remote)

    def apply_permissions(self, r: CapabilityRouter) -> None:
        remote = r.remote(self.remote_path(r))
        user, group = self.user(r), self.group(r)
        if user is not None:
            remote.set_owner(user, group)
        elif group is not None:
            remote.set_group(group)
        mask = self.permissions(r)
        if mask is not None:
            remote.set_permissions(mask)
        self.run_after_apply(r)

    def validate_permissions(self, r: CapabilityRouter) -> bool:
        mode, owner, group = r.remote(self.remote_path(r)).stat()
        expected_mode, expected_user, expected_group = self.permissions(r), self.user(r), self.group(r)
        if expected_mode is not None and mode != expected_mode:
            return False
        if expected_user is not None and owner != expected_user:
            return False
        if expected_group is not None and group != expected_group:
            return False
        return True

    # Registration

    def configure(self) -> List[Action]:
        names = [self.action_name("content")]
        if self.manages_permissions:
            names.append(self.action_name("permissions"))
        for name in names:
            if name in self.package.actions:
                raise ConfigurationError(
                    code="duplicate_action",
                    message=f"Action '{name}' is already defined in package '{self.package.name}'",
                    details={"package": self.package.name, "action": name},
                )

        actions = [
            self.package.action(
                names[0],
                apply=self.apply_content,
                revert=self.revert_content,
                validate=self.validate_content,
                description=f"Upload {self.label}",
            )
        ]
        if self.manages_permissions:
            actions.append(
                self.package.action(
                    names[1],
                    apply=self.apply_permissions,
                    validate=self.validate_permissions,
                    description=f"Enforce ownership and mode of {self.label}",
                )
            )
        for action in actions:
            self.package.depends_on(action.ref)
            logger.debug("Registered %s", action.ref)
        return actions


def define_file(package: Package, **fields: Any) -> List[Action]:
    """Declare a managed file on `package` and register its generated actions."""
    return FileAction(package, parse_file_spec(**fields)).configure()
