"""
Execution context.

Binds a node, its log sink, the package index and a config to one invocation
chain. Action bodies never see the context directly; they are called with a
CapabilityRouter.
"""

from __future__ import annotations

import logging
import subprocess
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Mapping, Optional

from provisioner.engine.config import Config
from provisioner.engine.packages import Package, PackageIndex
from provisioner.engine.resolver import ActionRef, CallFrame, resolve_action
from provisioner.files.handles import LocalFile, RemoteFile
from provisioner.files.template import Template
from provisioner.nodes.base import Node
from provisioner.observability.log_sink import LogSink
from provisioner.observability.tracing import create_span

from .router import CapabilityRouter

logger = logging.getLogger(__name__)


class ExecutionContext:
    def __init__(
        self,
        node: Node,
        log: LogSink,
        index: PackageIndex,
        config: Optional[Config] = None,
        *,
        overrides: Optional[Mapping[str, Any]] = None,
        package: Optional[Package] = None,
    ):
        """
        Args:
            node: Target node handle (not owned)
            log: Sink every primitive reports to
            index: Package index used to resolve explicit references
            config: Shared config object; when omitted a snapshot of the
                node config is taken
            overrides: Caller-level values layered above the node config
            package: Active package of the root frame
        """
        self.node = node
        self._log = log
        self.index = index
        if config is None:
            config = Config(overrides).copy().merge(node.config)
        elif overrides:
            raise ValueError("overrides_with_shared_config")
        self.config = config
        self._frames: List[CallFrame] = [CallFrame(package=package, task=None)]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(node={getattr(self.node, 'name', None)!r}, user={self.node.user!r})"

    # ──────────────────────────────────────────────────────
    # CALL FRAMES
    # ──────────────────────────────────────────────────────

    @property
    def active_package(self) -> Optional[Package]:
        return self._frames[-1].package

    @property
    def current_task(self) -> Optional[str]:
        return self._frames[-1].task

    @property
    def depth(self) -> int:
        return len(self._frames) - 1

    def router(self) -> CapabilityRouter:
        return CapabilityRouter(self)

    def execute(self, body: Callable[..., Any], *args: Any) -> Any:
        """Run an action body with the router as first argument."""
        return body(self.router(), *args)

    # ──────────────────────────────────────────────────────
    # SCOPES
    # ──────────────────────────────────────────────────────

    def for_user(self, user: Optional[str]) -> "ExecutionContext":
        if user is None or user == self.node.user:
            return self
        new_node = self.node.for_user(user)
        new_log = self._log.clone_for_node(new_node)
        logger.debug("Forking context for user %s on %s", user, getattr(self.node, "name", None))
        return type(self)(new_node, new_log, self.index, self.config, package=self.active_package)

    def as_user(self, user: Optional[str], body: Callable[..., Any]) -> Any:
        return self.for_user(user).execute(body)

    @contextmanager
    def working_dir(self, path: str) -> Iterator[None]:
        previous = self.node.helper.set_cwd(path)
        self._log.log(f"CWD: {path}")
        try:
            yield
        finally:
            self.node.helper.set_cwd(previous)

    def in_dir(self, path: str, body: Callable[..., Any]) -> Any:
        with self.working_dir(path):
            return self.execute(body)

    # ──────────────────────────────────────────────────────
    # PRIMITIVES
    # ──────────────────────────────────────────────────────

    def run_local(self, cmd: str) -> None:
        self._log.local(cmd)
        completed = subprocess.run(cmd, shell=True, capture_output=True, text=True)
        self._log.stdout(completed.stdout)
        self._log.stderr(completed.stderr)
        if completed.returncode != 0:
            logger.debug("Local command exited with %s: %s", completed.returncode, cmd)

    def run(self, cmd: str, **opts: Any) -> str:
        self._log.log(f"RUN: {cmd}")
        output = self.node.run(cmd, **opts)
        self._log.stdout(output)
        return output

    def sudo(self, cmd: str, **opts: Any) -> str:
        self._log.log(f"SUDO: {cmd}")
        output = self.node.sudo(cmd, **opts)
        self._log.stdout(output)
        return output

    def env(self, var: str) -> Optional[str]:
        value = self.node.env(var)
        self._log.log(f"ENV: {var}={value}")
        return value

    def log(self, msg: Optional[str] = None) -> LogSink:
        if msg:
            self._log.log(msg)
        return self._log

    def upload(self, src: str, dst: str) -> None:
        self._log.log(f"UPLOAD: {src} => {dst}")
        self.node.upload(src, dst)

    def download(self, src: str, dst: str) -> None:
        self._log.log(f"DOWNLOAD: {dst} <= {src}")
        self.node.download(src, dst)

    def mkdir(self, path: str) -> None:
        self._log.log(f"MKDIR: {path}")
        self.node.mkdir(path)

    def remove(self, path: str) -> None:
        self._log.log(f"REMOVE: {path}")
        self.node.delete(path)

    def copy(self, src: str, dst: str) -> None:
        self._log.log(f"COPY: {src} {dst}")
        self.node.copy(src, dst)

    def move(self, src: str, dst: str) -> None:
        self._log.log(f"MOVE: {src} {dst}")
        self.node.move(src, dst)

    def set_permissions(self, path: str, mask: int) -> None:
        self._log.log(f"SET_PERMISSIONS: {path} {mask:o}")
        self.node.set_permissions(path, mask)

    def set_owner(self, path: str, user: str, group: Optional[str] = None) -> None:
        self._log.log(f"SET_OWNER: {path} {user}{f' {group}' if group else ''}")
        self.node.set_owner(path, user, group)

    def binary_exists(self, binary: str) -> bool:
        exists = bool(self.node.binary_exists(binary))
        self._log.log(f"BINARY_EXISTS: {binary} {exists}")
        return exists

    def local(self, path: str) -> LocalFile:
        return LocalFile(self, path)

    def remote(self, path: str) -> RemoteFile:
        return RemoteFile(self, path)

    def template(self, path: str) -> Template:
        return Template(path, self)

    # ──────────────────────────────────────────────────────
    # TRIGGERS
    # ──────────────────────────────────────────────────────

    def trigger(self, action_ref: str, *args: Any) -> Any:
        """Run the apply body of the referenced action."""
        return self.run_phase(action_ref, "apply", *args)

    def run_phase(self, action_ref: str, phase: str, *args: Any) -> Any:
        """
        Resolve `action_ref` and run one of its bodies.

        The target package's defaults are merged into the config (missing keys
        only), a call frame making it the active package is pushed, and the
        log task is switched to the reference. Frame and task are restored
        before any error propagates.
        """
        ref = ActionRef.parse(action_ref)
        package, action = resolve_action(self.index, ref, self.active_package)
        body = action.body(phase)

        package.merge_configuration(self.config)

        previous_task = self._log.set_task(ref.raw)
        self._frames.append(CallFrame(package=package, task=ref.raw))
        try:
            with create_span(
                "trigger",
                {"action.ref": ref.raw, "action.phase": phase, "node.name": getattr(self.node, "name", None)},
            ):
                if body is None:
                    logger.debug("Action %s has no %s body", action.ref, phase)
                    return None
                logger.debug("Running %s of %s (depth %d)", phase, action.ref, self.depth)
                return self.execute(body, *args)
        finally:
            self._frames.pop()
            self._log.set_task(previous_task)
