"""Dry-run execution context."""

from __future__ import annotations

from typing import Any, Optional

from .context import ExecutionContext


class MockExecutionContext(ExecutionContext):
    """
    Execution context that describes node effects instead of performing them.

    Trigger resolution, config merging, routing and user forks behave exactly
    as in ExecutionContext; every node-mutating primitive is reported through
    `log.mock_execute()` and returns an empty result.
    """

    def run(self, cmd: str, **opts: Any) -> str:
        self._log.mock_execute(cmd)
        return ""

    def sudo(self, cmd: str, **opts: Any) -> str:
        self._log.mock_execute(f"sudo {cmd}")
        return ""

    def upload(self, src: str, dst: str) -> None:
        self._log.mock_execute(f"UPLOAD: {src} => {dst}")

    def download(self, src: str, dst: str) -> None:
        self._log.mock_execute(f"DOWNLOAD: {dst} <= {src}")

    def mkdir(self, path: str) -> None:
        self._log.mock_execute(f"MKDIR: {path}")

    def remove(self, path: str) -> None:
        self._log.mock_execute(f"REMOVE: {path}")

    def copy(self, src: str, dst: str) -> None:
        self._log.mock_execute(f"COPY: {src} {dst}")

    def move(self, src: str, dst: str) -> None:
        self._log.mock_execute(f"MOVE: {src} {dst}")

    def set_permissions(self, path: str, mask: int) -> None:
        self._log.mock_execute(f"SET_PERMISSIONS: {path} {mask:o}")

    def set_owner(self, path: str, user: str, group: Optional[str] = None) -> None:
        self._log.mock_execute(f"SET_OWNER: {path} {user}{f' {group}' if group else ''}")
