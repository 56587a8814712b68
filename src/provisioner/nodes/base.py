"""
Node Abstract Base Class

Defines the interface the execution engine consumes to act on a target
machine. Transports (SSH or similar) implement it; the engine never talks to a
machine any other way.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional


class NodeHelper(ABC):
    """Per-node shell helper."""

    @abstractmethod
    def set_cwd(self, path: Optional[str]) -> Optional[str]:
        """
        Set the working directory used for subsequent commands.

        Args:
            path: New working directory, or None for the login directory

        Returns:
            The previous working directory
        """
        ...


class Node(ABC):
    """
    Abstract target machine.

    Implementations must provide:
    - identity: `name`, `user`, `config`, `helper`
    - command execution: run, sudo, env, binary_exists
    - file operations: upload, download, mkdir, delete, copy, move,
      set_permissions, set_owner
    - for_user: a handle on the same machine acting as another user

    Errors raised by a transport propagate through the engine unchanged.
    """

    name: str = "node"
    user: Optional[str] = None
    config: Mapping[str, Any] = {}

    @property
    @abstractmethod
    def helper(self) -> NodeHelper:
        ...

    @abstractmethod
    def run(self, cmd: str, **opts: Any) -> str:
        """Run a command as the node user and return its output."""
        ...

    @abstractmethod
    def sudo(self, cmd: str, **opts: Any) -> str:
        """Run a command with elevated privileges and return its output."""
        ...

    @abstractmethod
    def env(self, name: str) -> Optional[str]:
        ...

    @abstractmethod
    def binary_exists(self, name: str) -> bool:
        ...

    @abstractmethod
    def upload(self, src: str, dst: str) -> None:
        """Copy a controller-side file to the node."""
        ...

    @abstractmethod
    def download(self, src: str, dst: str) -> None:
        """Copy a node-side file to the controller."""
        ...

    @abstractmethod
    def mkdir(self, path: str) -> None:
        ...

    @abstractmethod
    def delete(self, path: str) -> None:
        ...

    @abstractmethod
    def copy(self, src: str, dst: str) -> None:
        ...

    @abstractmethod
    def move(self, src: str, dst: str) -> None:
        ...

    @abstractmethod
    def set_permissions(self, path: str, mask: int) -> None:
        ...

    @abstractmethod
    def set_owner(self, path: str, user: str, group: Optional[str] = None) -> None:
        """Change owner, and group when given. Group-only changes run `chgrp` through sudo instead."""
        ...

    @abstractmethod
    def for_user(self, user: str) -> "Node":
        """Return a handle on the same machine acting as `user`."""
        ...
