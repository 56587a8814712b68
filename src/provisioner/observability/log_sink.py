"""
Node log sinks.

Every primitive an execution context performs is reported through a LogSink
bound to the node it runs against. NodeLog is the default implementation on
top of stdlib logging; records carry `node` and `task` as extra fields so the
structured formatter can emit them.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional


class LogSink(ABC):
    """Interface the execution context logs through."""

    @abstractmethod
    def log(self, msg: str) -> None:
        ...

    @abstractmethod
    def local(self, cmd: str) -> None:
        """A command about to run on the controlling machine."""
        ...

    @abstractmethod
    def stdout(self, text: str) -> None:
        ...

    @abstractmethod
    def stderr(self, text: str) -> None:
        ...

    @abstractmethod
    def mock_execute(self, description: str) -> None:
        """An effect that was described instead of performed (dry-run)."""
        ...

    @abstractmethod
    def set_task(self, name: Optional[str]) -> Optional[str]:
        """Set the current task name, returning the previous one."""
        ...

    @abstractmethod
    def clone_for_node(self, node: Any) -> "LogSink":
        ...


class NodeLog(LogSink):
    def __init__(self, node: Any, task: Optional[str] = None, logger: Optional[logging.Logger] = None):
        self.node_name = str(getattr(node, "name", None) or "node")
        self.task = task
        self._logger = logger or logging.getLogger(f"provisioner.node.{self.node_name}")

    def _emit(self, level: int, msg: str) -> None:
        prefix = f"[{self.node_name}]" + (f"[{self.task}]" if self.task else "")
        self._logger.log(level, "%s %s", prefix, msg, extra={"node": self.node_name, "task": self.task})

    def _emit_lines(self, level: int, label: str, text: Optional[str]) -> None:
        for line in (text or "").splitlines():
            if line.strip():
                self._emit(level, f"{label}: {line}")

    def log(self, msg: str) -> None:
        self._emit(logging.INFO, msg)

    def local(self, cmd: str) -> None:
        self._emit(logging.INFO, f"LOCAL: {cmd}")

    def stdout(self, text: str) -> None:
        self._emit_lines(logging.DEBUG, "STDOUT", text)

    def stderr(self, text: str) -> None:
        self._emit_lines(logging.WARNING, "STDERR", text)

    def mock_execute(self, description: str) -> None:
        self._emit(logging.INFO, f"MOCK: {description}")

    def set_task(self, name: Optional[str]) -> Optional[str]:
        previous = self.task
        self.task = name
        return previous

    def clone_for_node(self, node: Any) -> "NodeLog":
        return NodeLog(node, task=self.task)
