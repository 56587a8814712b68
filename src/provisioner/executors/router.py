"""Capability router: the vocabulary exposed to action bodies."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional

from provisioner.engine.errors import ConfigLookupError

if TYPE_CHECKING:
    from .context import ExecutionContext


class CapabilityRouter:
    """
    Routes calls from an action body to its execution context.

    Resolution order:
      1. the explicit operations listed in OPERATIONS;
      2. any other public attribute is read from the context config, and a
         missing field raises ConfigLookupError (an AttributeError).

    `get(field, default)` is the non-raising form of step 2.
    """

    OPERATIONS = frozenset((
        "node", "config", "as_user", "in_dir", "run_local", "run", "sudo", "env", "log",
        "upload", "download", "mkdir", "remove", "local", "remote", "template", "trigger",
        "binary_exists",
    ))

    __slots__ = ("_context",)

    def __init__(self, context: "ExecutionContext"):
        self._context = context

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        config = self._context.config
        if name not in config:
            raise ConfigLookupError(name)
        return config[name]

    def __repr__(self) -> str:
        return f"CapabilityRouter({self._context!r})"

    def get(self, field: str, default: Any = None) -> Any:
        return self._context.config.get(field, default)

    @property
    def node(self):
        return self._context.node

    @property
    def config(self):
        return self._context.config

    def as_user(self, user: Optional[str], body: Callable[..., Any]) -> Any:
        return self._context.as_user(user, body)

    def in_dir(self, path: str, body: Callable[..., Any]) -> Any:
        return self._context.in_dir(path, body)

    def run_local(self, cmd: str) -> None:
        return self._context.run_local(cmd)

    def run(self, cmd: str, **opts: Any) -> str:
        return self._context.run(cmd, **opts)

    def sudo(self, cmd: str, **opts: Any) -> str:
        return self._context.sudo(cmd, **opts)

    def env(self, var: str) -> Optional[str]:
        return self._context.env(var)

    def log(self, msg: Optional[str] = None):
        return self._context.log(msg)

    def upload(self, src: str, dst: str) -> None:
        return self._context.upload(src, dst)

    def download(self, src: str, dst: str) -> None:
        return self._context.download(src, dst)

    def mkdir(self, path: str) -> None:
        return self._context.mkdir(path)

    def remove(self, path: str) -> None:
        return self._context.remove(path)

    def local(self, path: str):
        return self._context.local(path)

    def remote(self, path: str):
        return self._context.remote(path)

    def template(self, path: str):
        return self._context.template(path)

    def trigger(self, action_ref: str, *args: Any) -> Any:
        return self._context.trigger(action_ref, *args)

    def binary_exists(self, binary: str) -> bool:
        return self._context.binary_exists(binary)
