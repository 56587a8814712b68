from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import MissingActionError
from .packages import Action, Package, PackageIndex

REF_SEPARATOR = ":"


@dataclass(frozen=True)
class ActionRef:
    """`"action:package"` or bare `"action"`, split once from the right."""

    action: str
    package: Optional[str]
    raw: str

    @classmethod
    def parse(cls, ref: str) -> "ActionRef":
        raw = ref or ""
        if REF_SEPARATOR in raw:
            action, package = raw.rsplit(REF_SEPARATOR, 1)
            return cls(action=action, package=package, raw=raw)
        return cls(action=raw, package=None, raw=raw)

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class CallFrame:
    """One level of the trigger call stack: the active package and the task name."""

    package: Optional[Package]
    task: Optional[str] = None


def resolve_action(index: PackageIndex, ref: ActionRef, active: Optional[Package]) -> Tuple[Package, Action]:
    """
    Locate the action a reference points to.

    An explicit package is looked up in the index; a bare reference is
    resolved against the active package. Raises MissingActionError carrying
    the raw reference when either the package or the action is absent.
    """
    package = index.get(ref.package) if ref.package is not None else active
    action = package.actions.get(ref.action) if package is not None else None
    if package is None or action is None:
        raise MissingActionError(ref.raw)
    return package, action
