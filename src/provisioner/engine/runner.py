from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from .errors import MissingActionError
from .packages import Action, Package
from .resolver import ActionRef, resolve_action

if TYPE_CHECKING:
    from provisioner.executors.context import ExecutionContext

logger = logging.getLogger(__name__)


class PackageRunner:
    """
    Runs a package's dependents through one execution context.

    Usage:
        runner = PackageRunner(context)
        runner.apply("nginx")
        assert runner.validate("nginx")

    Dry-run: pass a MockExecutionContext.
    """

    def __init__(self, context: "ExecutionContext"):
        self.context = context

    def _package(self, package: str) -> Package:
        found: Optional[Package] = self.context.index.get(package)
        if found is None:
            raise MissingActionError(package)
        return found

    def _refs(self, package: Package) -> List[str]:
        # Own action names win over the separator, so "svc[host:80]" stays local.
        return [
            f"{ref}:{package.name}" if ref in package.actions or ":" not in ref else ref
            for ref in package.dependents
        ]

    def _action(self, ref: str, package: Package) -> Action:
        return resolve_action(self.context.index, ActionRef.parse(ref), package)[1]

    def apply(self, package: str, *, skip_valid: bool = False) -> int:
        """
        Apply every dependent in declaration order.

        With skip_valid, dependents whose validate body returns truthy are left
        alone. Returns the number of dependents applied.
        """
        pkg = self._package(package)
        applied = 0
        for ref in self._refs(pkg):
            if skip_valid and self._action(ref, pkg).validate is not None and self.context.run_phase(ref, "validate"):
                logger.info("Skipping %s: already valid", ref)
                continue
            self.context.run_phase(ref, "apply")
            applied += 1
        logger.info("Applied %d action(s) of package %s", applied, pkg.name)
        return applied

    def revert(self, package: str) -> int:
        """Revert dependents in reverse order. Returns the number reverted."""
        pkg = self._package(package)
        refs = self._refs(pkg)
        for ref in reversed(refs):
            self.context.run_phase(ref, "revert")
        logger.info("Reverted %d action(s) of package %s", len(refs), pkg.name)
        return len(refs)

    def validate(self, package: str) -> bool:
        """True only when every dependent with a validate body reports valid."""
        pkg = self._package(package)
        for ref in self._refs(pkg):
            if self._action(ref, pkg).validate is None:
                continue
            if not self.context.run_phase(ref, "validate"):
                logger.info("Validation failed for %s", ref)
                return False
        return True
