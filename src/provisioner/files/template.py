"""
Template rendering.

Placeholders are `${dotted.path}` (or `$name`) resolved against the render
variables, walking nested configs and mappings by key and other objects by
attribute. An unknown placeholder raises KeyError; `$$` is a literal `$`.
"""

from __future__ import annotations

import logging
import os
import string
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from provisioner.engine.models import sha256_bytes
from provisioner.settings import get_settings

if TYPE_CHECKING:
    from provisioner.executors.context import ExecutionContext

logger = logging.getLogger(__name__)


class _DottedTemplate(string.Template):
    idpattern = r"(?a:[_a-z][_a-z0-9]*(?:\.[_a-z][_a-z0-9]*)*)"


class _Variables(Mapping):
    def __init__(self, variables: Dict[str, Any]):
        self._variables = variables

    def __getitem__(self, key: str) -> Any:
        head, *rest = key.split(".")
        value = self._variables[head]
        for part in rest:
            if isinstance(value, Mapping):
                if part not in value:
                    raise KeyError(key)
                value = value[part]
            elif hasattr(value, part):
                value = getattr(value, part)
            else:
                raise KeyError(key)
        return value

    def __iter__(self):
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)


class Template:
    def __init__(self, path: str, context: Optional["ExecutionContext"] = None):
        self.path = str(path)
        self.context = context

    def __repr__(self) -> str:
        return f"Template({self.path!r})"

    def source(self) -> str:
        """Template text: the file at `path`, or `path` itself when no such file exists."""
        if os.path.isfile(self.path):
            return Path(self.path).read_text(encoding="utf-8")
        return self.path

    def default_variables(self) -> Dict[str, Any]:
        if self.context is None:
            return {}
        return {"config": self.context.config, "node": self.context.node}

    def render(self, variables: Optional[Dict[str, Any]] = None) -> str:
        merged = self.default_variables()
        merged.update(variables or {})
        return _DottedTemplate(self.source()).substitute(_Variables(merged))

    def render_to_tempfile(self, variables: Optional[Dict[str, Any]] = None) -> str:
        """
        Render into the template cache and return the file path.

        The file name is the sha256 of the rendered bytes, so identical output
        maps to the same file and is only written once.
        """
        data = self.render(variables).encode("utf-8")
        cache_dir = get_settings().TEMPLATE_CACHE
        cache_dir.mkdir(parents=True, exist_ok=True)
        target = cache_dir / f"provisioner-template-{sha256_bytes(data)}"
        if not target.exists():
            partial = target.with_name(f"{target.name}.{os.getpid()}.partial")
            partial.write_bytes(data)
            os.replace(partial, target)
            logger.debug("Rendered %s to %s", self.path, target)
        return str(target)
