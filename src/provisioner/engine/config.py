from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, MutableMapping, Optional


class Config(MutableMapping[str, Any]):
    """
    Hierarchical configuration.

    Values are scalars or nested Config objects (plain mappings are wrapped on
    insert). Accessors report presence instead of raising: `get()` and
    `lookup()` return the default for a missing key. Only `config[key]` raises
    KeyError, as any mapping does.
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        self._data: Dict[str, Any] = {}
        for key, value in dict(data or {}, **kwargs).items():
            self[key] = value

    @staticmethod
    def _wrap(value: Any) -> Any:
        if isinstance(value, Config):
            return value
        if isinstance(value, Mapping):
            return Config(value)
        return value

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[str(key)] = self._wrap(value)

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Config):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self.to_dict() == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Config({self.to_dict()!r})"

    def lookup(self, path: str, default: Any = None) -> Any:
        """Resolve a dotted path (`"nginx.port"`) through nested configs."""
        node: Any = self
        for part in (path or "").split("."):
            if not isinstance(node, Config) or part not in node:
                return default
            node = node[part]
        return node

    def merge(self, other: Optional[Mapping[str, Any]]) -> "Config":
        """
        Fill in keys from `other` that are missing here.

        Present keys are never overwritten. When both sides hold a nested
        mapping for the same key the merge recurses with the same rule.
        Merging the same source twice is a no-op the second time.
        """
        for key, value in (other or {}).items():
            if key not in self._data:
                self[key] = _deep_copy(value)
                continue
            current = self._data[key]
            if isinstance(current, Config) and isinstance(value, Mapping):
                current.merge(value)
        return self

    def copy(self) -> "Config":
        return Config(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        return {k: (v.to_dict() if isinstance(v, Config) else v) for k, v in self._data.items()}


def _deep_copy(value: Any) -> Any:
    if isinstance(value, Config):
        return value.copy()
    if isinstance(value, Mapping):
        return Config(value)
    return value
