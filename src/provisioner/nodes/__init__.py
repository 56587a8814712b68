"""Target node interface."""

from .base import Node, NodeHelper

__all__ = ["Node", "NodeHelper"]
