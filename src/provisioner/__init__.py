"""Provisioner (package execution engine).

This package provides:
- Packages, actions and the package index (defaults + YAML manifests)
- Execution contexts that run action bodies against a node, with a mock variant for dry-runs
- The file action generator (content + permissions actions)
"""

__version__ = "0.1.0"
