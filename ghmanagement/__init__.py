"""Declarative GitHub repository management.

Repositories are described in YAML manifests (:mod:`ghmanagement.manifest`),
reconciled into resource declarations (:mod:`ghmanagement.reconciler`), and
submitted to an infrastructure-as-code engine (:mod:`ghmanagement.engine`).
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
