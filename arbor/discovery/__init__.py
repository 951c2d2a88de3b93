"""
Arbor Discovery - Controller classification.

- ControllerScanner / discover: scan a directory tree for controller files
- ControllerManifest: explicit list of controller classes
"""

from .manifest import ControllerManifest
from .scanner import ControllerScanner, DiscoveryResult, classify_module, discover

__all__ = [
    "ControllerManifest",
    "ControllerScanner",
    "DiscoveryResult",
    "classify_module",
    "discover",
]
