"""
Patch Versioning

- applier: applies add/modify/remove changes to a KPI definition set
- history: version ordering and lookup
"""

from .applier import PatchApplier
from .history import sort_patches, find_patch_by_version, latest_patch

__all__ = [
    "PatchApplier",
    "sort_patches",
    "find_patch_by_version",
    "latest_patch"
]
