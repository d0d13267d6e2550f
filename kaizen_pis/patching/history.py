"""
Patch History

Version ordering for patches. Versions compare as (season, major, minor)
integer triples, never as strings.
"""

from typing import Iterable, Optional, Union

from ..core.entities import Patch, PatchVersion


def sort_patches(patches: Iterable[Patch]) -> list[Patch]:
    """Patches ordered oldest version first. Equal versions keep input order."""
    return sorted(patches, key=lambda patch: patch.version_key)


def find_patch_by_version(
    patches: Iterable[Patch],
    version: Union[str, PatchVersion]
) -> Optional[Patch]:
    """Return the first patch, in version order, matching `version`."""
    if not isinstance(version, PatchVersion):
        version = PatchVersion.parse(version)
    return next(
        (patch for patch in sort_patches(patches) if patch.version_key == version),
        None
    )


def latest_patch(patches: Iterable[Patch]) -> Optional[Patch]:
    """The patch with the highest version, or None."""
    ordered = sort_patches(patches)
    return ordered[-1] if ordered else None
