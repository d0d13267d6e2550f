"""
Patch Application

Applies a patch's add/modify/remove changes to a KPI definition set.

Changes run in list order against a working copy, so later changes
see the effect of earlier ones. The copy is returned only when every
change succeeded; the input set is never modified.
"""

import logging
from typing import Mapping

from ..core.entities import ChangeKind, KPIDefinition, Patch, PatchChange
from ..core.exceptions import (
    DuplicateKpi,
    InvalidChangeKind,
    InvalidPatchDetails,
    KaizenError,
    UnknownKpi
)
from ..core.schemas import KPIPayload, KPIUpdate, validate_payload

logger = logging.getLogger(__name__)


class PatchApplier:
    """Produces the active KPI definition set after a patch."""

    def apply_patch(
        self,
        definitions: Mapping[str, KPIDefinition],
        patch: Patch
    ) -> dict[str, KPIDefinition]:
        """
        Apply every change of `patch` to a copy of `definitions`.

        Raises:
            DuplicateKpi: an `add` targets an existing id.
            UnknownKpi: a `modify` or `remove` targets a missing id.
            InvalidPatchDetails: change details fail validation.
            InvalidRuleKind: change details carry an unknown rule type.
        """
        working = dict(definitions)

        for position, change in enumerate(patch.changes):
            try:
                self._apply_change(working, change, patch.version)
            except KaizenError as exc:
                logger.warning(
                    "Patch %s rejected at change %d (%s %s): %s",
                    patch.version, position, change.kind, change.kpi_id, exc
                )
                raise

        logger.info(
            "Applied patch %s: %d change(s), %d KPI(s) active",
            patch.version, len(patch.changes), len(working)
        )
        return working

    def _apply_change(
        self,
        working: dict[str, KPIDefinition],
        change: PatchChange,
        version: str
    ) -> None:
        if change.kind == ChangeKind.ADD:
            if change.kpi_id in working:
                raise DuplicateKpi(change.kpi_id)
            payload = validate_payload(KPIPayload, change.details)
            if payload.id and payload.id != change.kpi_id:
                raise InvalidPatchDetails(
                    f"Add change for {change.kpi_id} carries details for {payload.id}"
                )
            working[change.kpi_id] = payload.to_definition(
                kpi_id=change.kpi_id, patch_version=version
            )

        elif change.kind == ChangeKind.MODIFY:
            existing = working.get(change.kpi_id)
            if existing is None:
                raise UnknownKpi(change.kpi_id)
            update = validate_payload(KPIUpdate, change.details)
            working[change.kpi_id] = update.apply_to(existing, patch_version=version)

        elif change.kind == ChangeKind.REMOVE:
            if change.kpi_id not in working:
                raise UnknownKpi(change.kpi_id)
            del working[change.kpi_id]

        else:
            raise InvalidChangeKind(change.kind)
