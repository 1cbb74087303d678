"""Editing operations on warbands.

Every function takes a warband snapshot and returns a new one with costs
recomputed and ``updated_at`` refreshed; the input is never modified.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..schemas import Attributes, Warband, WarbandAbility, Weirdo, WeirdoType
from .costs import CostEngine, normalize_ability

logger = logging.getLogger(__name__)

_WARBAND_FIELDS = {"name", "point_limit", "ability"}
_WEIRDO_FIELDS = set(Weirdo.model_fields) - {"id", "total_cost"}


class WeirdoNotFoundError(KeyError):
    """Raised when a weirdo id is not part of the warband."""


class LeaderAlreadyPresentError(ValueError):
    """Raised when a second leader would be added to a warband."""


def _weirdo_type(value: Any) -> WeirdoType:
    if isinstance(value, WeirdoType):
        return value
    try:
        return WeirdoType(str(value).strip().lower())
    except ValueError as exc:
        raise ValueError(f"Unknown weirdo type: {value!r}") from exc


def _has_leader(warband: Warband) -> bool:
    return any(weirdo.type == WeirdoType.LEADER for weirdo in warband.weirdos)


class WarbandService:
    def __init__(self, cost_engine: CostEngine | None = None) -> None:
        self.cost_engine = cost_engine if cost_engine is not None else CostEngine()

    def _finish(self, warband: Warband) -> Warband:
        warband = self.cost_engine.with_warband_costs(warband)
        return warband.model_copy(update={"updated_at": datetime.utcnow()})

    def create_warband(
        self,
        name: str = "New Warband",
        point_limit: int = 75,
        ability: WarbandAbility | str | None = None,
    ) -> Warband:
        warband = Warband(name=name, point_limit=point_limit, ability=normalize_ability(ability))
        logger.debug("Created warband %s (%s)", warband.name, warband.id)
        return self._finish(warband)

    def create_weirdo(
        self, weirdo_type: WeirdoType | str, ability: WarbandAbility | str | None = None
    ) -> Weirdo:
        """Return a weirdo with the cheapest attributes and no gear."""

        kind = _weirdo_type(weirdo_type)
        name = "New Leader" if kind == WeirdoType.LEADER else "New Trooper"
        weirdo = Weirdo(name=name, type=kind, attributes=Attributes())
        return self.cost_engine.with_weirdo_cost(weirdo, normalize_ability(ability))

    def add_weirdo(self, warband: Warband, weirdo: Weirdo | WeirdoType | str) -> Warband:
        if not isinstance(weirdo, Weirdo):
            weirdo = self.create_weirdo(weirdo, warband.ability)
        if weirdo.type == WeirdoType.LEADER and _has_leader(warband):
            raise LeaderAlreadyPresentError("Warband already has a leader")
        logger.debug("Adding %s %s to warband %s", weirdo.type.value, weirdo.id, warband.id)
        return self._finish(
            warband.model_copy(update={"weirdos": [*warband.weirdos, weirdo]})
        )

    def remove_weirdo(self, warband: Warband, weirdo_id: str) -> Warband:
        remaining = [weirdo for weirdo in warband.weirdos if weirdo.id != weirdo_id]
        if len(remaining) == len(warband.weirdos):
            raise WeirdoNotFoundError(weirdo_id)
        logger.debug("Removed weirdo %s from warband %s", weirdo_id, warband.id)
        return self._finish(warband.model_copy(update={"weirdos": remaining}))

    def update_weirdo(self, warband: Warband, weirdo_id: str, **changes: Any) -> Warband:
        unknown = set(changes) - _WEIRDO_FIELDS
        if unknown:
            raise ValueError(f"Cannot update weirdo fields: {', '.join(sorted(unknown))}")

        weirdos: list[Weirdo] = []
        found = False
        for weirdo in warband.weirdos:
            if weirdo.id == weirdo_id:
                found = True
                data = weirdo.model_dump()
                data.update(changes)
                updated = Weirdo.model_validate(data)
                if (
                    updated.type == WeirdoType.LEADER
                    and weirdo.type != WeirdoType.LEADER
                    and _has_leader(warband)
                ):
                    raise LeaderAlreadyPresentError("Warband already has a leader")
                weirdo = updated
            weirdos.append(weirdo)
        if not found:
            raise WeirdoNotFoundError(weirdo_id)
        logger.debug("Updated weirdo %s in warband %s: %s", weirdo_id, warband.id, sorted(changes))
        return self._finish(warband.model_copy(update={"weirdos": weirdos}))

    def update_warband(self, warband: Warband, **changes: Any) -> Warband:
        unknown = set(changes) - _WARBAND_FIELDS
        if unknown:
            raise ValueError(f"Cannot update warband fields: {', '.join(sorted(unknown))}")
        if "ability" in changes:
            changes["ability"] = normalize_ability(changes["ability"])
        logger.debug("Updated warband %s: %s", warband.id, sorted(changes))
        return self._finish(warband.model_copy(update=changes))

    def recalculate(self, warband: Warband) -> Warband:
        return self._finish(warband)
