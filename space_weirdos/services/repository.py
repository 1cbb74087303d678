from __future__ import annotations

import json
import logging
from typing import List, Optional

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models
from ..schemas import Warband, WarbandSummary, Weirdo
from .validation import ValidationError, ValidationService

logger = logging.getLogger(__name__)

_WEIRDO_LIST = TypeAdapter(List[Weirdo])


class WarbandPersistenceError(Exception):
    """Raised when a warband fails validation and cannot be saved."""

    def __init__(self, errors: List[ValidationError]):
        self.errors = list(errors)
        codes = ", ".join(error.code for error in self.errors)
        super().__init__(f"Warband is not valid: {codes}")


def _dump_weirdos(warband: Warband) -> str:
    payload = [weirdo.model_dump(mode="json", by_alias=True) for weirdo in warband.weirdos]
    return json.dumps(payload, ensure_ascii=False)


def _load_weirdos(payload_text: str | None) -> List[Weirdo]:
    if not payload_text:
        return []
    return _WEIRDO_LIST.validate_python(json.loads(payload_text))


def record_to_warband(record: models.WarbandRecord) -> Warband:
    return Warband(
        id=record.id,
        name=record.name,
        ability=record.ability,
        point_limit=record.point_limit,
        total_cost=record.total_cost,
        weirdos=_load_weirdos(record.weirdos_json),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


class WarbandRepository:
    """Stores validated warbands in the ``warbands`` table."""

    def __init__(self, session: Session, validator: ValidationService | None = None) -> None:
        self.session = session
        self.validator = validator if validator is not None else ValidationService()

    @property
    def cost_engine(self):
        return self.validator.cost_engine

    def save_warband(self, warband: Warband) -> Warband:
        """Validate, recompute costs and upsert ``warband``.

        Raises :class:`WarbandPersistenceError` carrying the validation errors
        when the warband is not legal; nothing is written in that case.
        """

        result = self.validator.validate_warband(warband)
        if not result.valid:
            logger.info(
                "Refusing to save warband %s: %s", warband.id, ", ".join(result.codes())
            )
            raise WarbandPersistenceError(result.errors)

        warband = self.cost_engine.with_warband_costs(warband)
        record = self.session.get(models.WarbandRecord, warband.id)
        if record is None:
            record = models.WarbandRecord(id=warband.id, created_at=warband.created_at)
            self.session.add(record)
        record.name = warband.name
        record.ability = warband.ability.value if warband.ability else None
        record.point_limit = warband.point_limit
        record.total_cost = warband.total_cost
        record.weirdos_json = _dump_weirdos(warband)
        self.session.commit()
        self.session.refresh(record)
        logger.info("Saved warband %s (%s points)", warband.id, warband.total_cost)
        return record_to_warband(record)

    def get_warband(self, warband_id: str) -> Optional[Warband]:
        record = self.session.get(models.WarbandRecord, warband_id)
        if record is None:
            return None
        return record_to_warband(record)

    def list_warbands(self) -> List[WarbandSummary]:
        records = (
            self.session.execute(
                select(models.WarbandRecord).order_by(models.WarbandRecord.updated_at.desc())
            )
            .scalars()
            .all()
        )
        return [
            WarbandSummary(
                id=record.id,
                name=record.name,
                ability=record.ability,
                point_limit=record.point_limit,
                total_cost=record.total_cost,
                weirdo_count=len(json.loads(record.weirdos_json or "[]")),
                updated_at=record.updated_at,
            )
            for record in records
        ]

    def delete_warband(self, warband_id: str) -> bool:
        record = self.session.get(models.WarbandRecord, warband_id)
        if record is None:
            return False
        self.session.delete(record)
        self.session.commit()
        logger.info("Deleted warband %s", warband_id)
        return True
