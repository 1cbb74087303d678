from __future__ import annotations

import logging
from dataclasses import asdict
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from ..data import catalog
from ..db import get_db
from ..schemas import (
    CostRequest,
    ValidateRequest,
    Warband,
    WarbandForm,
    WarbandUpdateForm,
    Weirdo,
)
from ..services.costs import CostEngine
from ..services.repository import WarbandPersistenceError, WarbandRepository
from ..services.rule_config import RuleConfig, load_rule_config
from ..services.validation import ValidationService
from ..services.warbands import LeaderAlreadyPresentError, WarbandService, WeirdoNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["warbands"])


@lru_cache()
def _rules() -> RuleConfig:
    return load_rule_config()


def _cost_engine() -> CostEngine:
    return CostEngine(_rules())


def _validator() -> ValidationService:
    return ValidationService(_rules(), _cost_engine())


def _service() -> WarbandService:
    return WarbandService(_cost_engine())


def _repository(db: Session) -> WarbandRepository:
    return WarbandRepository(db, _validator())


def _dump(model) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


def _invalid(errors) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={
            "message": "Warband is not valid",
            "errors": [error.as_dict() for error in errors],
        },
    )


def _save(repository: WarbandRepository, warband: Warband) -> Warband:
    try:
        return repository.save_warband(warband)
    except WarbandPersistenceError as exc:
        raise _invalid(exc.errors) from exc


def _get_or_404(repository: WarbandRepository, warband_id: str) -> Warband:
    warband = repository.get_warband(warband_id)
    if warband is None:
        raise HTTPException(status_code=404, detail=f"Warband {warband_id} not found")
    return warband


@router.post("/warbands", status_code=201)
def create_warband(form: WarbandForm, db: Session = Depends(get_db)):
    if not form.name.strip():
        raise HTTPException(status_code=400, detail="Warband name is required")
    if form.point_limit not in _rules().valid_point_limits:
        standard, extended = _rules().valid_point_limits
        raise HTTPException(
            status_code=400, detail=f"Point limit must be {standard} or {extended}"
        )
    warband = _service().create_warband(
        name=form.name, point_limit=form.point_limit, ability=form.ability
    )
    saved = _save(_repository(db), warband)
    logger.info("Created warband %s", saved.id)
    return JSONResponse(_dump(saved), status_code=201)


@router.get("/warbands")
def list_warbands(db: Session = Depends(get_db)):
    summaries = _repository(db).list_warbands()
    return JSONResponse([_dump(summary) for summary in summaries])


@router.get("/warbands/{warband_id}")
def get_warband(warband_id: str, db: Session = Depends(get_db)):
    return JSONResponse(_dump(_get_or_404(_repository(db), warband_id)))


@router.put("/warbands/{warband_id}")
def update_warband(warband_id: str, form: WarbandUpdateForm, db: Session = Depends(get_db)):
    repository = _repository(db)
    warband = _get_or_404(repository, warband_id)
    changes = form.model_dump(exclude_unset=True, exclude={"weirdos"})
    service = _service()
    try:
        warband = service.update_warband(warband, **changes)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if form.weirdos is not None:
        warband = service.recalculate(warband.model_copy(update={"weirdos": form.weirdos}))
    return JSONResponse(_dump(_save(repository, warband)))


@router.delete("/warbands/{warband_id}", status_code=204)
def delete_warband(warband_id: str, db: Session = Depends(get_db)):
    if not _repository(db).delete_warband(warband_id):
        raise HTTPException(status_code=404, detail=f"Warband {warband_id} not found")
    return Response(status_code=204)


@router.post("/warbands/{warband_id}/weirdos", status_code=201)
def add_weirdo(warband_id: str, weirdo: Weirdo, db: Session = Depends(get_db)):
    repository = _repository(db)
    warband = _get_or_404(repository, warband_id)
    try:
        warband = _service().add_weirdo(warband, weirdo)
    except LeaderAlreadyPresentError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JSONResponse(_dump(_save(repository, warband)), status_code=201)


@router.put("/warbands/{warband_id}/weirdos/{weirdo_id}")
def update_weirdo(
    warband_id: str, weirdo_id: str, weirdo: Weirdo, db: Session = Depends(get_db)
):
    repository = _repository(db)
    warband = _get_or_404(repository, warband_id)
    changes = {
        name: getattr(weirdo, name)
        for name in weirdo.model_fields_set
        if name not in {"id", "total_cost"}
    }
    try:
        warband = _service().update_weirdo(warband, weirdo_id, **changes)
    except WeirdoNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Weirdo {weirdo_id} not found") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JSONResponse(_dump(_save(repository, warband)))


@router.delete("/warbands/{warband_id}/weirdos/{weirdo_id}")
def remove_weirdo(warband_id: str, weirdo_id: str, db: Session = Depends(get_db)):
    repository = _repository(db)
    warband = _get_or_404(repository, warband_id)
    try:
        warband = _service().remove_weirdo(warband, weirdo_id)
    except WeirdoNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Weirdo {weirdo_id} not found") from exc
    return JSONResponse(_dump(_save(repository, warband)))


@router.post("/calculate-cost")
def calculate_cost(payload: CostRequest):
    engine = _cost_engine()
    try:
        if payload.weirdo is not None:
            breakdown = engine.weirdo_cost_breakdown(payload.weirdo, payload.warband_ability)
            return JSONResponse({"cost": breakdown.total, "breakdown": asdict(breakdown)})
        if payload.warband is not None:
            return JSONResponse({"cost": engine.calculate_warband_cost(payload.warband)})
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    raise HTTPException(status_code=400, detail="Provide either a weirdo or a warband")


@router.post("/validate")
def validate(payload: ValidateRequest):
    validator = _validator()
    if payload.weirdo is not None:
        context = payload.warband
        if context is None:
            context = Warband(name="temp", weirdos=[payload.weirdo])
        errors = validator.validate_weirdo(payload.weirdo, context)
        warnings = validator.weirdo_warnings(payload.weirdo, context)
        return JSONResponse(
            {
                "valid": not errors,
                "errors": [error.as_dict() for error in errors],
                "warnings": [warning.as_dict() for warning in warnings],
            }
        )
    if payload.warband is not None:
        return JSONResponse(validator.validate_warband(payload.warband).as_dict())
    raise HTTPException(status_code=400, detail="Provide either a weirdo or a warband")


@router.get("/game-data")
def game_data():
    rules = _rules()
    data = catalog.game_data()
    data["attributeCosts"] = {
        name: [{"level": level, "cost": cost} for level, cost in levels.items()]
        for name, levels in rules.attribute_costs.items()
    }
    data["pointLimits"] = list(rules.valid_point_limits)
    return JSONResponse(data)
