from __future__ import annotations

import glob
import os
import sys
from pathlib import Path
from typing import Any, Iterable

import pytest
import yaml

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from space_weirdos.data import catalog
from space_weirdos.schemas import Attributes, Warband, Weirdo
from space_weirdos.services.costs import CostEngine
from space_weirdos.services.validation import ValidationService


FIXTURE_DIR = Path(__file__).parent / "fixtures" / "warbands"


def _load_fixtures() -> Iterable[tuple[str, dict[str, Any]]]:
    for path in sorted(glob.glob(str(FIXTURE_DIR / "*.yml")) + glob.glob(str(FIXTURE_DIR / "*.yaml"))):
        with open(path, "r", encoding="utf-8") as handle:
            yield os.path.basename(path), yaml.safe_load(handle)


def _build_weirdo(data: dict[str, Any]) -> Weirdo:
    return Weirdo(
        name=data["name"],
        type=data["type"],
        attributes=Attributes(**data["attributes"]),
        close_combat_weapons=catalog.make_weapons(data.get("close", [])),
        ranged_weapons=catalog.make_weapons(data.get("ranged", [])),
        equipment=[catalog.make_equipment(name) for name in data.get("equipment", [])],
        psychic_powers=[catalog.make_psychic_power(name) for name in data.get("powers", [])],
        leader_trait=data.get("leader_trait"),
    )


def _build_warband(data: dict[str, Any]) -> Warband:
    return Warband(
        name=data["name"],
        ability=data.get("ability"),
        point_limit=data["point_limit"],
        weirdos=[_build_weirdo(item) for item in data.get("weirdos", [])],
    )


FIXTURES = list(_load_fixtures())


def test_fixtures_present():
    assert FIXTURES, "No warband fixtures found"


@pytest.mark.parametrize("name, data", FIXTURES, ids=[name for name, _ in FIXTURES])
def test_warband_fixture_costs(name: str, data: dict[str, Any]):
    engine = CostEngine()
    warband = _build_warband(data)
    expected = data["expected"]

    costs = [engine.calculate_weirdo_cost(weirdo, warband.ability) for weirdo in warband.weirdos]

    assert costs == expected["weirdo_costs"], name
    assert engine.calculate_warband_cost(warband) == expected["total_cost"], name


@pytest.mark.parametrize("name, data", FIXTURES, ids=[name for name, _ in FIXTURES])
def test_warband_fixture_validation(name: str, data: dict[str, Any]):
    result = ValidationService().validate_warband(_build_warband(data))

    assert result.codes() == data["expected"]["errors"], name
    assert result.valid == (not data["expected"]["errors"])
