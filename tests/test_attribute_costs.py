from __future__ import annotations

import itertools
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from space_weirdos.schemas import WarbandAbility
from space_weirdos.services.costs import CostEngine
from space_weirdos.services.rule_config import DEFAULT_ATTRIBUTE_COSTS

ABILITIES = [None, *WarbandAbility]
ATTRIBUTE_LEVELS = [
    (attribute, level)
    for attribute, levels in DEFAULT_ATTRIBUTE_COSTS.items()
    for level in levels
]


@pytest.mark.parametrize(
    "attribute, level, expected",
    [
        ("speed", 1, 0),
        ("speed", 2, 1),
        ("speed", 3, 3),
        ("defense", "2d6", 2),
        ("defense", "2d8", 4),
        ("defense", "2d10", 8),
        ("firepower", "None", 0),
        ("firepower", "2d8", 2),
        ("firepower", "2d10", 4),
        ("prowess", "2d6", 2),
        ("prowess", "2d10", 6),
        ("willpower", "2d8", 4),
    ],
)
def test_attribute_costs_follow_rulebook_table(attribute, level, expected):
    assert CostEngine().get_attribute_cost(attribute, level) == expected


def test_mutants_make_speed_cheaper():
    engine = CostEngine()

    assert engine.get_attribute_cost("speed", 3, WarbandAbility.MUTANTS) == 2
    assert engine.get_attribute_cost("speed", 2, WarbandAbility.MUTANTS) == 0
    assert engine.get_attribute_cost("speed", 1, WarbandAbility.MUTANTS) == 0


def test_ability_can_be_given_by_name():
    assert CostEngine().get_attribute_cost("speed", 3, "Mutants") == 2


@pytest.mark.parametrize("attribute", ["defense", "firepower", "prowess", "willpower"])
def test_mutants_leave_other_attributes_alone(attribute):
    engine = CostEngine()
    for level in DEFAULT_ATTRIBUTE_COSTS[attribute]:
        assert engine.get_attribute_cost(attribute, level, WarbandAbility.MUTANTS) == (
            engine.get_attribute_cost(attribute, level)
        )


@pytest.mark.parametrize(
    "ability", [ability for ability in WarbandAbility if ability != WarbandAbility.MUTANTS]
)
def test_other_abilities_do_not_touch_speed(ability):
    engine = CostEngine()
    assert [engine.get_attribute_cost("speed", level, ability) for level in (1, 2, 3)] == [0, 1, 3]


@pytest.mark.parametrize(
    "attribute, level, ability",
    [
        (attribute, level, ability)
        for (attribute, level), ability in itertools.product(ATTRIBUTE_LEVELS, ABILITIES)
    ],
)
def test_attribute_cost_is_never_negative(attribute, level, ability):
    assert CostEngine().get_attribute_cost(attribute, level, ability) >= 0


def test_unknown_attribute_is_rejected():
    with pytest.raises(ValueError):
        CostEngine().get_attribute_cost("charisma", "2d6")


@pytest.mark.parametrize("attribute, level", [("speed", 4), ("defense", "2d12"), ("firepower", None)])
def test_unknown_level_is_rejected(attribute, level):
    with pytest.raises(ValueError):
        CostEngine().get_attribute_cost(attribute, level)


def test_unknown_ability_is_rejected():
    with pytest.raises(ValueError, match="Unknown warband ability"):
        CostEngine().get_attribute_cost("speed", 2, "Pirates")
