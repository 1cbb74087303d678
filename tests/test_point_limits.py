from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from space_weirdos.data import catalog
from space_weirdos.schemas import Attributes, PowerType, PsychicPower, Warband, Weirdo, WeirdoType
from space_weirdos.services.rule_config import rule_config_from_mapping
from space_weirdos.services.validation import ValidationService

# Cheapest legal weirdo: default attributes and bare hands.
BASE_COST = 6


def _costing(total: int, name: str = "Trooper", weirdo_type: WeirdoType = WeirdoType.TROOPER) -> Weirdo:
    powers = []
    if total > BASE_COST:
        powers.append(PsychicPower(name="Focus", type=PowerType.EFFECT, cost=total - BASE_COST))
    return Weirdo(
        name=name,
        type=weirdo_type,
        attributes=Attributes(),
        close_combat_weapons=[catalog.make_weapon("Unarmed")],
        psychic_powers=powers,
    )


def _warband(*costs: int, point_limit: int = 75) -> Warband:
    weirdos = [_costing(cost, name=f"W{index}") for index, cost in enumerate(costs)]
    return Warband(name="Limits", point_limit=point_limit, weirdos=weirdos)


def _warning_codes(result) -> list[str]:
    return [warning.code for warning in result.warnings]


def test_helper_builds_exact_costs():
    service = ValidationService()
    for cost in (6, 15, 20, 23, 26):
        assert service.cost_engine.calculate_weirdo_cost(_costing(cost)) == cost


def test_single_weirdo_in_premium_slot_is_allowed():
    result = ValidationService().validate_warband(_warband(23, 10, 10))

    assert result.valid


def test_two_weirdos_in_premium_slot_are_rejected():
    warband = _warband(22, 24)

    result = ValidationService().validate_warband(warband)

    assert "MULTIPLE_25_POINT_WEIRDOS" in result.codes()
    error = next(e for e in result.errors if e.code == "MULTIPLE_25_POINT_WEIRDOS")
    assert error.field == "weirdos"
    assert error.message == "Only one weirdo may cost 21-25 points"
    assert error.context == {"weirdo_ids": [w.id for w in warband.weirdos]}


def test_weirdo_over_maximum_is_rejected():
    warband = _warband(26)

    error = ValidationService().validate_weirdo_point_limit(warband.weirdos[0], warband)

    assert error.code == "TROOPER_POINT_LIMIT_EXCEEDED"
    assert error.message == "Trooper cost (26) exceeds 25-point limit"
    assert error.context == {"cost": 26, "limit": 25}


def test_leader_is_held_to_the_same_limit():
    leader = _costing(26, name="Boss", weirdo_type=WeirdoType.LEADER)
    warband = Warband(name="Limits", weirdos=[leader])

    error = ValidationService().validate_weirdo_point_limit(leader, warband)

    assert error.message == "Leader cost (26) exceeds 25-point limit"


def test_premium_slot_taken_lowers_limit_to_twenty():
    warband = _warband(25, 21)
    service = ValidationService()

    assert service.validate_weirdo_point_limit(warband.weirdos[0], warband).context["limit"] == 20
    error = service.validate_weirdo_point_limit(warband.weirdos[1], warband)
    assert error.message == "Trooper cost (21) exceeds 20-point limit"


def test_twenty_is_fine_next_to_premium_weirdo():
    warband = _warband(25, 20)

    assert ValidationService().validate_weirdo_point_limit(warband.weirdos[1], warband) is None


def test_total_at_limit_is_valid_with_warning():
    result = ValidationService().validate_warband(_warband(20, 20, 20, 15))

    assert result.valid
    assert "WARBAND_APPROACHING_POINT_LIMIT" in _warning_codes(result)


def test_total_over_limit_is_rejected():
    result = ValidationService().validate_warband(_warband(20, 20, 20, 16))

    assert result.codes() == ["WARBAND_POINT_LIMIT_EXCEEDED"]
    assert result.errors[0].field == "total_cost"
    assert result.errors[0].message == "Warband total cost (76) exceeds point limit (75)"
    assert "WARBAND_APPROACHING_POINT_LIMIT" not in _warning_codes(result)


def test_total_near_limit_only_warns():
    result = ValidationService().validate_warband(_warband(20, 20, 20, 8))

    assert result.valid
    warning = next(w for w in result.warnings if w.code == "WARBAND_APPROACHING_POINT_LIMIT")
    assert warning.context == {"total_cost": 68, "point_limit": 75}


def test_total_below_warning_floor_is_quiet():
    result = ValidationService().validate_warband(_warband(20, 20, 20, 7))

    assert result.valid
    assert "WARBAND_APPROACHING_POINT_LIMIT" not in _warning_codes(result)


@pytest.mark.parametrize("point_limit, floor", [(75, 68), (125, 113)])
def test_warning_floor(point_limit, floor):
    assert ValidationService().warning_floor(point_limit) == floor


@pytest.mark.parametrize("extra", range(6, 20))
def test_total_error_iff_over_limit(extra):
    total = 60 + extra
    result = ValidationService().validate_warband(_warband(20, 20, 20, extra))

    assert ("WARBAND_POINT_LIMIT_EXCEEDED" in result.codes()) == (total > 75)
    assert ("WARBAND_APPROACHING_POINT_LIMIT" in _warning_codes(result)) == (68 <= total <= 75)


def test_extended_limit():
    result = ValidationService().validate_warband(_warband(20, 20, 20, 20, 20, 13, point_limit=125))

    assert result.valid
    assert "WARBAND_APPROACHING_POINT_LIMIT" in _warning_codes(result)


@pytest.mark.parametrize(
    "cost, expected",
    [
        (16, []),
        (17, [(20, "Cost is within 3 points of the 20-point limit")]),
        (19, [(20, "Cost is within 1 point of the 20-point limit")]),
        (20, [(20, "Cost is within 0 points of the 20-point limit")]),
        (22, [(25, "Cost is within 3 points of the 25-point limit")]),
        (24, [(25, "Cost is within 1 point of the 25-point limit")]),
    ],
)
def test_weirdo_cost_warnings_alone(cost, expected):
    warband = _warband(cost)

    warnings = ValidationService().weirdo_warnings(warband.weirdos[0], warband)

    assert [(w.context["limit"], w.message) for w in warnings] == expected
    assert all(w.code == "COST_APPROACHING_LIMIT" for w in warnings)


def test_weirdo_near_twenty_is_warned():
    warband = _warband(18)

    assert ValidationService().weirdo_warnings(warband.weirdos[0], warband)[0].message == (
        "Cost is within 2 points of the 20-point limit"
    )


def test_weirdo_warning_uses_twenty_when_slot_taken():
    warband = _warband(25, 18)

    warnings = ValidationService().weirdo_warnings(warband.weirdos[1], warband)

    assert [w.context["limit"] for w in warnings] == [20]


def test_warnings_do_not_block_saving():
    result = ValidationService().validate_warband(_warband(19, 22))

    assert result.valid
    assert _warning_codes(result).count("COST_APPROACHING_LIMIT") == 2


def test_narrow_premium_slot_warns_about_premium_limit():
    config = rule_config_from_mapping({"trooper_limits": {"special_slot_min": 24}})
    warband = _warband(22)

    warnings = ValidationService(config).weirdo_warnings(warband.weirdos[0], warband)

    assert [w.message for w in warnings] == [
        "Cost is within 3 points of the 25-point limit (premium weirdo slot)"
    ]
