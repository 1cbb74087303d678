from __future__ import annotations

import itertools
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from space_weirdos.data import catalog
from space_weirdos.schemas import (
    Equipment,
    EquipmentType,
    LeaderTrait,
    PowerType,
    PsychicPower,
    WarbandAbility,
    Weapon,
    WeaponType,
)
from space_weirdos.services.costs import CostEngine

ABILITIES = [None, *WarbandAbility]


def _weapon(name: str, weapon_type: WeaponType, base_cost: int) -> Weapon:
    return Weapon(name=name, type=weapon_type, base_cost=base_cost, max_actions=2)


def test_soldiers_get_listed_equipment_for_free():
    engine = CostEngine()
    grenade = Equipment(name="Grenade", type=EquipmentType.ACTION, base_cost=3)

    assert engine.get_equipment_cost(grenade, WarbandAbility.SOLDIERS) == 0
    assert engine.get_equipment_cost(grenade, None) == 3
    assert engine.get_equipment_cost(grenade, WarbandAbility.CYBORGS) == 3


@pytest.mark.parametrize("name", ["Heavy Armor", "Medkit"])
def test_soldiers_free_equipment_list(name):
    engine = CostEngine()
    item = catalog.make_equipment(name)

    assert engine.get_equipment_cost(item, WarbandAbility.SOLDIERS) == 0
    assert engine.get_equipment_cost(item) == item.base_cost


def test_soldiers_pay_for_unlisted_equipment():
    item = catalog.make_equipment("Jump Pack")

    assert CostEngine().get_equipment_cost(item, WarbandAbility.SOLDIERS) == 2


def test_heavily_armed_discounts_every_ranged_weapon():
    engine = CostEngine()

    assert engine.get_weapon_cost(_weapon("Auto Rifle", WeaponType.RANGED, 1), WarbandAbility.HEAVILY_ARMED) == 0
    assert engine.get_weapon_cost(_weapon("Auto Rifle", WeaponType.RANGED, 1), None) == 1
    assert engine.get_weapon_cost(_weapon("Custom Blaster", WeaponType.RANGED, 3), WarbandAbility.HEAVILY_ARMED) == 2
    assert engine.get_weapon_cost(_weapon("Auto Pistol", WeaponType.RANGED, 0), WarbandAbility.HEAVILY_ARMED) == 0


def test_heavily_armed_ignores_close_combat_weapons():
    melee = _weapon("Melee Weapon", WeaponType.CLOSE, 1)

    assert CostEngine().get_weapon_cost(melee, WarbandAbility.HEAVILY_ARMED) == 1


@pytest.mark.parametrize(
    "name, expected",
    [("Claws & Teeth", 1), ("Horrible Claws & Teeth", 2), ("Whip/Tail", 1), ("Melee Weapon", 1)],
)
def test_mutants_discount_natural_weapons_by_name(name, expected):
    weapon = catalog.make_weapon(name)

    assert CostEngine().get_weapon_cost(weapon, WarbandAbility.MUTANTS) == expected


def test_mutants_do_not_discount_ranged_weapons_by_type():
    rifle = catalog.make_weapon("Auto Rifle")

    assert CostEngine().get_weapon_cost(rifle, WarbandAbility.MUTANTS) == 1


@pytest.mark.parametrize("name", ["Claws & Teeth", "Whip/Tail"])
def test_mutants_ignore_ranged_weapon_with_listed_name(name):
    weapon = _weapon(name, WeaponType.RANGED, 2)

    assert CostEngine().get_weapon_cost(weapon, WarbandAbility.MUTANTS) == 2
    assert CostEngine().get_weapon_cost(_weapon(name, WeaponType.CLOSE, 2), WarbandAbility.MUTANTS) == 1


def test_psychic_power_cost_ignores_warband_ability():
    power = PsychicPower(name="Mind Stab", type=PowerType.ATTACK, cost=3)

    assert CostEngine().get_psychic_power_cost(power) == 3


@pytest.mark.parametrize(
    "base_cost, weapon_type, name, ability",
    list(
        itertools.product(
            range(0, 5),
            list(WeaponType),
            ["Claws & Teeth", "Whip/Tail", "Auto Rifle"],
            ABILITIES,
        )
    ),
)
def test_weapon_cost_is_never_negative(base_cost, weapon_type, name, ability):
    weapon = _weapon(name, weapon_type, base_cost)
    cost = CostEngine().get_weapon_cost(weapon, ability)

    assert 0 <= cost <= base_cost


@pytest.mark.parametrize(
    "base_cost, name, ability",
    list(itertools.product(range(0, 5), ["Grenade", "Medkit", "Cybernetics"], ABILITIES)),
)
def test_equipment_cost_is_never_negative(base_cost, name, ability):
    item = Equipment(name=name, type=EquipmentType.PASSIVE, base_cost=base_cost)
    cost = CostEngine().get_equipment_cost(item, ability)

    assert 0 <= cost <= base_cost


def test_negative_base_cost_is_rejected():
    weapon = Weapon.model_construct(name="Broken", type=WeaponType.CLOSE, base_cost=-1)

    with pytest.raises(ValueError, match="non-negative"):
        CostEngine().get_weapon_cost(weapon)


def test_catalog_lookup_is_case_insensitive():
    assert catalog.find_weapon("claws-teeth").name == "Claws & Teeth"
    assert catalog.find_equipment("HEAVY ARMOR").name == "Heavy Armor"
    assert catalog.find_psychic_power("unknown") is None


@pytest.mark.parametrize("trait", list(LeaderTrait))
def test_every_leader_trait_has_a_definition(trait):
    definition = catalog.find_leader_trait(trait.value)

    assert definition.name == trait.value
    assert definition.description


@pytest.mark.parametrize("ability", list(WarbandAbility))
def test_every_warband_ability_has_a_definition(ability):
    assert catalog.find_warband_ability(ability.value).name == ability.value


def test_trait_lookup_accepts_slugs():
    assert catalog.find_leader_trait("political_officer").name == "Political Officer"
    assert catalog.find_warband_ability("heavily-armed").name == "Heavily Armed"
    assert catalog.find_warband_ability("Pirates") is None


def test_catalog_factories_return_fresh_ids():
    first = catalog.make_weapon("Auto Pistol")
    second = catalog.make_weapon("Auto Pistol")

    assert first.id != second.id
    assert first.type == WeaponType.RANGED


def test_catalog_factory_rejects_unknown_names():
    with pytest.raises(KeyError):
        catalog.make_equipment("Hoverboard")
