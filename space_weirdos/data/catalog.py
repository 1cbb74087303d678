from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence
import re

from ..schemas import (
    Equipment,
    EquipmentType,
    LeaderTrait,
    PowerType,
    PsychicPower,
    WarbandAbility,
    Weapon,
    WeaponType,
)


@dataclass(frozen=True)
class WeaponDefinition:
    slug: str
    name: str
    type: WeaponType
    base_cost: int
    max_actions: int
    notes: str = ""


@dataclass(frozen=True)
class EquipmentDefinition:
    slug: str
    name: str
    type: EquipmentType
    base_cost: int
    effect: str


@dataclass(frozen=True)
class PsychicPowerDefinition:
    slug: str
    name: str
    type: PowerType
    cost: int
    effect: str


@dataclass(frozen=True)
class TraitDefinition:
    slug: str
    name: str
    description: str


CLOSE_COMBAT_WEAPONS: List[WeaponDefinition] = [
    WeaponDefinition(
        slug="unarmed",
        name="Unarmed",
        type=WeaponType.CLOSE,
        base_cost=0,
        max_actions=3,
        notes="-1DT to Prowess rolls",
    ),
    WeaponDefinition(
        slug="claws-teeth",
        name="Claws & Teeth",
        type=WeaponType.CLOSE,
        base_cost=2,
        max_actions=3,
    ),
    WeaponDefinition(
        slug="horrible-claws-teeth",
        name="Horrible Claws & Teeth",
        type=WeaponType.CLOSE,
        base_cost=3,
        max_actions=3,
        notes="+1DT to Prowess rolls",
    ),
    WeaponDefinition(
        slug="whip-tail",
        name="Whip/Tail",
        type=WeaponType.CLOSE,
        base_cost=2,
        max_actions=2,
        notes="Reach",
    ),
    WeaponDefinition(
        slug="melee-weapon",
        name="Melee Weapon",
        type=WeaponType.CLOSE,
        base_cost=1,
        max_actions=2,
    ),
    WeaponDefinition(
        slug="heavy-melee-weapon",
        name="Heavy Melee Weapon",
        type=WeaponType.CLOSE,
        base_cost=2,
        max_actions=1,
        notes="+1DT to Prowess rolls",
    ),
]

RANGED_WEAPONS: List[WeaponDefinition] = [
    WeaponDefinition(
        slug="auto-pistol",
        name="Auto Pistol",
        type=WeaponType.RANGED,
        base_cost=0,
        max_actions=3,
        notes="Aim",
    ),
    WeaponDefinition(
        slug="auto-rifle",
        name="Auto Rifle",
        type=WeaponType.RANGED,
        base_cost=1,
        max_actions=3,
    ),
    WeaponDefinition(
        slug="heavy-rifle",
        name="Heavy Rifle",
        type=WeaponType.RANGED,
        base_cost=2,
        max_actions=2,
        notes="+1DT to Firepower rolls",
    ),
    WeaponDefinition(
        slug="flamethrower",
        name="Flamethrower",
        type=WeaponType.RANGED,
        base_cost=3,
        max_actions=1,
        notes="Template, ignores cover",
    ),
    WeaponDefinition(
        slug="grenade-launcher",
        name="Grenade Launcher",
        type=WeaponType.RANGED,
        base_cost=3,
        max_actions=1,
        notes="Blast",
    ),
]

EQUIPMENT: List[EquipmentDefinition] = [
    EquipmentDefinition(
        slug="cybernetics",
        name="Cybernetics",
        type=EquipmentType.PASSIVE,
        base_cost=1,
        effect="+1 to Power rolls",
    ),
    EquipmentDefinition(
        slug="grenade",
        name="Grenade",
        type=EquipmentType.ACTION,
        base_cost=1,
        effect="Blast attack within short range, once per game",
    ),
    EquipmentDefinition(
        slug="heavy-armor",
        name="Heavy Armor",
        type=EquipmentType.PASSIVE,
        base_cost=1,
        effect="+1 to Defense rolls",
    ),
    EquipmentDefinition(
        slug="medkit",
        name="Medkit",
        type=EquipmentType.ACTION,
        base_cost=1,
        effect="Remove a staggered condition from a weirdo in base contact",
    ),
    EquipmentDefinition(
        slug="jump-pack",
        name="Jump Pack",
        type=EquipmentType.PASSIVE,
        base_cost=2,
        effect="Ignore terrain when moving",
    ),
    EquipmentDefinition(
        slug="camouflage",
        name="Camouflage",
        type=EquipmentType.PASSIVE,
        base_cost=1,
        effect="Counts as in cover at long range",
    ),
    EquipmentDefinition(
        slug="stim-pack",
        name="Stim Pack",
        type=EquipmentType.ACTION,
        base_cost=1,
        effect="+1 Speed until the end of the activation",
    ),
]

PSYCHIC_POWERS: List[PsychicPowerDefinition] = [
    PsychicPowerDefinition(
        slug="fear",
        name="Fear",
        type=PowerType.ATTACK,
        cost=1,
        effect="Target must move away from the psychic",
    ),
    PsychicPowerDefinition(
        slug="healing",
        name="Healing",
        type=PowerType.EFFECT,
        cost=1,
        effect="Remove a staggered condition from a friendly weirdo",
    ),
    PsychicPowerDefinition(
        slug="mind-stab",
        name="Mind Stab",
        type=PowerType.ATTACK,
        cost=3,
        effect="Willpower attack that ignores cover",
    ),
    PsychicPowerDefinition(
        slug="force-field",
        name="Force Field",
        type=PowerType.EFFECT,
        cost=2,
        effect="+1 to Defense rolls until the next activation",
    ),
    PsychicPowerDefinition(
        slug="telekinesis",
        name="Telekinesis",
        type=PowerType.EITHER,
        cost=2,
        effect="Move a weirdo or object in line of sight",
    ),
]

LEADER_TRAITS: List[TraitDefinition] = [
    TraitDefinition(
        slug="bounty-hunter",
        name=LeaderTrait.BOUNTY_HUNTER.value,
        description="Gain an extra objective point for taking the enemy leader out of action",
    ),
    TraitDefinition(
        slug="healer",
        name=LeaderTrait.HEALER.value,
        description="Once per activation remove a staggered condition from a weirdo in base contact",
    ),
    TraitDefinition(
        slug="majestic",
        name=LeaderTrait.MAJESTIC.value,
        description="Friendly weirdos within long range roll Willpower with +1DT",
    ),
    TraitDefinition(
        slug="monstrous",
        name=LeaderTrait.MONSTROUS.value,
        description="A second staggered condition does not take the leader out of action",
    ),
    TraitDefinition(
        slug="political-officer",
        name=LeaderTrait.POLITICAL_OFFICER.value,
        description="Friendly weirdos within short range ignore panic",
    ),
    TraitDefinition(
        slug="sorcerer",
        name=LeaderTrait.SORCERER.value,
        description="May use one psychic power twice per activation",
    ),
    TraitDefinition(
        slug="tactician",
        name=LeaderTrait.TACTICIAN.value,
        description="Gain one additional reroll for initiative each turn",
    ),
]

WARBAND_ABILITIES: List[TraitDefinition] = [
    TraitDefinition(
        slug="cyborgs",
        name=WarbandAbility.CYBORGS.value,
        description="All members can purchase 1 additional equipment option",
    ),
    TraitDefinition(
        slug="fanatics",
        name=WarbandAbility.FANATICS.value,
        description="Roll Willpower with +1DT for all rolls except Psychic Powers",
    ),
    TraitDefinition(
        slug="living-weapons",
        name=WarbandAbility.LIVING_WEAPONS.value,
        description="Unarmed attacks do not have -1DT to Prowess rolls",
    ),
    TraitDefinition(
        slug="heavily-armed",
        name=WarbandAbility.HEAVILY_ARMED.value,
        description="All Ranged weapons are 1 less Points Cost",
    ),
    TraitDefinition(
        slug="mutants",
        name=WarbandAbility.MUTANTS.value,
        description=(
            "Speed, Claws & Teeth, Horrible Claws & Teeth, and Whip/Tail cost 1 less Points Cost"
        ),
    ),
    TraitDefinition(
        slug="soldiers",
        name=WarbandAbility.SOLDIERS.value,
        description="Grenades, Heavy Armor, and Medkits may be selected at 0 Points Cost",
    ),
    TraitDefinition(
        slug="undead",
        name=WarbandAbility.UNDEAD.value,
        description="A second staggered condition does not take weirdos out of action",
    ),
]


def _normalize(text: str | None) -> str:
    if not text:
        return ""
    value = str(text).replace("-", " ").replace("_", " ")
    value = re.sub(r"\s+", " ", value.strip())
    return value.casefold()


def _find(definitions: Sequence, text: str | None):
    normalized = _normalize(text)
    if not normalized:
        return None
    for definition in definitions:
        if normalized in {_normalize(definition.slug), _normalize(definition.name)}:
            return definition
    return None


def find_weapon(name: str | None) -> WeaponDefinition | None:
    return _find(CLOSE_COMBAT_WEAPONS + RANGED_WEAPONS, name)


def find_equipment(name: str | None) -> EquipmentDefinition | None:
    return _find(EQUIPMENT, name)


def find_psychic_power(name: str | None) -> PsychicPowerDefinition | None:
    return _find(PSYCHIC_POWERS, name)


def find_leader_trait(name: str | None) -> TraitDefinition | None:
    return _find(LEADER_TRAITS, name)


def find_warband_ability(name: str | None) -> TraitDefinition | None:
    return _find(WARBAND_ABILITIES, name)


def make_weapon(name: str) -> Weapon:
    """Return a fresh weapon instance for the catalog entry ``name``."""

    definition = find_weapon(name)
    if definition is None:
        raise KeyError(f"Unknown weapon: {name}")
    return Weapon(
        name=definition.name,
        type=definition.type,
        base_cost=definition.base_cost,
        max_actions=definition.max_actions,
        notes=definition.notes,
    )


def make_equipment(name: str) -> Equipment:
    definition = find_equipment(name)
    if definition is None:
        raise KeyError(f"Unknown equipment: {name}")
    return Equipment(
        name=definition.name,
        type=definition.type,
        base_cost=definition.base_cost,
        effect=definition.effect,
    )


def make_psychic_power(name: str) -> PsychicPower:
    definition = find_psychic_power(name)
    if definition is None:
        raise KeyError(f"Unknown psychic power: {name}")
    return PsychicPower(
        name=definition.name,
        type=definition.type,
        cost=definition.cost,
        effect=definition.effect,
    )


def make_weapons(names: Iterable[str]) -> List[Weapon]:
    return [make_weapon(name) for name in names]


def _weapon_dict(definition: WeaponDefinition) -> dict:
    return {
        "id": definition.slug,
        "name": definition.name,
        "type": definition.type.value,
        "baseCost": definition.base_cost,
        "maxActions": definition.max_actions,
        "notes": definition.notes,
    }


def game_data() -> dict:
    """Catalog payload served to clients, keyed the way the schemas serialize."""

    return {
        "closeCombatWeapons": [_weapon_dict(item) for item in CLOSE_COMBAT_WEAPONS],
        "rangedWeapons": [_weapon_dict(item) for item in RANGED_WEAPONS],
        "equipment": [
            {
                "id": item.slug,
                "name": item.name,
                "type": item.type.value,
                "baseCost": item.base_cost,
                "effect": item.effect,
            }
            for item in EQUIPMENT
        ],
        "psychicPowers": [
            {
                "id": item.slug,
                "name": item.name,
                "type": item.type.value,
                "cost": item.cost,
                "effect": item.effect,
            }
            for item in PSYCHIC_POWERS
        ],
        "leaderTraits": [
            {"id": item.slug, "name": item.name, "description": item.description}
            for item in LEADER_TRAITS
        ],
        "warbandAbilities": [
            {"id": item.slug, "name": item.name, "description": item.description}
            for item in WARBAND_ABILITIES
        ],
    }
