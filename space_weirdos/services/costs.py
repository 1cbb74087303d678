"""Point cost calculator for weirdos and warbands, following the rulebook tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from ..schemas import ATTRIBUTE_NAMES, Warband, WarbandAbility, WeaponType, Weirdo
from .rule_config import RuleConfig, default_rule_config


def normalize_ability(value: Any) -> WarbandAbility | None:
    if value is None:
        return None
    if isinstance(value, WarbandAbility):
        return value
    try:
        return WarbandAbility(value)
    except ValueError as exc:
        raise ValueError(f"Unknown warband ability: {value!r}") from exc


def _non_negative(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{label} must be a non-negative integer, got {value!r}")
    return value


def _discounted(cost: int, discount: int) -> int:
    return max(0, cost - discount)


class CostModifier:
    """Modifier used when the warband has no ability affecting costs."""

    def __init__(self, config: RuleConfig) -> None:
        self.config = config

    def attribute_cost(self, attribute: str, base_cost: int) -> int:
        return base_cost

    def weapon_cost(self, weapon: Any, base_cost: int) -> int:
        return base_cost

    def equipment_cost(self, equipment: Any, base_cost: int) -> int:
        return base_cost


class MutantsCostModifier(CostModifier):
    """Speed and the listed close-combat weapons are cheaper."""

    def attribute_cost(self, attribute: str, base_cost: int) -> int:
        if attribute == "speed":
            return _discounted(base_cost, self.config.discount_values.mutant_discount)
        return base_cost

    def weapon_cost(self, weapon: Any, base_cost: int) -> int:
        if (
            weapon.type == WeaponType.CLOSE
            and weapon.name in self.config.ability_lists.mutant_weapons
        ):
            return _discounted(base_cost, self.config.discount_values.mutant_discount)
        return base_cost


class HeavilyArmedCostModifier(CostModifier):
    """Every ranged weapon is cheaper, whatever its name."""

    def weapon_cost(self, weapon: Any, base_cost: int) -> int:
        if weapon.type == WeaponType.RANGED:
            return _discounted(base_cost, self.config.discount_values.heavily_armed_discount)
        return base_cost


class SoldiersCostModifier(CostModifier):
    """The listed equipment is free."""

    def equipment_cost(self, equipment: Any, base_cost: int) -> int:
        if equipment.name in self.config.ability_lists.soldier_free_equipment:
            return 0
        return base_cost


MODIFIER_CLASSES: dict[WarbandAbility | None, type[CostModifier]] = {
    None: CostModifier,
    WarbandAbility.CYBORGS: CostModifier,
    WarbandAbility.FANATICS: CostModifier,
    WarbandAbility.LIVING_WEAPONS: CostModifier,
    WarbandAbility.HEAVILY_ARMED: HeavilyArmedCostModifier,
    WarbandAbility.MUTANTS: MutantsCostModifier,
    WarbandAbility.SOLDIERS: SoldiersCostModifier,
    WarbandAbility.UNDEAD: CostModifier,
}


@dataclass(frozen=True)
class CostBreakdown:
    attributes: int
    weapons: int
    equipment: int
    psychic_powers: int

    @property
    def total(self) -> int:
        return self.attributes + self.weapons + self.equipment + self.psychic_powers


class CostEngine:
    """Pure cost lookups with warband ability modifiers and a floor at zero."""

    def __init__(self, config: RuleConfig | None = None) -> None:
        self.config = config if config is not None else default_rule_config()
        self._modifiers = {
            ability: modifier_cls(self.config)
            for ability, modifier_cls in MODIFIER_CLASSES.items()
        }

    def modifier_for(self, ability: Any) -> CostModifier:
        return self._modifiers[normalize_ability(ability)]

    def get_attribute_cost(self, attribute: str, level: Any, ability: Any = None) -> int:
        table = self.config.attribute_costs.get(attribute)
        if table is None:
            raise ValueError(f"Unknown attribute: {attribute!r}")
        try:
            base_cost = table[level]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Unknown {attribute} level: {level!r}") from exc
        return self.modifier_for(ability).attribute_cost(attribute, base_cost)

    def get_weapon_cost(self, weapon: Any, ability: Any = None) -> int:
        base_cost = _non_negative(weapon.base_cost, f"Base cost of {weapon.name}")
        return self.modifier_for(ability).weapon_cost(weapon, base_cost)

    def get_equipment_cost(self, equipment: Any, ability: Any = None) -> int:
        base_cost = _non_negative(equipment.base_cost, f"Base cost of {equipment.name}")
        return self.modifier_for(ability).equipment_cost(equipment, base_cost)

    def get_psychic_power_cost(self, power: Any) -> int:
        return _non_negative(power.cost, f"Cost of {power.name}")

    def attributes_cost(self, attributes: Any, ability: Any = None) -> int:
        return sum(
            self.get_attribute_cost(name, getattr(attributes, name), ability)
            for name in ATTRIBUTE_NAMES
        )

    def weapons_cost(self, weapons: Iterable[Any], ability: Any = None) -> int:
        return sum(self.get_weapon_cost(weapon, ability) for weapon in weapons)

    def weirdo_cost_breakdown(self, weirdo: Any, ability: Any = None) -> CostBreakdown:
        return CostBreakdown(
            attributes=self.attributes_cost(weirdo.attributes, ability),
            weapons=self.weapons_cost(weirdo.close_combat_weapons, ability)
            + self.weapons_cost(weirdo.ranged_weapons, ability),
            equipment=sum(
                self.get_equipment_cost(item, ability) for item in weirdo.equipment
            ),
            psychic_powers=sum(
                self.get_psychic_power_cost(power) for power in weirdo.psychic_powers
            ),
        )

    def calculate_weirdo_cost(self, weirdo: Any, ability: Any = None) -> int:
        return self.weirdo_cost_breakdown(weirdo, ability).total

    def calculate_warband_cost(self, warband: Any) -> int:
        return sum(
            self.calculate_weirdo_cost(weirdo, warband.ability)
            for weirdo in warband.weirdos
        )

    def with_weirdo_cost(self, weirdo: Weirdo, ability: Any = None) -> Weirdo:
        return weirdo.model_copy(
            update={"total_cost": self.calculate_weirdo_cost(weirdo, ability)}
        )

    def with_warband_costs(self, warband: Warband) -> Warband:
        weirdos = [self.with_weirdo_cost(weirdo, warband.ability) for weirdo in warband.weirdos]
        return warband.model_copy(
            update={
                "weirdos": weirdos,
                "total_cost": sum(weirdo.total_cost for weirdo in weirdos),
            }
        )
