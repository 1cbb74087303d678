"""Immutable rulebook configuration shared by the cost engine and validators."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from ..schemas import ATTRIBUTE_NAMES, WarbandAbility, WeirdoType

logger = logging.getLogger(__name__)


DEFAULT_ATTRIBUTE_COSTS: dict[str, dict[Any, int]] = {
    "speed": {1: 0, 2: 1, 3: 3},
    "defense": {"2d6": 2, "2d8": 4, "2d10": 8},
    "firepower": {"None": 0, "2d8": 2, "2d10": 4},
    "prowess": {"2d6": 2, "2d8": 4, "2d10": 6},
    "willpower": {"2d6": 2, "2d8": 4, "2d10": 6},
}


class RuleConfigError(ValueError):
    """Raised when a ruleset cannot be loaded or holds invalid values."""


@dataclass(frozen=True)
class PointLimits:
    standard: int = 75
    extended: int = 125
    warning_threshold: float = 0.9


@dataclass(frozen=True)
class TrooperLimits:
    standard_limit: int = 20
    maximum_limit: int = 25
    special_slot_min: int = 21
    special_slot_max: int = 25


@dataclass(frozen=True)
class EquipmentLimits:
    leader_standard: int = 2
    leader_cyborgs: int = 3
    trooper_standard: int = 1
    trooper_cyborgs: int = 2


@dataclass(frozen=True)
class DiscountValues:
    mutant_discount: int = 1
    heavily_armed_discount: int = 1


@dataclass(frozen=True)
class AbilityLists:
    mutant_weapons: tuple[str, ...] = ("Claws & Teeth", "Horrible Claws & Teeth", "Whip/Tail")
    soldier_free_equipment: tuple[str, ...] = ("Grenade", "Heavy Armor", "Medkit")


def _freeze_costs(table: Mapping[str, Mapping[Any, int]]) -> Mapping[str, Mapping[Any, int]]:
    return MappingProxyType(
        {name: MappingProxyType(dict(levels)) for name, levels in table.items()}
    )


@dataclass(frozen=True)
class RuleConfig:
    attribute_costs: Mapping[str, Mapping[Any, int]] = field(
        default_factory=lambda: DEFAULT_ATTRIBUTE_COSTS
    )
    point_limits: PointLimits = field(default_factory=PointLimits)
    trooper_limits: TrooperLimits = field(default_factory=TrooperLimits)
    equipment_limits: EquipmentLimits = field(default_factory=EquipmentLimits)
    discount_values: DiscountValues = field(default_factory=DiscountValues)
    ability_lists: AbilityLists = field(default_factory=AbilityLists)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attribute_costs", _freeze_costs(self.attribute_costs))
        _check_config(self)

    @property
    def valid_point_limits(self) -> tuple[int, int]:
        return (self.point_limits.standard, self.point_limits.extended)

    def equipment_limit(
        self, weirdo_type: WeirdoType | str, ability: WarbandAbility | str | None
    ) -> int:
        limits = self.equipment_limits
        cyborgs = ability == WarbandAbility.CYBORGS
        if weirdo_type == WeirdoType.LEADER:
            return limits.leader_cyborgs if cyborgs else limits.leader_standard
        return limits.trooper_cyborgs if cyborgs else limits.trooper_standard


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_config(config: RuleConfig) -> None:
    missing = [name for name in ATTRIBUTE_NAMES if name not in config.attribute_costs]
    if missing:
        raise RuleConfigError(f"Missing attribute cost tables: {', '.join(missing)}")
    for name, levels in config.attribute_costs.items():
        for level, cost in levels.items():
            if not _is_int(cost) or cost < 0:
                raise RuleConfigError(
                    f"Attribute cost for {name} {level!r} must be a non-negative integer"
                )

    numeric = (
        config.point_limits,
        config.trooper_limits,
        config.equipment_limits,
        config.discount_values,
    )
    for section in numeric:
        for item in fields(section):
            value = getattr(section, item.name)
            if item.name == "warning_threshold":
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise RuleConfigError("Warning threshold must be a number")
            elif not _is_int(value):
                raise RuleConfigError(f"{item.name} must be an integer, got {value!r}")
    for item in fields(config.ability_lists):
        names = getattr(config.ability_lists, item.name)
        if not isinstance(names, tuple) or not all(isinstance(name, str) for name in names):
            raise RuleConfigError(f"{item.name} must be a list of names, got {names!r}")

    points = config.point_limits
    if points.standard <= 0 or points.extended <= 0:
        raise RuleConfigError("Point limits must be positive")
    if not 0 <= points.warning_threshold <= 1:
        raise RuleConfigError("Warning threshold must be between 0 and 1")

    troopers = config.trooper_limits
    if not 0 < troopers.standard_limit <= troopers.maximum_limit:
        raise RuleConfigError("Trooper standard limit must be positive and <= maximum limit")
    if not troopers.special_slot_min <= troopers.special_slot_max <= troopers.maximum_limit:
        raise RuleConfigError("Special slot range must lie within the maximum limit")

    for item in fields(config.equipment_limits):
        if getattr(config.equipment_limits, item.name) < 0:
            raise RuleConfigError(f"Equipment limit {item.name} must not be negative")
    for item in fields(config.discount_values):
        if getattr(config.discount_values, item.name) < 0:
            raise RuleConfigError(f"Discount {item.name} must not be negative")


_SECTIONS = {
    "point_limits": PointLimits,
    "trooper_limits": TrooperLimits,
    "equipment_limits": EquipmentLimits,
    "discount_values": DiscountValues,
    "ability_lists": AbilityLists,
}


def _level_key(attribute: str, raw_key: Any) -> Any:
    if attribute == "speed":
        try:
            return int(raw_key)
        except (TypeError, ValueError) as exc:
            raise RuleConfigError(f"Invalid speed level {raw_key!r}") from exc
    return str(raw_key)


def _merge_attribute_costs(raw: Any) -> dict[str, dict[Any, int]]:
    if not isinstance(raw, Mapping):
        raise RuleConfigError("attribute_costs must be a mapping")
    table = {name: dict(levels) for name, levels in DEFAULT_ATTRIBUTE_COSTS.items()}
    for attribute, levels in raw.items():
        if attribute not in table:
            raise RuleConfigError(f"Unknown attribute {attribute!r}")
        if not isinstance(levels, Mapping):
            raise RuleConfigError(f"Cost table for {attribute} must be a mapping")
        for raw_key, raw_cost in levels.items():
            table[attribute][_level_key(attribute, raw_key)] = raw_cost
    return table


def _merge_section(section: str, current: Any, raw: Any) -> Any:
    if not isinstance(raw, Mapping):
        raise RuleConfigError(f"Section {section} must be a mapping")
    known = {item.name for item in fields(current)}
    overrides: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            logger.warning("Ignoring unknown ruleset key %s.%s", section, key)
            continue
        if isinstance(value, list):
            value = tuple(value)
        overrides[key] = value
    return replace(current, **overrides)


def rule_config_from_mapping(data: Mapping[str, Any] | None) -> RuleConfig:
    """Build a config from nested ruleset sections, falling back to defaults."""

    if not data:
        return RuleConfig()
    if not isinstance(data, Mapping):
        raise RuleConfigError("Ruleset must be a mapping")

    kwargs: dict[str, Any] = {}
    defaults = RuleConfig()
    for key, value in data.items():
        if key == "attribute_costs":
            kwargs[key] = _merge_attribute_costs(value)
        elif key in _SECTIONS:
            kwargs[key] = _merge_section(key, getattr(defaults, key), value)
        else:
            logger.warning("Ignoring unknown ruleset section %s", key)
    try:
        return RuleConfig(**kwargs)
    except TypeError as exc:
        raise RuleConfigError(str(exc)) from exc


def load_rule_config(path: Path | str | None = None) -> RuleConfig:
    """Read a ruleset JSON file; a missing file yields the default rules."""

    if path is None:
        from ..config import RULESET_PATH

        path = RULESET_PATH
    ruleset_path = Path(path)
    try:
        with ruleset_path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
    except FileNotFoundError:
        logger.warning("Ruleset %s not found, using default rules", ruleset_path)
        return RuleConfig()
    except json.JSONDecodeError as exc:
        raise RuleConfigError(f"Ruleset {ruleset_path} is not valid JSON: {exc}") from exc
    config = rule_config_from_mapping(data)
    logger.info("Loaded ruleset from %s", ruleset_path)
    return config


@lru_cache()
def default_rule_config() -> RuleConfig:
    return RuleConfig()
