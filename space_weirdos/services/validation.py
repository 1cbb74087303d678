"""Roster legality rules for weirdos and warbands.

Every rule is evaluated on each run and findings are returned as data, never
raised. Errors block saving a warband, warnings are advisory only.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, List, Optional

from ..schemas import ATTRIBUTE_NAMES, WeirdoType
from .costs import CostEngine
from .messages import validation_message
from .rule_config import RuleConfig

HIGH_FIREPOWER_LEVELS = {"2d8", "2d10"}

COST_WARNING_MARGIN = 3


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str
    code: str
    context: Optional[dict[str, Any]] = None

    def as_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        if payload["context"] is None:
            payload.pop("context")
        return payload


@dataclass(frozen=True)
class ValidationError(ValidationIssue):
    pass


@dataclass(frozen=True)
class ValidationWarning(ValidationIssue):
    pass


@dataclass
class ValidationResult:
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def codes(self) -> list[str]:
        return [error.code for error in self.errors]

    def as_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [error.as_dict() for error in self.errors],
            "warnings": [warning.as_dict() for warning in self.warnings],
        }


@dataclass
class WeirdoSummary:
    """Light-weight snapshot of a warband member used by the cost rules."""

    id: str
    name: str
    type: Any
    total_cost: Optional[int]


def _value(item: Any) -> Any:
    return getattr(item, "value", item)


def _items(owner: Any, attr: str) -> list[Any]:
    return list(getattr(owner, attr, None) or [])


def _weirdo_field(weirdo: Any, suffix: str) -> str:
    return f"weirdo.{getattr(weirdo, 'id', '')}.{suffix}"


def _is_blank(text: Any) -> bool:
    return text is None or not str(text).strip()


class ValidationService:
    """Stateless validator over the same cost model as :class:`CostEngine`."""

    def __init__(
        self,
        config: RuleConfig | None = None,
        cost_engine: CostEngine | None = None,
    ) -> None:
        if cost_engine is None:
            cost_engine = CostEngine(config)
        self.cost_engine = cost_engine
        self.config = config if config is not None else cost_engine.config


    def _missing_attributes(self, weirdo: Any) -> list[str]:
        attributes = getattr(weirdo, "attributes", None)
        if attributes is None:
            return list(ATTRIBUTE_NAMES)
        missing: list[str] = []
        for name in ATTRIBUTE_NAMES:
            level = getattr(attributes, name, None)
            table = self.config.attribute_costs.get(name, {})
            if level is None or level not in table:
                missing.append(name)
        return missing

    def _weirdo_cost(self, weirdo: Any, ability: Any) -> Optional[int]:
        if self._missing_attributes(weirdo):
            return None
        return self.cost_engine.calculate_weirdo_cost(weirdo, ability)

    def _in_special_slot(self, cost: Optional[int]) -> bool:
        if cost is None:
            return False
        limits = self.config.trooper_limits
        return limits.special_slot_min <= cost <= limits.special_slot_max

    def _summaries(self, warband: Any) -> list[WeirdoSummary]:
        ability = getattr(warband, "ability", None)
        return [
            WeirdoSummary(
                id=getattr(weirdo, "id", ""),
                name=getattr(weirdo, "name", "") or "",
                type=getattr(weirdo, "type", None),
                total_cost=self._weirdo_cost(weirdo, ability),
            )
            for weirdo in _items(warband, "weirdos")
        ]

    def _other_in_special_slot(self, weirdo: Any, summaries: Iterable[WeirdoSummary]) -> bool:
        weirdo_id = getattr(weirdo, "id", None)
        return any(
            summary.id != weirdo_id and self._in_special_slot(summary.total_cost)
            for summary in summaries
        )


    def _check_name(self, weirdo: Any) -> Optional[ValidationError]:
        if _is_blank(getattr(weirdo, "name", None)):
            return ValidationError(
                field=_weirdo_field(weirdo, "name"),
                message=validation_message("WEIRDO_NAME_REQUIRED"),
                code="WEIRDO_NAME_REQUIRED",
            )
        return None

    def _check_attributes(self, weirdo: Any) -> Optional[ValidationError]:
        missing = self._missing_attributes(weirdo)
        if not missing:
            return None
        if len(missing) == len(ATTRIBUTE_NAMES):
            field_name = _weirdo_field(weirdo, "attributes")
        else:
            field_name = _weirdo_field(weirdo, f"attributes.{missing[0]}")
        return ValidationError(
            field=field_name,
            message=validation_message("ATTRIBUTES_INCOMPLETE"),
            code="ATTRIBUTES_INCOMPLETE",
            context={"missing": missing},
        )

    def _check_close_combat(self, weirdo: Any) -> Optional[ValidationError]:
        if _items(weirdo, "close_combat_weapons"):
            return None
        return ValidationError(
            field=_weirdo_field(weirdo, "close_combat_weapons"),
            message=validation_message("CLOSE_COMBAT_WEAPON_REQUIRED"),
            code="CLOSE_COMBAT_WEAPON_REQUIRED",
        )

    def _check_ranged(self, weirdo: Any) -> list[ValidationError]:
        attributes = getattr(weirdo, "attributes", None)
        firepower = getattr(attributes, "firepower", None)
        if firepower is None:
            return []
        has_ranged = bool(_items(weirdo, "ranged_weapons"))
        high_firepower = firepower in HIGH_FIREPOWER_LEVELS
        errors: list[ValidationError] = []
        if high_firepower and not has_ranged:
            errors.append(
                ValidationError(
                    field=_weirdo_field(weirdo, "ranged_weapons"),
                    message=validation_message("RANGED_WEAPON_REQUIRED"),
                    code="RANGED_WEAPON_REQUIRED",
                )
            )
        if has_ranged and not high_firepower:
            errors.append(
                ValidationError(
                    field=_weirdo_field(weirdo, "attributes.firepower"),
                    message=validation_message("FIREPOWER_REQUIRED_FOR_RANGED_WEAPON"),
                    code="FIREPOWER_REQUIRED_FOR_RANGED_WEAPON",
                )
            )
        return errors

    def _check_equipment(self, weirdo: Any, ability: Any) -> Optional[ValidationError]:
        weirdo_type = getattr(weirdo, "type", WeirdoType.TROOPER)
        limit = self.config.equipment_limit(weirdo_type, ability)
        count = len(_items(weirdo, "equipment"))
        if count <= limit:
            return None
        return ValidationError(
            field=_weirdo_field(weirdo, "equipment"),
            message=validation_message(
                "EQUIPMENT_LIMIT_EXCEEDED", type=_value(weirdo_type), limit=limit
            ),
            code="EQUIPMENT_LIMIT_EXCEEDED",
            context={"count": count, "limit": limit},
        )

    def _check_point_limit(
        self, weirdo: Any, ability: Any, summaries: list[WeirdoSummary]
    ) -> Optional[ValidationError]:
        cost = self._weirdo_cost(weirdo, ability)
        if cost is None:
            return None
        limits = self.config.trooper_limits
        if self._other_in_special_slot(weirdo, summaries):
            limit = limits.standard_limit
        else:
            limit = limits.maximum_limit
        if cost <= limit:
            return None
        role = str(_value(getattr(weirdo, "type", WeirdoType.TROOPER))).capitalize()
        return ValidationError(
            field=_weirdo_field(weirdo, "total_cost"),
            message=validation_message(
                "TROOPER_POINT_LIMIT_EXCEEDED", role=role, cost=cost, limit=limit
            ),
            code="TROOPER_POINT_LIMIT_EXCEEDED",
            context={"cost": cost, "limit": limit},
        )

    def _check_leader_trait(self, weirdo: Any) -> Optional[ValidationError]:
        if getattr(weirdo, "leader_trait", None) is None:
            return None
        if getattr(weirdo, "type", None) == WeirdoType.LEADER:
            return None
        return ValidationError(
            field=_weirdo_field(weirdo, "leader_trait"),
            message=validation_message("LEADER_TRAIT_INVALID"),
            code="LEADER_TRAIT_INVALID",
        )

    def _weirdo_errors(
        self, weirdo: Any, warband: Any, summaries: list[WeirdoSummary]
    ) -> list[ValidationError]:
        ability = getattr(warband, "ability", None)
        errors: list[ValidationError] = []
        for error in (
            self._check_name(weirdo),
            self._check_attributes(weirdo),
            self._check_close_combat(weirdo),
        ):
            if error:
                errors.append(error)
        errors.extend(self._check_ranged(weirdo))
        for error in (
            self._check_equipment(weirdo, ability),
            self._check_point_limit(weirdo, ability, summaries),
            self._check_leader_trait(weirdo),
        ):
            if error:
                errors.append(error)
        return errors

    def _cost_warning(self, weirdo: Any, distance: int, limit: int, suffix: str = "") -> ValidationWarning:
        return ValidationWarning(
            field=_weirdo_field(weirdo, "total_cost"),
            message=validation_message(
                "COST_APPROACHING_LIMIT",
                distance=distance,
                plural="" if distance == 1 else "s",
                limit=limit,
                suffix=suffix,
            ),
            code="COST_APPROACHING_LIMIT",
            context={"limit": limit},
        )

    def _weirdo_warnings(
        self, weirdo: Any, warband: Any, summaries: list[WeirdoSummary]
    ) -> list[ValidationWarning]:
        cost = self._weirdo_cost(weirdo, getattr(warband, "ability", None))
        if cost is None:
            return []
        limits = self.config.trooper_limits
        if self._other_in_special_slot(weirdo, summaries):
            candidates = [(limits.standard_limit, "")]
        elif self._in_special_slot(cost):
            candidates = [(limits.maximum_limit, "")]
        else:
            candidates = [
                (limits.standard_limit, ""),
                (limits.maximum_limit, " (premium weirdo slot)"),
            ]
        warnings: list[ValidationWarning] = []
        for limit, suffix in candidates:
            distance = limit - cost
            if 0 <= distance <= COST_WARNING_MARGIN:
                warnings.append(self._cost_warning(weirdo, distance, limit, suffix))
        return warnings


    def _check_warband_name(self, warband: Any) -> Optional[ValidationError]:
        if _is_blank(getattr(warband, "name", None)):
            return ValidationError(
                field="name",
                message=validation_message("WARBAND_NAME_REQUIRED"),
                code="WARBAND_NAME_REQUIRED",
            )
        return None

    def _check_point_limit_value(self, warband: Any) -> Optional[ValidationError]:
        point_limit = getattr(warband, "point_limit", None)
        if point_limit in self.config.valid_point_limits:
            return None
        standard, extended = self.config.valid_point_limits
        return ValidationError(
            field="point_limit",
            message=validation_message(
                "INVALID_POINT_LIMIT", standard=standard, extended=extended
            ),
            code="INVALID_POINT_LIMIT",
            context={"point_limit": point_limit},
        )

    def _check_special_slot(self, summaries: list[WeirdoSummary]) -> Optional[ValidationError]:
        in_slot = [summary.id for summary in summaries if self._in_special_slot(summary.total_cost)]
        if len(in_slot) <= 1:
            return None
        limits = self.config.trooper_limits
        return ValidationError(
            field="weirdos",
            message=validation_message(
                "MULTIPLE_25_POINT_WEIRDOS",
                min=limits.special_slot_min,
                max=limits.special_slot_max,
            ),
            code="MULTIPLE_25_POINT_WEIRDOS",
            context={"weirdo_ids": in_slot},
        )

    def _check_leaders(self, summaries: list[WeirdoSummary]) -> Optional[ValidationError]:
        leaders = [summary.id for summary in summaries if summary.type == WeirdoType.LEADER]
        if len(leaders) <= 1:
            return None
        return ValidationError(
            field="weirdos",
            message=validation_message("MULTIPLE_LEADERS"),
            code="MULTIPLE_LEADERS",
            context={"weirdo_ids": leaders},
        )

    def warning_floor(self, point_limit: int) -> int:
        """Lowest total cost that triggers the approaching-limit warning."""

        threshold = self.config.point_limits.warning_threshold
        return math.ceil(round(point_limit * threshold, 9))

    def _check_warband_total(
        self, warband: Any, summaries: list[WeirdoSummary], result: ValidationResult
    ) -> None:
        point_limit = getattr(warband, "point_limit", None)
        if isinstance(point_limit, bool) or not isinstance(point_limit, int) or point_limit <= 0:
            return
        total_cost = sum(summary.total_cost or 0 for summary in summaries)
        params = {"total_cost": total_cost, "point_limit": point_limit}
        if total_cost > point_limit:
            result.errors.append(
                ValidationError(
                    field="total_cost",
                    message=validation_message("WARBAND_POINT_LIMIT_EXCEEDED", **params),
                    code="WARBAND_POINT_LIMIT_EXCEEDED",
                    context=params,
                )
            )
        elif total_cost >= self.warning_floor(point_limit):
            result.warnings.append(
                ValidationWarning(
                    field="total_cost",
                    message=validation_message("WARBAND_APPROACHING_POINT_LIMIT", **params),
                    code="WARBAND_APPROACHING_POINT_LIMIT",
                    context=params,
                )
            )


    def validate_weirdo(self, weirdo: Any, warband: Any) -> list[ValidationError]:
        """Return every rule violation of ``weirdo`` in the context of ``warband``."""

        return self._weirdo_errors(weirdo, warband, self._summaries(warband))

    def weirdo_warnings(self, weirdo: Any, warband: Any) -> list[ValidationWarning]:
        return self._weirdo_warnings(weirdo, warband, self._summaries(warband))

    def validate_warband(self, warband: Any) -> ValidationResult:
        """Validate warband fields, each weirdo and the warband-wide limits."""

        result = ValidationResult()
        summaries = self._summaries(warband)

        for error in (self._check_warband_name(warband), self._check_point_limit_value(warband)):
            if error:
                result.errors.append(error)

        for weirdo in _items(warband, "weirdos"):
            result.errors.extend(self._weirdo_errors(weirdo, warband, summaries))
            result.warnings.extend(self._weirdo_warnings(weirdo, warband, summaries))

        for error in (self._check_special_slot(summaries), self._check_leaders(summaries)):
            if error:
                result.errors.append(error)

        self._check_warband_total(warband, summaries, result)
        return result

    def validate_weapon_requirements(self, weirdo: Any) -> ValidationResult:
        result = ValidationResult()
        error = self._check_close_combat(weirdo)
        if error:
            result.errors.append(error)
        result.errors.extend(self._check_ranged(weirdo))
        return result

    def validate_equipment_limit(self, weirdo: Any, ability: Any) -> Optional[ValidationError]:
        return self._check_equipment(weirdo, ability)

    def validate_weirdo_point_limit(self, weirdo: Any, warband: Any) -> Optional[ValidationError]:
        return self._check_point_limit(
            weirdo, getattr(warband, "ability", None), self._summaries(warband)
        )

