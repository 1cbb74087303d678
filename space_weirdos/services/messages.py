from __future__ import annotations

VALIDATION_MESSAGES = {
    "WARBAND_NAME_REQUIRED": "Warband name is required",
    "WEIRDO_NAME_REQUIRED": "Weirdo name is required",
    "INVALID_POINT_LIMIT": "Point limit must be {standard} or {extended}",
    "ATTRIBUTES_INCOMPLETE": "All five attributes must be selected",
    "CLOSE_COMBAT_WEAPON_REQUIRED": "At least one close combat weapon is required",
    "RANGED_WEAPON_REQUIRED": "Ranged weapon required when Firepower is 2d8 or 2d10",
    "FIREPOWER_REQUIRED_FOR_RANGED_WEAPON": "Firepower level 2d8 or 2d10 required to use ranged weapons",
    "EQUIPMENT_LIMIT_EXCEEDED": "Equipment limit exceeded: {type} can have {limit} items",
    "TROOPER_POINT_LIMIT_EXCEEDED": "{role} cost ({cost}) exceeds {limit}-point limit",
    "MULTIPLE_25_POINT_WEIRDOS": "Only one weirdo may cost {min}-{max} points",
    "WARBAND_POINT_LIMIT_EXCEEDED": "Warband total cost ({total_cost}) exceeds point limit ({point_limit})",
    "LEADER_TRAIT_INVALID": "Leader trait can only be assigned to leaders",
    "MULTIPLE_LEADERS": "A warband can have only one leader",
}

WARNING_MESSAGES = {
    "WARBAND_APPROACHING_POINT_LIMIT": "Warband total cost ({total_cost}) is approaching the point limit ({point_limit})",
    "COST_APPROACHING_LIMIT": "Cost is within {distance} point{plural} of the {limit}-point limit{suffix}",
}


def validation_message(code: str, **params: object) -> str:
    """Return the message for ``code`` with ``params`` interpolated."""

    template = VALIDATION_MESSAGES.get(code) or WARNING_MESSAGES[code]
    if not params:
        return template
    return template.format(**params)
