from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


SpeedLevel = Literal[1, 2, 3]
DiceLevel = Literal["2d6", "2d8", "2d10"]
FirepowerLevel = Literal["None", "2d8", "2d10"]

ATTRIBUTE_NAMES = ("speed", "defense", "firepower", "prowess", "willpower")


class WarbandAbility(str, Enum):
    CYBORGS = "Cyborgs"
    FANATICS = "Fanatics"
    LIVING_WEAPONS = "Living Weapons"
    HEAVILY_ARMED = "Heavily Armed"
    MUTANTS = "Mutants"
    SOLDIERS = "Soldiers"
    UNDEAD = "Undead"


class WeirdoType(str, Enum):
    LEADER = "leader"
    TROOPER = "trooper"


class WeaponType(str, Enum):
    CLOSE = "close"
    RANGED = "ranged"


class EquipmentType(str, Enum):
    PASSIVE = "Passive"
    ACTION = "Action"


class PowerType(str, Enum):
    ATTACK = "Attack"
    EFFECT = "Effect"
    EITHER = "Either"


class LeaderTrait(str, Enum):
    BOUNTY_HUNTER = "Bounty Hunter"
    HEALER = "Healer"
    MAJESTIC = "Majestic"
    MONSTROUS = "Monstrous"
    POLITICAL_OFFICER = "Political Officer"
    SORCERER = "Sorcerer"
    TACTICIAN = "Tactician"


def _new_id() -> str:
    return str(uuid4())


class _Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Attributes(_Schema):
    speed: SpeedLevel = 1
    defense: DiceLevel = "2d6"
    firepower: FirepowerLevel = "None"
    prowess: DiceLevel = "2d6"
    willpower: DiceLevel = "2d6"


class Weapon(_Schema):
    id: str = Field(default_factory=_new_id)
    name: str = Field(..., max_length=120)
    type: WeaponType
    base_cost: int = Field(0, ge=0)
    max_actions: int = Field(0, ge=0)
    notes: str = ""


class Equipment(_Schema):
    id: str = Field(default_factory=_new_id)
    name: str = Field(..., max_length=120)
    type: EquipmentType
    base_cost: int = Field(0, ge=0)
    effect: str = ""


class PsychicPower(_Schema):
    id: str = Field(default_factory=_new_id)
    name: str = Field(..., max_length=120)
    type: PowerType
    cost: int = Field(0, ge=0)
    effect: str = ""


class Weirdo(_Schema):
    id: str = Field(default_factory=_new_id)
    name: str = Field("", max_length=120)
    type: WeirdoType = WeirdoType.TROOPER
    attributes: Attributes = Field(default_factory=Attributes)
    close_combat_weapons: list[Weapon] = Field(default_factory=list)
    ranged_weapons: list[Weapon] = Field(default_factory=list)
    equipment: list[Equipment] = Field(default_factory=list)
    psychic_powers: list[PsychicPower] = Field(default_factory=list)
    leader_trait: Optional[LeaderTrait] = None
    notes: str = ""
    total_cost: int = 0


class Warband(_Schema):
    id: str = Field(default_factory=_new_id)
    name: str = Field("New Warband", max_length=120)
    ability: Optional[WarbandAbility] = None
    point_limit: int = 75
    total_cost: int = 0
    weirdos: list[Weirdo] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class WarbandSummary(_Schema):
    id: str
    name: str
    ability: Optional[WarbandAbility] = None
    point_limit: int
    total_cost: int
    weirdo_count: int
    updated_at: datetime


class WarbandForm(_Schema):
    name: str = Field(..., max_length=120)
    point_limit: int
    ability: Optional[WarbandAbility] = None


class WarbandUpdateForm(_Schema):
    name: Optional[str] = Field(None, max_length=120)
    point_limit: Optional[int] = None
    ability: Optional[WarbandAbility] = None
    weirdos: Optional[list[Weirdo]] = None


class CostRequest(_Schema):
    weirdo: Optional[Weirdo] = None
    warband: Optional[Warband] = None
    warband_ability: Optional[WarbandAbility] = None


class ValidateRequest(_Schema):
    weirdo: Optional[Weirdo] = None
    warband: Optional[Warband] = None
