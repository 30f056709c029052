from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from aether_crawl.models.enums import (
    CombatTrait,
    DamageType,
    EnemyRole,
    EnemyTier,
    MaterialType,
    StatType,
)
from aether_crawl.models.item import Item
from aether_crawl.models.skill import Skill
from aether_crawl.models.status import StatusEffects

_STAT_FIELDS: dict[StatType, str] = {
    StatType.STR: "strength",
    StatType.DEX: "dexterity",
    StatType.INT: "intelligence",
    StatType.CON: "constitution",
}


class Stats(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    strength: int = 10
    dexterity: int = 10
    intelligence: int = 10
    constitution: int = 10

    def get(self, stat: StatType) -> int:
        return getattr(self, _STAT_FIELDS[stat])

    def increase(self, stat: StatType, amount: int) -> int:
        new_value = self.get(stat) + amount
        setattr(self, _STAT_FIELDS[stat], new_value)
        return new_value


class Combatant(BaseModel):
    """Fields shared by the player and enemies."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    level: int = 1
    hp: int = 0
    max_hp: int = 0
    ac: int = 10
    stats: Stats = Field(default_factory=Stats)
    status: StatusEffects = Field(default_factory=StatusEffects)
    trait: CombatTrait = CombatTrait.NONE

    @model_validator(mode="after")
    def _clamp_hp(self) -> Combatant:
        self.max_hp = max(0, self.max_hp)
        self.clamp_hp()
        return self

    def clamp_hp(self) -> None:
        self.hp = max(0, min(self.hp, self.max_hp))

    @property
    def is_alive(self) -> bool:
        return self.hp > 0


class Player(Combatant):
    class_archetype: str = "Adventurer"
    main_stat: StatType = StatType.STR
    xp: int = 0
    max_xp: int = 100
    stat_points: int = 0
    gold: int = 0
    inventory: list[Item] = Field(default_factory=list)
    weapon: Optional[Item] = None
    armor: Optional[Item] = None
    skills: list[Skill] = Field(default_factory=list)

    def find_skill(self, skill_id: str) -> Skill | None:
        return next((s for s in self.skills if s.id == skill_id), None)

    def find_item(self, item_id: str) -> Item | None:
        return next((i for i in self.inventory if i.id == item_id), None)

    @property
    def active_skills(self) -> list[Skill]:
        return [s for s in self.skills if s.is_active]


class Enemy(Combatant):
    description: str = ""
    role: EnemyRole = EnemyRole.BALANCED
    difficulty: EnemyTier = EnemyTier.MINION
    material: MaterialType = MaterialType.FLESH
    weakness: Optional[DamageType] = None
    resistance: Optional[DamageType] = None
    damage_type: DamageType = DamageType.BLUNT
    pierce: float = 0.0
    accuracy: int = 0
