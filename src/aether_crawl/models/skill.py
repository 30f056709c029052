from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from aether_crawl.models.enums import CombatTrait, DamageType, SkillEffect, StatType


class Skill(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    description: str = ""
    stat: StatType = StatType.STR
    damage_scale: float = 1.5
    cooldown: int = 3
    current_cooldown: int = 0
    effect: Optional[SkillEffect] = None
    effect_value: int = 0
    damage_type: Optional[DamageType] = None
    trait: Optional[CombatTrait] = None
    cost: int = 100
    is_active: bool = False

    @property
    def ready(self) -> bool:
        return self.current_cooldown <= 0
