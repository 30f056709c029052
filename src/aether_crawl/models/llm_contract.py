from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from aether_crawl.models.enums import CombatTrait, DamageType, EnemyRole, MaterialType


class EnemyFlavor(BaseModel):
    name: str
    description: str = ""
    role: EnemyRole = EnemyRole.BALANCED
    trait: CombatTrait = CombatTrait.NONE
    material: MaterialType = MaterialType.FLESH
    damage_type: DamageType = DamageType.MAGIC


class GearFlavor(BaseModel):
    name: str
    description: str = ""
    damage_type: Optional[DamageType] = None


class CharacterFlavor(BaseModel):
    name: str
    class_flavor_name: str
    visual_prompt: str = ""
    weapon: GearFlavor
    armor: GearFlavor
    first_skill: GearFlavor


class NarrationReply(BaseModel):
    narrative: str = ""
    loot_name: Optional[str] = None
    loot_description: Optional[str] = None


class ItemFlavor(BaseModel):
    name: str
    description: str = Field(default="A mysterious item.")
