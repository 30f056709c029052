from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from aether_crawl.models.enums import CombatTrait, DamageType, ItemType, StatType


class Item(BaseModel):
    """A weapon, armor, potion or scroll.

    ``value`` is damage for weapons, defense (soak) for armor and heal amount
    for potions. ``cost`` is the gold price.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    description: str = ""
    item_type: ItemType
    value: int = 0
    cost: int = 0
    stat_modifier: Optional[StatType] = None
    damage_type: Optional[DamageType] = None
    trait: Optional[CombatTrait] = None
