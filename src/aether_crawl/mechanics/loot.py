"""Loot generation: mechanical item stats only, no I/O.

Names and descriptions are attached later by the narration / flavor layer;
``mint_item`` falls back to generic placeholders when they never arrive.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from aether_crawl.config import GameSettings
from aether_crawl.models.enums import (
    CombatTrait,
    DamageType,
    EnemyTier,
    ItemType,
    StatType,
)
from aether_crawl.models.item import Item

TIER_LOOT_MULTIPLIER: Mapping[EnemyTier, float] = MappingProxyType({
    EnemyTier.MINION: 1.0,
    EnemyTier.ELITE: 1.5,
    EnemyTier.BOSS: 2.5,
})

PHYSICAL_TYPES = (DamageType.SLASHING, DamageType.BLUNT, DamageType.PIERCING)
ELEMENTAL_TYPES = (DamageType.MAGIC, DamageType.FIRE, DamageType.ICE, DamageType.POISON)

WEAPON_CHANCE = 0.4
ARMOR_CHANCE = 0.7  # cumulative with weapons; the rest are potions
ELEMENTAL_CHANCE = 0.3

BASE_DROP_CHANCE = 0.6
ELITE_DROP_CHANCE = 0.8
BOSS_DROP_CHANCE = 1.0
SCAVENGER_BONUS = 1.5

MERCHANT_STOCK = 5
FALLBACK_LOOT_DESCRIPTION = "A mysterious item."


@dataclass
class LootRoll:
    item_type: ItemType
    value: int
    cost: int
    tier: EnemyTier = EnemyTier.MINION
    stat_modifier: Optional[StatType] = None
    damage_type: Optional[DamageType] = None

    @property
    def label(self) -> str:
        prefix = "ELITE " if self.tier != EnemyTier.MINION else ""
        return f"{prefix}{self.item_type.value}"


def weapon_value(level: int, multiplier: float = 1.0, variance: int = 0) -> int:
    return int((4 + int(level * 1.5) + variance) * multiplier)


def armor_value(level: int, multiplier: float = 1.0) -> int:
    return int((1 + int(level * 0.8)) * multiplier)


def potion_value(level: int, multiplier: float = 1.0) -> int:
    return int((20 + level * 10) * multiplier)


def roll_loot(level: int, tier: EnemyTier = EnemyTier.MINION, rng: random.Random | None = None) -> LootRoll:
    """Roll one item: 40% weapon, 30% armor, 30% potion."""
    rng = rng or random.Random()
    mult = TIER_LOOT_MULTIPLIER[tier]
    u = rng.random()

    if u < WEAPON_CHANCE:
        value = weapon_value(level, mult, rng.randint(0, 2))
        if rng.random() < ELEMENTAL_CHANCE:
            damage_type = rng.choice(ELEMENTAL_TYPES)
        else:
            damage_type = rng.choice(PHYSICAL_TYPES)
        stat = StatType.STR if rng.random() < 0.5 else StatType.DEX
        return LootRoll(
            item_type=ItemType.WEAPON,
            value=value,
            cost=value * 20,
            tier=tier,
            stat_modifier=stat,
            damage_type=damage_type,
        )
    if u < ARMOR_CHANCE:
        value = armor_value(level, mult)
        return LootRoll(item_type=ItemType.ARMOR, value=value, cost=value * 30, tier=tier)

    value = potion_value(level, mult)
    return LootRoll(item_type=ItemType.POTION, value=value, cost=value // 2, tier=tier)


def loot_drop_chance(tier: EnemyTier, settings: GameSettings, trait: CombatTrait = CombatTrait.NONE) -> float:
    """Chance that a defeated enemy drops an item.

    The loot-chance setting only scales minion drops; elites and bosses have
    fixed odds. Scavenger improves all of them, capped at certainty.
    """
    if tier == EnemyTier.BOSS:
        chance = BOSS_DROP_CHANCE
    elif tier == EnemyTier.ELITE:
        chance = ELITE_DROP_CHANCE
    else:
        chance = BASE_DROP_CHANCE * settings.loot_chance_multiplier
    if trait == CombatTrait.SCAVENGER:
        chance = min(1.0, chance * SCAVENGER_BONUS)
    return chance


def mint_item(roll: LootRoll, name: str | None = None, description: str | None = None) -> Item:
    """Turn a roll into an inventory item with a fresh id."""
    return Item(
        name=name or f"Unknown {roll.item_type.value}",
        description=description or FALLBACK_LOOT_DESCRIPTION,
        item_type=roll.item_type,
        value=roll.value,
        cost=roll.cost,
        stat_modifier=roll.stat_modifier,
        damage_type=roll.damage_type,
    )


def merchant_rolls(level: int, rng: random.Random | None = None) -> list[LootRoll]:
    """Five ordinary items plus one elite one."""
    rng = rng or random.Random()
    rolls = [roll_loot(level, EnemyTier.MINION, rng) for _ in range(MERCHANT_STOCK)]
    rolls.append(roll_loot(level, EnemyTier.ELITE, rng))
    return rolls
