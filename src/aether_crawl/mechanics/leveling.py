"""XP, level-up and reward mechanics — pure math, no I/O."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from aether_crawl.config import GameSettings
from aether_crawl.mechanics.combat_math import ac_for_dex
from aether_crawl.mechanics.dice import roll_die
from aether_crawl.models.character import Player
from aether_crawl.models.enums import CombatTrait, Difficulty, EnemyTier, StatType

logger = logging.getLogger(__name__)

MAX_XP_GROWTH = 1.5
HP_PER_LEVEL = 10
STAT_POINTS_PER_LEVEL = 1
STAT_INCREASE = 2
MIDAS_GOLD_BONUS = 1.2

TIER_REWARD_MULTIPLIER: Mapping[EnemyTier, int] = MappingProxyType({
    EnemyTier.MINION: 1,
    EnemyTier.ELITE: 2,
    EnemyTier.BOSS: 5,
})

DIFFICULTY_REWARD_MULTIPLIER: Mapping[Difficulty, float] = MappingProxyType({
    Difficulty.EASY: 0.8,
    Difficulty.NORMAL: 1.0,
    Difficulty.HARD: 1.5,
    Difficulty.EXTREME: 2.0,
})


@dataclass
class LevelProgress:
    level: int
    xp: int
    max_xp: int
    levels_gained: int = 0


def max_hp_for_con(constitution: int) -> int:
    """Base 20 + 5 per point of Constitution."""
    return 20 + 5 * constitution


def apply_level_ups(level: int, xp: int, max_xp: int, amount: int) -> LevelProgress:
    """Add ``amount`` XP and roll over as many levels as it pays for.

    Each level costs the current ``max_xp``, which then grows by half.
    Awarding XP in one lump or in pieces lands on the same result.
    """
    if amount < 0:
        raise ValueError(f"XP award cannot be negative: {amount}")
    if max_xp <= 0:
        raise ValueError(f"max_xp must be positive: {max_xp}")
    progress = LevelProgress(level=level, xp=xp + amount, max_xp=max_xp)
    while progress.xp >= progress.max_xp:
        progress.xp -= progress.max_xp
        progress.level += 1
        progress.max_xp = int(progress.max_xp * MAX_XP_GROWTH)
        progress.levels_gained += 1
    return progress


def intelligence_bonus(amount: int, intelligence: int) -> int:
    """+2% XP per point of Intelligence."""
    return amount * (50 + intelligence) // 50


def award_xp(player: Player, amount: int) -> int:
    """Grant XP to ``player`` in place. Returns the number of levels gained.

    Every level gained raises max HP by 10, fully heals and grants a stat point.
    """
    final = intelligence_bonus(amount, player.stats.intelligence)
    progress = apply_level_ups(player.level, player.xp, player.max_xp, final)
    player.level = progress.level
    player.xp = progress.xp
    player.max_xp = progress.max_xp
    for _ in range(progress.levels_gained):
        player.max_hp += HP_PER_LEVEL
        player.hp = player.max_hp
        player.stat_points += STAT_POINTS_PER_LEVEL
    if progress.levels_gained:
        logger.info(f"{player.name} reached level {player.level} (+{final} XP)")
    return progress.levels_gained


def allocate_stat(player: Player, stat: StatType) -> int:
    """Spend one stat point for +2 in ``stat``, recomputing derived values.

    Returns the new stat value. Raises ValueError without a point to spend.
    """
    if player.stat_points <= 0:
        raise ValueError(f"{player.name} has no stat points to spend")
    player.stat_points -= 1
    new_value = player.stats.increase(stat, STAT_INCREASE)
    if stat == StatType.CON:
        new_max = max_hp_for_con(new_value)
        delta = new_max - player.max_hp
        player.max_hp = new_max
        player.hp = player.hp + delta
        player.clamp_hp()
    elif stat == StatType.DEX:
        player.ac = ac_for_dex(new_value)
    return new_value


@dataclass
class Rewards:
    xp: int = 0
    gold: int = 0


def defeat_rewards(
    level: int,
    tier: EnemyTier,
    rng: random.Random | None = None,
    trait: CombatTrait = CombatTrait.NONE,
) -> Rewards:
    """Base XP and gold for defeating an enemy of ``level`` and ``tier``."""
    rng = rng or random.Random()
    mult = TIER_REWARD_MULTIPLIER[tier]
    xp = 50 * level * mult
    gold = (10 * level + roll_die(9, rng, low=0)) * mult
    if trait == CombatTrait.MIDAS:
        gold = int(gold * MIDAS_GOLD_BONUS)
    return Rewards(xp=xp, gold=gold)


def scale_rewards(rewards: Rewards, settings: GameSettings) -> Rewards:
    diff = DIFFICULTY_REWARD_MULTIPLIER[settings.difficulty]
    return Rewards(
        xp=int(rewards.xp * diff * settings.xp_multiplier),
        gold=int(rewards.gold * diff),
    )
