"""Enemy stat generation from role and difficulty tables.

Stats are anchored to the player: base HP is a fraction of the player's
maximum HP, base damage grows with the player's level. The cosmetic side
(name, description, role, material) arrives as an ``EnemyFlavor``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from aether_crawl.config import GameSettings
from aether_crawl.mechanics.combat_math import ac_for_dex
from aether_crawl.mechanics.elements import primary_resistance, primary_weakness
from aether_crawl.models.character import Enemy, Stats
from aether_crawl.models.enums import (
    CombatTrait,
    DamageType,
    Difficulty,
    EnemyRole,
    EnemyTier,
    MaterialType,
)
from aether_crawl.models.llm_contract import EnemyFlavor

logger = logging.getLogger(__name__)

MIN_ENEMY_HP = 20


@dataclass(frozen=True)
class RoleStats:
    hp: float
    damage: float
    accuracy: int
    defense: int
    pierce: float


@dataclass(frozen=True)
class DifficultyScaling:
    hp: float
    damage: float
    pierce: float


ROLE_STATS: Mapping[EnemyRole, RoleStats] = MappingProxyType({
    EnemyRole.TANK: RoleStats(hp=1.5, damage=0.8, accuracy=-1, defense=4, pierce=0.0),
    EnemyRole.SWARM: RoleStats(hp=0.5, damage=0.6, accuracy=4, defense=0, pierce=0.0),
    EnemyRole.ASSASSIN: RoleStats(hp=0.7, damage=1.3, accuracy=2, defense=0, pierce=0.3),
    EnemyRole.BRUTE: RoleStats(hp=1.3, damage=1.5, accuracy=-2, defense=0, pierce=0.0),
    EnemyRole.BALANCED: RoleStats(hp=1.0, damage=1.0, accuracy=0, defense=1, pierce=0.0),
})

DIFFICULTY_SCALING: Mapping[Difficulty, DifficultyScaling] = MappingProxyType({
    Difficulty.EASY: DifficultyScaling(hp=0.8, damage=0.8, pierce=0.0),
    Difficulty.NORMAL: DifficultyScaling(hp=1.0, damage=1.0, pierce=0.0),
    Difficulty.HARD: DifficultyScaling(hp=1.3, damage=1.3, pierce=0.25),
    Difficulty.EXTREME: DifficultyScaling(hp=1.5, damage=1.5, pierce=0.5),
})

TIER_DEFENSE: Mapping[EnemyTier, int] = MappingProxyType({
    EnemyTier.MINION: 0,
    EnemyTier.ELITE: 2,
    EnemyTier.BOSS: 5,
})

FALLBACK_ENEMY_FLAVOR = EnemyFlavor(
    name="Glitch Entity",
    description="A distorted figure formed from corrupted data.",
    role=EnemyRole.BALANCED,
    trait=CombatTrait.NONE,
    material=MaterialType.FLESH,
    damage_type=DamageType.MAGIC,
)


def encounter_tier(round_number: int, settings: GameSettings) -> EnemyTier:
    """The final round is always a boss; Hard difficulty promotes the rest to elites."""
    if round_number >= settings.max_rounds:
        return EnemyTier.BOSS
    if settings.difficulty == Difficulty.HARD:
        return EnemyTier.ELITE
    return EnemyTier.MINION


def enemy_base_soak(level: int, role: EnemyRole, tier: EnemyTier) -> int:
    return level // 2 + ROLE_STATS[role].defense + TIER_DEFENSE[tier]


def build_enemy(
    flavor: EnemyFlavor | None,
    round_number: int,
    player_level: int,
    player_max_hp: int,
    settings: GameSettings,
) -> Enemy:
    """Create an enemy at the player's level for the given round."""
    if flavor is None:
        flavor = FALLBACK_ENEMY_FLAVOR
    role = ROLE_STATS[flavor.role]
    scaling = DIFFICULTY_SCALING[settings.difficulty]

    base_hp = int(player_max_hp * 0.8 * settings.enemy_hp_multiplier)
    base_damage = 4 + player_level * 2.5
    base_accuracy = player_level + 3
    base_dex = 10 + player_level

    hp = max(MIN_ENEMY_HP, int(base_hp * role.hp * scaling.hp))
    strength = max(1, int(base_damage * role.damage * scaling.damage) - 2)
    dexterity = int(base_dex + role.accuracy)
    constitution = max(1, (hp - 20) // 5)
    intelligence = 10 + player_level
    if flavor.role == EnemyRole.ASSASSIN:
        intelligence += 5

    tier = encounter_tier(round_number, settings)
    enemy = Enemy(
        name=flavor.name,
        description=flavor.description,
        level=player_level,
        hp=hp,
        max_hp=hp,
        ac=ac_for_dex(dexterity),
        stats=Stats(
            strength=strength,
            dexterity=dexterity,
            intelligence=intelligence,
            constitution=constitution,
        ),
        trait=flavor.trait,
        role=flavor.role,
        difficulty=tier,
        material=flavor.material,
        weakness=primary_weakness(flavor.material),
        resistance=primary_resistance(flavor.material),
        damage_type=flavor.damage_type,
        pierce=role.pierce + scaling.pierce,
        accuracy=base_accuracy + role.accuracy,
    )
    logger.debug(
        f"Built {tier.value} {enemy.name} (round {round_number}): "
        f"HP {hp}, STR {strength}, DEX {dexterity}, AC {enemy.ac}"
    )
    return enemy


def encounter_intro(enemy: Enemy) -> str:
    return f"You encounter a {enemy.name}. {enemy.description}".strip()
