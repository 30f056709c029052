"""Tests for src/aether_crawl/mechanics/encounters.py."""
from __future__ import annotations

import pytest

from aether_crawl.config import GameSettings
from aether_crawl.mechanics.encounters import (
    FALLBACK_ENEMY_FLAVOR,
    MIN_ENEMY_HP,
    ROLE_STATS,
    build_enemy,
    encounter_intro,
    encounter_tier,
    enemy_base_soak,
)
from aether_crawl.models.enums import (
    DamageType,
    Difficulty,
    EnemyRole,
    EnemyTier,
    MaterialType,
)
from aether_crawl.models.llm_contract import EnemyFlavor


def flavor(role: EnemyRole, material: MaterialType = MaterialType.FLESH) -> EnemyFlavor:
    return EnemyFlavor(name=f"Test {role.value}", role=role, material=material)


class TestEncounterTier:
    @pytest.mark.parametrize("round_number, difficulty, expected", [
        (1, Difficulty.NORMAL, EnemyTier.MINION),
        (5, Difficulty.EASY, EnemyTier.MINION),
        (1, Difficulty.HARD, EnemyTier.ELITE),
        (5, Difficulty.HARD, EnemyTier.ELITE),
        (6, Difficulty.NORMAL, EnemyTier.BOSS),
        (6, Difficulty.HARD, EnemyTier.BOSS),
        (9, Difficulty.EXTREME, EnemyTier.BOSS),
    ])
    def test_tier(self, round_number, difficulty, expected):
        assert encounter_tier(round_number, GameSettings(difficulty=difficulty)) == expected

    def test_boss_follows_max_rounds(self):
        settings = GameSettings(max_rounds=3)
        assert encounter_tier(2, settings) == EnemyTier.MINION
        assert encounter_tier(3, settings) == EnemyTier.BOSS


class TestBuildEnemy:
    def test_reference_minion(self, glitch_enemy):
        enemy = glitch_enemy
        assert enemy.name == "Glitch Entity"
        assert enemy.hp == enemy.max_hp == 72
        assert enemy.stats.strength == 4
        assert enemy.stats.dexterity == 11
        assert enemy.stats.constitution == 10
        assert enemy.stats.intelligence == 11
        assert enemy.ac == 15
        assert enemy.accuracy == 4
        assert enemy.pierce == 0.0
        assert enemy.difficulty == EnemyTier.MINION
        assert enemy.weakness == DamageType.SLASHING
        assert enemy.resistance == DamageType.BLUNT

    def test_none_flavor_uses_placeholder(self, settings):
        enemy = build_enemy(None, 1, 1, 90, settings)
        assert enemy.name == FALLBACK_ENEMY_FLAVOR.name
        assert enemy.damage_type == DamageType.MAGIC

    def test_hard_tank(self):
        enemy = build_enemy(flavor(EnemyRole.TANK), 1, 1, 90, GameSettings(difficulty=Difficulty.HARD))
        assert enemy.max_hp == 140
        assert enemy.stats.strength == 4
        assert enemy.stats.dexterity == 10
        assert enemy.ac == 15
        assert enemy.pierce == pytest.approx(0.25)
        assert enemy.difficulty == EnemyTier.ELITE

    def test_assassin(self, settings):
        enemy = build_enemy(flavor(EnemyRole.ASSASSIN), 1, 1, 90, settings)
        assert enemy.stats.intelligence == 16
        assert enemy.pierce == pytest.approx(0.3)
        assert enemy.accuracy == 6

    def test_minimum_hp(self, settings):
        enemy = build_enemy(flavor(EnemyRole.SWARM), 1, 1, 10, settings)
        assert enemy.max_hp == MIN_ENEMY_HP
        assert enemy.stats.constitution == 1

    def test_hp_multiplier(self):
        enemy = build_enemy(flavor(EnemyRole.BALANCED), 1, 1, 90, GameSettings(enemy_hp_multiplier=2.0))
        assert enemy.max_hp == 144

    def test_level_scaling(self, settings):
        enemy = build_enemy(flavor(EnemyRole.BALANCED), 1, 5, 100, settings)
        assert enemy.level == 5
        assert enemy.stats.strength == 14
        assert enemy.stats.dexterity == 15
        assert enemy.stats.intelligence == 15
        assert enemy.max_hp == 80

    def test_material_sets_weakness(self, settings):
        enemy = build_enemy(flavor(EnemyRole.BALANCED, MaterialType.SPIRIT), 1, 1, 90, settings)
        assert enemy.weakness == DamageType.MAGIC
        assert enemy.resistance == DamageType.SLASHING

    @pytest.mark.parametrize("role", list(EnemyRole))
    def test_every_role_builds(self, role, settings):
        enemy = build_enemy(flavor(role), 6, 3, 110, settings)
        assert enemy.difficulty == EnemyTier.BOSS
        assert enemy.max_hp >= MIN_ENEMY_HP
        assert enemy.stats.strength >= 1


class TestSoakAndTables:
    @pytest.mark.parametrize("level, role, tier, expected", [
        (1, EnemyRole.BALANCED, EnemyTier.MINION, 1),
        (4, EnemyRole.TANK, EnemyTier.BOSS, 11),
        (3, EnemyRole.SWARM, EnemyTier.ELITE, 3),
    ])
    def test_base_soak(self, level, role, tier, expected):
        assert enemy_base_soak(level, role, tier) == expected

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            ROLE_STATS[EnemyRole.TANK] = ROLE_STATS[EnemyRole.SWARM]

    def test_intro(self, glitch_enemy):
        assert encounter_intro(glitch_enemy) == (
            "You encounter a Glitch Entity. A distorted figure formed from corrupted data."
        )
