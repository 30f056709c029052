"""Tests for src/aether_crawl/mechanics/damage.py."""
from __future__ import annotations

import random

import pytest

from aether_crawl.mechanics.damage import (
    MODIFIER_STEPS,
    AttackerProfile,
    DamageContext,
    DefenderProfile,
    attacker_from_enemy,
    attacker_from_player,
    basic_attack_damage,
    compute_soak,
    defender_from_enemy,
    defender_from_player,
    enemy_weapon_value,
    material_step,
    player_trait,
    resolve_attack,
    skill_power,
)
from aether_crawl.mechanics.elements import apply_material
from aether_crawl.models.character import Stats
from aether_crawl.models.enums import (
    CombatTrait,
    DamageType,
    EnemyTier,
    ItemType,
    MaterialType,
    SkillEffect,
    StatType,
)
from aether_crawl.models.item import Item
from aether_crawl.models.skill import Skill
from aether_crawl.models.status import StatusEffects, StatusKind


def hero(**overrides) -> AttackerProfile:
    """STR 10 / DEX 10 / INT 10 with a value-4 blunt weapon: raw 14 at neutral wobble."""
    fields = dict(
        name="Hero",
        stats=Stats(strength=10, dexterity=10, intelligence=10, constitution=10),
        weapon_value=4,
        damage_type=DamageType.BLUNT,
        hp=50,
        max_hp=50,
    )
    fields.update(overrides)
    return AttackerProfile(**fields)


def rat(**overrides) -> DefenderProfile:
    """AC 12, leather (neutral to blunt), soak 2."""
    fields = dict(name="Rat", dexterity=4, material=MaterialType.LEATHER, base_soak=2, max_hp=30)
    fields.update(overrides)
    return DefenderProfile(**fields)


def attack(attacker=None, defender=None, attacker_effects=None, defender_effects=None,
           roll=15, rng=None, defender_hp=None):
    return resolve_attack(
        attacker or hero(),
        defender or rat(),
        attacker_effects if attacker_effects is not None else StatusEffects(),
        defender_effects if defender_effects is not None else StatusEffects(),
        roll,
        rng,
        defender_hp=defender_hp,
    )


def bolt(**overrides) -> Skill:
    fields = dict(name="Bolt", stat=StatType.STR, damage_scale=1.5,
                  effect=SkillEffect.DAMAGE, damage_type=DamageType.MAGIC)
    fields.update(overrides)
    return Skill(**fields)


class TestBasicAttack:
    def test_reference_hit(self, scripted_rng):
        result = attack(rng=scripted_rng())
        assert result.hit
        assert result.damage == 12
        assert "Hit! 14 - 2 (Def) = 12." in result.log

    def test_wobble_bounds(self):
        for seed in range(30):
            result = attack(rng=random.Random(seed))
            assert 10 <= result.damage <= 13

    def test_low_wobble(self, scripted_rng):
        assert attack(rng=scripted_rng(uniform=0.9)).damage == 10

    def test_crit_doubles_base(self, scripted_rng):
        result = attack(roll=20, rng=scripted_rng())
        assert result.critical
        assert result.damage == 26
        assert "CRIT!" in result.log

    def test_miss_deals_nothing(self, scripted_rng):
        defender_effects = StatusEffects()
        result = attack(attacker=hero(damage_type=DamageType.FIRE), defender_effects=defender_effects,
                        roll=1, rng=scripted_rng())
        assert not result.hit
        assert result.damage == 0
        assert "MISS." in result.log
        assert defender_effects.is_empty()

    def test_damage_floor_is_one(self, scripted_rng):
        assert attack(defender=rat(base_soak=100), rng=scripted_rng()).damage == 1

    def test_basic_attack_damage(self, scripted_rng):
        assert basic_attack_damage(10, 4, True, scripted_rng()) == 28
        assert basic_attack_damage(10, 4, False, scripted_rng(uniform=1.1)) == 15


class TestModifierSteps:
    def test_step_order(self):
        assert [s.__name__ for s in MODIFIER_STEPS] == [
            "rage_step", "frozen_step", "berserk_step", "glass_cannon_step", "material_step",
        ]

    def test_weakness(self, scripted_rng):
        result = attack(defender=rat(material=MaterialType.PLATE, base_soak=0), rng=scripted_rng())
        assert result.damage == 21
        assert "(Weakness! 1.5x)" in result.log

    def test_resistance(self, scripted_rng):
        result = attack(defender=rat(material=MaterialType.FLESH), rng=scripted_rng())
        assert result.damage == 5
        assert "(Resisted! 0.5x)" in result.log

    @pytest.mark.parametrize("material, dtype", [
        (MaterialType.PLATE, DamageType.BLUNT),
        (MaterialType.FLESH, DamageType.BLUNT),
        (MaterialType.FLESH, DamageType.SLASHING),
        (MaterialType.LEATHER, DamageType.MAGIC),
    ])
    def test_material_step_matches_matrix(self, material, dtype):
        ctx = DamageContext(
            attacker=hero(), defender=rat(material=material),
            attacker_effects=StatusEffects(), defender_effects=StatusEffects(),
            damage_type=dtype,
        )
        amount, _ = material_step(ctx, 15)
        assert amount == apply_material(15, material, dtype)

    def test_rage(self, scripted_rng):
        effects = StatusEffects.from_dict({"raged": 2})
        assert attack(attacker_effects=effects, rng=scripted_rng()).damage == 19

    def test_frozen_attacker(self, scripted_rng):
        # Frozen also zeroes DEX: 15 + 0 still beats AC 12.
        effects = StatusEffects.from_dict({"frozen": 1})
        assert attack(attacker_effects=effects, rng=scripted_rng()).damage == 9

    def test_berserk(self, scripted_rng):
        result = attack(attacker=hero(trait=CombatTrait.BERSERK, hp=25), rng=scripted_rng())
        assert result.damage == 19
        assert "(Berserk x1.5)" in result.log

    def test_berserk_at_full_hp(self, scripted_rng):
        assert attack(attacker=hero(trait=CombatTrait.BERSERK), rng=scripted_rng()).damage == 12

    def test_glass_cannon_attacker(self, scripted_rng):
        assert attack(attacker=hero(trait=CombatTrait.GLASS_CANNON), rng=scripted_rng()).damage == 19

    def test_glass_cannon_defender(self, scripted_rng):
        result = attack(defender=rat(trait=CombatTrait.GLASS_CANNON, base_soak=4), rng=scripted_rng())
        assert result.damage == 13
        assert "(Glass Cannon Vuln)" in result.log


class TestSoak:
    def _ctx(self, attacker=None, defender=None, defender_status=None, damage_type=DamageType.BLUNT):
        attacker = attacker or hero()
        return DamageContext(
            attacker=attacker,
            defender=defender or rat(base_soak=10),
            attacker_effects=StatusEffects(),
            defender_effects=StatusEffects.from_dict(defender_status or {}),
            damage_type=damage_type,
        )

    @pytest.mark.parametrize("status, expected", [
        ({}, 10),
        ({"stoneskin": 1}, 20),
        ({"sundered": 2}, 5),
        ({"raged": 1}, 5),
        ({"stoneskin": 1, "sundered": 1}, 10),
    ])
    def test_status_soak(self, status, expected):
        assert compute_soak(self._ctx(defender_status=status))[0] == expected

    def test_glass_cannon_defender_soak(self):
        ctx = self._ctx(defender=rat(base_soak=10, trait=CombatTrait.GLASS_CANNON))
        assert compute_soak(ctx)[0] == 7

    @pytest.mark.parametrize("trait", [CombatTrait.ARMOR_PIERCE, CombatTrait.PIERCE])
    def test_piercing_trait(self, trait):
        soak, notes = compute_soak(self._ctx(attacker=hero(trait=trait)))
        assert soak == 5
        assert notes == ["(Pierce)"]

    def test_piercing_damage_type(self):
        assert compute_soak(self._ctx(damage_type=DamageType.PIERCING))[0] == 5

    @pytest.mark.parametrize("pierce, expected", [(0.25, 7), (0.5, 5), (1.0, 0)])
    def test_attacker_pierce(self, pierce, expected):
        assert compute_soak(self._ctx(attacker=hero(pierce=pierce)))[0] == expected

    def test_never_negative(self):
        assert compute_soak(self._ctx(defender=rat(base_soak=0)))[0] == 0


class TestExecuteAndShield:
    def test_execute_finishes_low_target(self, scripted_rng):
        result = attack(attacker=hero(trait=CombatTrait.EXECUTE), defender=rat(max_hp=100),
                        defender_hp=5, rng=scripted_rng())
        assert result.damage == 15
        assert "(EXECUTE!)" in result.log

    def test_execute_ignores_healthy_target(self, scripted_rng):
        result = attack(attacker=hero(trait=CombatTrait.EXECUTE), defender=rat(max_hp=100),
                        defender_hp=50, rng=scripted_rng())
        assert result.damage == 12

    def test_execute_never_on_boss(self, scripted_rng):
        result = attack(attacker=hero(trait=CombatTrait.EXECUTE),
                        defender=rat(max_hp=100, tier=EnemyTier.BOSS),
                        defender_hp=5, rng=scripted_rng())
        assert result.damage == 12

    def test_execute_needs_hp(self, scripted_rng):
        result = attack(attacker=hero(trait=CombatTrait.EXECUTE), defender=rat(max_hp=100), rng=scripted_rng())
        assert result.damage == 12

    def test_shield_partially_absorbs(self, scripted_rng):
        effects = StatusEffects.from_dict({"shield": 5})
        result = attack(defender_effects=effects, rng=scripted_rng())
        assert result.damage == 7
        assert result.absorbed == 5
        assert effects.amount(StatusKind.SHIELD) == 0

    def test_shield_fully_absorbs(self, scripted_rng):
        effects = StatusEffects.from_dict({"shield": 20})
        result = attack(defender_effects=effects, rng=scripted_rng())
        assert result.damage == 0
        assert effects.amount(StatusKind.SHIELD) == 8

    def test_execute_goes_through_shield(self, scripted_rng):
        effects = StatusEffects.from_dict({"shield": 15})
        result = attack(attacker=hero(trait=CombatTrait.EXECUTE), defender=rat(max_hp=100),
                        defender_effects=effects, defender_hp=5, rng=scripted_rng())
        assert result.damage == 15
        assert result.damage > 5
        assert result.absorbed == 0
        assert effects.amount(StatusKind.SHIELD) == 15


class TestOnHitEffects:
    def test_poison_damage_type(self, scripted_rng):
        effects = StatusEffects()
        result = attack(attacker=hero(damage_type=DamageType.POISON), defender_effects=effects, rng=scripted_rng())
        assert effects.stacks(StatusKind.TOXIC) == 1
        assert StatusKind.TOXIC in result.applied_statuses

    @pytest.mark.parametrize("material", [MaterialType.BONE, MaterialType.SPIRIT])
    def test_poison_immune_materials(self, material, scripted_rng):
        effects = StatusEffects()
        attack(attacker=hero(trait=CombatTrait.POISON), defender=rat(material=material),
               defender_effects=effects, rng=scripted_rng())
        assert effects.stacks(StatusKind.TOXIC) == 0

    def test_poison_stacks_accumulate(self, scripted_rng):
        effects = StatusEffects.from_dict({"toxic": 2})
        attack(attacker=hero(trait=CombatTrait.POISON), defender_effects=effects, rng=scripted_rng())
        assert effects.stacks(StatusKind.TOXIC) == 3

    @pytest.mark.parametrize("attacker_kwargs", [
        {"damage_type": DamageType.FIRE},
        {"trait": CombatTrait.FIRE},
        {"trait": CombatTrait.IGNITE},
    ])
    def test_burn(self, attacker_kwargs, scripted_rng):
        effects = StatusEffects()
        attack(attacker=hero(**attacker_kwargs), defender_effects=effects, rng=scripted_rng())
        assert effects.duration(StatusKind.BURNING) == 3

    @pytest.mark.parametrize("attacker_kwargs", [
        {"damage_type": DamageType.ICE},
        {"trait": CombatTrait.ICE},
        {"trait": CombatTrait.FREEZE},
    ])
    def test_freeze(self, attacker_kwargs, scripted_rng):
        effects = StatusEffects()
        attack(attacker=hero(**attacker_kwargs), defender_effects=effects, rng=scripted_rng())
        assert effects.duration(StatusKind.FROZEN) == 2

    @pytest.mark.parametrize("draw, stunned", [(0.1, True), (0.5, False)])
    def test_stun_trait(self, draw, stunned, scripted_rng):
        effects = StatusEffects()
        attack(attacker=hero(trait=CombatTrait.STUN), defender_effects=effects,
               rng=scripted_rng(randoms=[draw]))
        assert effects.active(StatusKind.STUNNED) is stunned

    def test_lifesteal(self, scripted_rng):
        result = attack(attacker=hero(trait=CombatTrait.LIFESTEAL), rng=scripted_rng())
        assert result.heal == 3

    def test_energy_shield(self, scripted_rng):
        effects = StatusEffects()
        attack(attacker=hero(trait=CombatTrait.ENERGY_SHIELD), attacker_effects=effects, rng=scripted_rng())
        assert effects.amount(StatusKind.SHIELD) == 3

    def test_thorns(self, scripted_rng):
        result = attack(defender=rat(trait=CombatTrait.THORNS), rng=scripted_rng())
        assert result.damage == 12
        assert result.reflected == 4


class TestSkills:
    def test_skill_power(self):
        stats = Stats(strength=10, intelligence=10)
        assert skill_power(stats, bolt()) == 18

    def test_skill_power_uses_skill_stat(self):
        stats = Stats(strength=10, dexterity=20, intelligence=0)
        assert skill_power(stats, bolt(stat=StatType.DEX)) == 30

    def test_damage_skill(self, scripted_rng):
        result = attack(attacker=hero(skill=bolt(), damage_type=DamageType.MAGIC), rng=scripted_rng())
        assert result.damage == 16
        assert "(Skill: MAGIC)" in result.log

    def test_skill_ignores_crit_doubling(self, scripted_rng):
        result = attack(attacker=hero(skill=bolt(), damage_type=DamageType.MAGIC), roll=20, rng=scripted_rng())
        assert result.damage == 16

    @pytest.mark.parametrize("effect_value, heal", [(0, 18), (7, 7)])
    def test_heal_skill(self, effect_value, heal, scripted_rng):
        skill = bolt(effect=SkillEffect.HEAL, effect_value=effect_value)
        result = attack(attacker=hero(skill=skill), rng=scripted_rng())
        assert result.heal == heal
        assert result.damage == 0

    def test_heal_skill_can_miss(self, scripted_rng):
        result = attack(attacker=hero(skill=bolt(effect=SkillEffect.HEAL)), roll=1, rng=scripted_rng())
        assert result.heal == 0

    @pytest.mark.parametrize("effect_value, heal", [(0, 8), (25, 4)])
    def test_leech_skill(self, effect_value, heal, scripted_rng):
        skill = bolt(effect=SkillEffect.LEECH, effect_value=effect_value)
        result = attack(attacker=hero(skill=skill, damage_type=DamageType.MAGIC), rng=scripted_rng())
        assert result.damage == 16
        assert result.heal == heal

    @pytest.mark.parametrize("effect_value, turns", [(0, 1), (3, 3)])
    def test_stun_skill(self, effect_value, turns, scripted_rng):
        effects = StatusEffects()
        skill = bolt(effect=SkillEffect.STUN, effect_value=effect_value)
        attack(attacker=hero(skill=skill), defender_effects=effects, rng=scripted_rng())
        assert effects.duration(StatusKind.STUNNED) == turns

    def test_armor_break_skill(self, scripted_rng):
        effects = StatusEffects()
        attack(attacker=hero(skill=bolt(effect=SkillEffect.ARMOR_BREAK)), defender_effects=effects,
               rng=scripted_rng())
        assert effects.duration(StatusKind.SUNDERED) == 2


class TestProfiles:
    def test_attacker_from_player(self, warrior):
        profile = attacker_from_player(warrior)
        assert profile.weapon_value == 4
        assert profile.damage_type == DamageType.BLUNT
        assert profile.max_hp == 90
        assert profile.skill is None

    def test_bare_handed(self, warrior):
        warrior.weapon = None
        profile = attacker_from_player(warrior)
        assert profile.weapon_value == 2
        assert profile.damage_type == DamageType.BLUNT

    def test_untyped_skill_is_magic(self, warrior):
        skill = Skill(name="Spark")
        assert attacker_from_player(warrior, skill).damage_type == DamageType.MAGIC

    def test_skill_trait_beats_weapon_trait(self, warrior):
        warrior.weapon.trait = CombatTrait.FIRE
        assert player_trait(warrior) == CombatTrait.FIRE
        assert player_trait(warrior, Skill(name="Frost", trait=CombatTrait.ICE)) == CombatTrait.ICE
        assert player_trait(warrior, Skill(name="Plain", trait=CombatTrait.NONE)) == CombatTrait.FIRE

    def test_defender_from_player(self, warrior):
        profile = defender_from_player(warrior)
        assert profile.material == MaterialType.FLESH
        assert profile.base_soak == 1
        warrior.armor = Item(name="Iron Mail", item_type=ItemType.ARMOR, value=5)
        profile = defender_from_player(warrior)
        assert profile.material == MaterialType.PLATE
        assert profile.base_soak == 5

    def test_enemy_profiles(self, glitch_enemy):
        attacker = attacker_from_enemy(glitch_enemy)
        assert attacker.weapon_value == 2
        assert attacker.damage_type == DamageType.MAGIC
        defender = defender_from_enemy(glitch_enemy)
        assert defender.base_soak == 1
        assert defender.tier == EnemyTier.MINION

    @pytest.mark.parametrize("level, value", [(1, 2), (2, 3), (4, 6), (10, 15)])
    def test_enemy_weapon_value(self, level, value):
        assert enemy_weapon_value(level) == value
