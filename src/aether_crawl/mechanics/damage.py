"""Damage pipeline — one attack from roll to HP change.

Pure mechanics, no I/O. The same pipeline serves the player attacking an
enemy and an enemy attacking the player: both sides are first reduced to an
``AttackerProfile`` / ``DefenderProfile`` snapshot.

Order of operations:
    hit check -> raw damage -> MODIFIER_STEPS -> soak -> execute -> shield (skipped by execute)
    -> on-hit statuses -> attacker heals / shield -> thorns
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Callable, Optional

from aether_crawl.mechanics.combat_math import HitCheck, check_hit
from aether_crawl.mechanics.dice import chance, damage_variance
from aether_crawl.mechanics.elements import apply_material, infer_material, material_multiplier, poison_immune
from aether_crawl.mechanics.encounters import enemy_base_soak
from aether_crawl.models.character import Enemy, Player, Stats
from aether_crawl.models.enums import (
    CombatTrait,
    DamageType,
    EnemyTier,
    MaterialType,
    SkillEffect,
)
from aether_crawl.models.skill import Skill
from aether_crawl.models.status import StatusEffects, StatusKind

logger = logging.getLogger(__name__)

BARE_HANDED_DAMAGE = 2
EXECUTE_THRESHOLD = 0.15
EXECUTE_OVERKILL = 10
STUN_TRAIT_CHANCE = 0.15
LIFESTEAL_FRACTION = 0.2
DEFAULT_LEECH_PERCENT = 50
ENERGY_SHIELD_FRACTION = 0.05
THORNS_FRACTION = 0.3
STONESKIN_SOAK = 10
BURN_TURNS = 3
FREEZE_TURNS = 2
SKILL_STUN_TURNS = 1
SKILL_SUNDER_TURNS = 2

_PIERCING_TRAITS = (CombatTrait.ARMOR_PIERCE, CombatTrait.PIERCE)
_POISON_TRAITS = (CombatTrait.POISON,)
_FIRE_TRAITS = (CombatTrait.FIRE, CombatTrait.IGNITE)
_ICE_TRAITS = (CombatTrait.ICE, CombatTrait.FREEZE)


@dataclass
class AttackerProfile:
    name: str
    stats: Stats
    weapon_value: int
    damage_type: DamageType
    hp: int
    max_hp: int
    trait: CombatTrait = CombatTrait.NONE
    pierce: float = 0.0
    skill: Optional[Skill] = None


@dataclass
class DefenderProfile:
    name: str
    dexterity: int
    material: MaterialType
    base_soak: int
    max_hp: int
    trait: CombatTrait = CombatTrait.NONE
    tier: Optional[EnemyTier] = None


# -- Profile builders --

def player_trait(player: Player, skill: Skill | None = None) -> CombatTrait:
    """The cast skill's trait wins over the weapon's."""
    if skill is not None and skill.trait and skill.trait != CombatTrait.NONE:
        return skill.trait
    if player.weapon is not None and player.weapon.trait:
        return player.weapon.trait
    return CombatTrait.NONE


def enemy_weapon_value(level: int) -> int:
    return max(BARE_HANDED_DAMAGE, int(level * 1.5))


def attacker_from_player(player: Player, skill: Skill | None = None) -> AttackerProfile:
    weapon = player.weapon
    if skill is not None:
        damage_type = skill.damage_type or DamageType.MAGIC
    else:
        damage_type = (weapon.damage_type if weapon else None) or DamageType.BLUNT
    return AttackerProfile(
        name=player.name,
        stats=player.stats,
        weapon_value=weapon.value if weapon and weapon.value else BARE_HANDED_DAMAGE,
        damage_type=damage_type,
        hp=player.hp,
        max_hp=player.max_hp,
        trait=player_trait(player, skill),
        skill=skill,
    )


def attacker_from_enemy(enemy: Enemy) -> AttackerProfile:
    return AttackerProfile(
        name=enemy.name,
        stats=enemy.stats,
        weapon_value=enemy_weapon_value(enemy.level),
        damage_type=enemy.damage_type,
        hp=enemy.hp,
        max_hp=enemy.max_hp,
        trait=enemy.trait,
        pierce=enemy.pierce,
    )


def defender_from_player(player: Player, skill: Skill | None = None) -> DefenderProfile:
    armor = player.armor
    return DefenderProfile(
        name=player.name,
        dexterity=player.stats.dexterity,
        material=infer_material(armor.name if armor else None),
        base_soak=armor.value if armor else 0,
        max_hp=player.max_hp,
        trait=player_trait(player, skill),
    )


def defender_from_enemy(enemy: Enemy) -> DefenderProfile:
    return DefenderProfile(
        name=enemy.name,
        dexterity=enemy.stats.dexterity,
        material=enemy.material,
        base_soak=enemy_base_soak(enemy.level, enemy.role, enemy.difficulty),
        max_hp=enemy.max_hp,
        trait=enemy.trait,
        tier=enemy.difficulty,
    )


# -- Raw damage --

def skill_power(stats: Stats, skill: Skill) -> int:
    base = int(stats.get(skill.stat) * skill.damage_scale)
    return base * (50 + stats.intelligence) // 50


def basic_attack_damage(strength: int, weapon_value: int, critical: bool, rng: random.Random) -> int:
    base = weapon_value + strength
    if critical:
        base *= 2
    return damage_variance(base, rng)


# -- Modifier steps --

@dataclass
class DamageContext:
    attacker: AttackerProfile
    defender: DefenderProfile
    attacker_effects: StatusEffects
    defender_effects: StatusEffects
    damage_type: DamageType


ModifierStep = Callable[[DamageContext, int], tuple[int, str]]


def rage_step(ctx: DamageContext, amount: int) -> tuple[int, str]:
    if ctx.attacker_effects.active(StatusKind.RAGED):
        return int(amount * 1.5), "(Rage)"
    return amount, ""


def frozen_step(ctx: DamageContext, amount: int) -> tuple[int, str]:
    if ctx.attacker_effects.active(StatusKind.FROZEN):
        return int(amount * 0.8), "(FrozenWeak)"
    return amount, ""


def berserk_step(ctx: DamageContext, amount: int) -> tuple[int, str]:
    """+1% damage per 1% of missing HP."""
    if ctx.attacker.trait != CombatTrait.BERSERK or ctx.attacker.max_hp <= 0:
        return amount, ""
    bonus = 1 + (1 - ctx.attacker.hp / ctx.attacker.max_hp)
    return int(amount * bonus), f"(Berserk x{bonus:.1f})"


def glass_cannon_step(ctx: DamageContext, amount: int) -> tuple[int, str]:
    if ctx.attacker.trait == CombatTrait.GLASS_CANNON:
        return int(amount * 1.5), "(Glass Cannon)"
    return amount, ""


def material_step(ctx: DamageContext, amount: int) -> tuple[int, str]:
    mult, label = material_multiplier(ctx.defender.material, ctx.damage_type)
    if not label:
        return amount, ""
    scaled = apply_material(amount, ctx.defender.material, ctx.damage_type)
    if label == "WEAK":
        return scaled, f"(Weakness! {mult}x)"
    return scaled, f"(Resisted! {mult}x)"


MODIFIER_STEPS: tuple[ModifierStep, ...] = (
    rage_step,
    frozen_step,
    berserk_step,
    glass_cannon_step,
    material_step,
)


def apply_modifiers(ctx: DamageContext, amount: int) -> tuple[int, list[str]]:
    notes: list[str] = []
    for step in MODIFIER_STEPS:
        amount, note = step(ctx, amount)
        if note:
            notes.append(note)
    return amount, notes


# -- Soak --

def is_piercing_hit(ctx: DamageContext) -> bool:
    return ctx.damage_type == DamageType.PIERCING or ctx.attacker.trait in _PIERCING_TRAITS


def compute_soak(ctx: DamageContext) -> tuple[int, list[str]]:
    """Flat damage reduction for this hit, never negative."""
    notes: list[str] = []
    soak = ctx.defender.base_soak
    if ctx.defender_effects.active(StatusKind.STONESKIN):
        soak += STONESKIN_SOAK
    if ctx.defender_effects.active(StatusKind.SUNDERED):
        soak = int(soak * 0.5)
    if ctx.defender_effects.active(StatusKind.RAGED):
        soak = int(soak * 0.5)
    if ctx.defender.trait == CombatTrait.GLASS_CANNON:
        soak = int(soak * 0.75)
    if is_piercing_hit(ctx):
        soak = int(soak * 0.5)
        notes.append("(Pierce)")
    if ctx.attacker.pierce > 0:
        soak = int(soak * (1 - ctx.attacker.pierce))
    return max(0, soak), notes


# -- Result --

@dataclass
class AttackResult:
    check: HitCheck
    damage: int = 0
    heal: int = 0
    reflected: int = 0
    absorbed: int = 0
    applied_statuses: list[StatusKind] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    @property
    def hit(self) -> bool:
        return self.check.hit

    @property
    def critical(self) -> bool:
        return self.check.critical

    @property
    def dodged(self) -> bool:
        return self.check.dodged

    @property
    def log(self) -> str:
        return " ".join(n for n in self.notes if n)


def _apply_on_hit_statuses(
    ctx: DamageContext,
    result: AttackResult,
    rng: random.Random,
) -> None:
    effects = ctx.defender_effects
    trait = ctx.attacker.trait
    dtype = ctx.damage_type

    if dtype == DamageType.POISON or trait in _POISON_TRAITS:
        if not poison_immune(ctx.defender.material):
            effects.add_stacks(StatusKind.TOXIC, 1)
            result.applied_statuses.append(StatusKind.TOXIC)
            result.notes.append("Toxic!")
    if dtype == DamageType.FIRE or trait in _FIRE_TRAITS:
        effects.set_duration(StatusKind.BURNING, BURN_TURNS)
        result.applied_statuses.append(StatusKind.BURNING)
        result.notes.append("Burn!")
    if dtype == DamageType.ICE or trait in _ICE_TRAITS:
        effects.set_duration(StatusKind.FROZEN, FREEZE_TURNS)
        result.applied_statuses.append(StatusKind.FROZEN)
        result.notes.append("Freeze!")
    if trait == CombatTrait.STUN and chance(STUN_TRAIT_CHANCE, rng):
        effects.set_duration(StatusKind.STUNNED, 1)
        result.applied_statuses.append(StatusKind.STUNNED)
        result.notes.append("(Stun Trait)")


def _apply_skill_effect(skill: Skill, defender_effects: StatusEffects, result: AttackResult) -> None:
    if skill.effect == SkillEffect.STUN:
        defender_effects.extend_duration(StatusKind.STUNNED, skill.effect_value or SKILL_STUN_TURNS)
        result.applied_statuses.append(StatusKind.STUNNED)
        result.notes.append("Stunned!")
    elif skill.effect == SkillEffect.ARMOR_BREAK:
        defender_effects.extend_duration(StatusKind.SUNDERED, skill.effect_value or SKILL_SUNDER_TURNS)
        result.applied_statuses.append(StatusKind.SUNDERED)
        result.notes.append("Sundered!")


def resolve_attack(
    attacker: AttackerProfile,
    defender: DefenderProfile,
    attacker_effects: StatusEffects,
    defender_effects: StatusEffects,
    roll: int,
    rng: random.Random | None = None,
    defender_hp: int | None = None,
) -> AttackResult:
    """Resolve one attack, mutating both effect sets in place.

    ``attacker.skill`` selects the skill formula; without one this is a
    basic weapon attack. ``defender_hp`` enables the Execute trait, which
    needs to know how close the defender is to death.
    """
    rng = rng or random.Random()
    check = check_hit(
        roll,
        attacker.stats.dexterity,
        attacker_effects,
        attacker.trait,
        defender.dexterity,
        defender_effects,
        defender.trait,
        rng,
    )
    result = AttackResult(check=check, notes=[check.describe()])
    if not check.hit:
        result.notes.append("MISS.")
        return result

    ctx = DamageContext(
        attacker=attacker,
        defender=defender,
        attacker_effects=attacker_effects,
        defender_effects=defender_effects,
        damage_type=attacker.damage_type,
    )

    skill = attacker.skill
    if skill is not None:
        raw = skill_power(attacker.stats, skill)
        result.notes.append(f"(Skill: {ctx.damage_type.value})")
        if skill.effect == SkillEffect.HEAL:
            result.heal = skill.effect_value if skill.effect_value > 0 else raw
            result.notes.append(f"Heal: +{result.heal}.")
            return result
        _apply_skill_effect(skill, defender_effects, result)
    else:
        raw = basic_attack_damage(attacker.stats.strength, attacker.weapon_value, check.critical, rng)
        if check.critical:
            result.notes.append("CRIT!")

    if raw <= 0:
        return result

    raw, step_notes = apply_modifiers(ctx, raw)
    result.notes.extend(step_notes)

    soak, soak_notes = compute_soak(ctx)
    result.notes.extend(soak_notes)
    damage = max(1, raw - soak)
    if defender.trait == CombatTrait.GLASS_CANNON:
        damage = int(damage * 1.25)
        result.notes.append("(Glass Cannon Vuln)")
    result.notes.append(f"Hit! {raw} - {soak} (Def) = {damage}.")

    executed = False
    if (
        attacker.trait == CombatTrait.EXECUTE
        and defender_hp is not None
        and defender.tier != EnemyTier.BOSS
        and defender_hp - damage < defender.max_hp * EXECUTE_THRESHOLD
    ):
        damage = defender_hp + EXECUTE_OVERKILL
        result.notes.append("(EXECUTE!)")
        executed = True

    # An executing blow goes straight through temporary HP.
    shield = defender_effects.amount(StatusKind.SHIELD)
    if shield > 0 and not executed:
        absorbed = min(shield, damage)
        defender_effects.set_amount(StatusKind.SHIELD, shield - absorbed)
        damage -= absorbed
        result.absorbed = absorbed
        result.notes.append(f"(Shield absorbs {absorbed})")

    result.damage = damage
    _apply_on_hit_statuses(ctx, result, rng)

    if attacker.trait == CombatTrait.LIFESTEAL:
        drain = math.ceil(damage * LIFESTEAL_FRACTION)
        result.heal += drain
        result.notes.append(f"(Drain +{drain})")
    if skill is not None and skill.effect == SkillEffect.LEECH:
        pct = skill.effect_value or DEFAULT_LEECH_PERCENT
        leech = math.ceil(damage * pct / 100)
        result.heal += leech
        result.notes.append(f"(Leech +{leech})")
    if attacker.trait == CombatTrait.ENERGY_SHIELD:
        granted = math.ceil(attacker.max_hp * ENERGY_SHIELD_FRACTION)
        attacker_effects.add_amount(StatusKind.SHIELD, granted)
        result.notes.append(f"(Shield +{granted})")
    if defender.trait == CombatTrait.THORNS:
        result.reflected = math.ceil(damage * THORNS_FRACTION)
        result.notes.append(f"(Thorns: {attacker.name} takes {result.reflected})")

    logger.debug(f"{attacker.name} -> {defender.name}: {result.log}")
    return result
