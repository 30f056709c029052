"""Accuracy, armor class and hit resolution. Pure functions, no I/O."""
from __future__ import annotations

import random
from dataclasses import dataclass

from aether_crawl.mechanics.dice import D20, chance
from aether_crawl.models.enums import CombatTrait
from aether_crawl.models.status import StatusEffects, StatusKind

EVASION_CHANCE = 0.10
CRIT_TRAIT_CHANCE = 0.20
BLUR_AC_BONUS = 5
RAGE_AC_PENALTY = 5


def effective_dex(dex: int, effects: StatusEffects) -> int:
    """Chilled halves dexterity, frozen zeroes it."""
    if effects.active(StatusKind.FROZEN):
        return 0
    if effects.active(StatusKind.CHILLED):
        return dex // 2
    return dex


def hit_bonus(dex: int, effects: StatusEffects) -> int:
    return effective_dex(dex, effects) // 2


def ac_for_dex(dex: int) -> int:
    return 10 + dex // 2


def defender_ac(dex: int, effects: StatusEffects) -> int:
    ac = ac_for_dex(effective_dex(dex, effects))
    if effects.active(StatusKind.BLUR):
        ac += BLUR_AC_BONUS
    if effects.active(StatusKind.RAGED):
        ac -= RAGE_AC_PENALTY
    return ac


@dataclass
class HitCheck:
    roll: int
    bonus: int
    total: int
    target_ac: int
    hit: bool
    critical: bool
    dodged: bool = False
    focused: bool = False
    trait_crit: bool = False

    def describe(self) -> str:
        parts = []
        if self.dodged:
            parts.append("(Evaded!)")
        if self.focused:
            parts.append("(Focused! Auto-Crit)")
        if self.trait_crit:
            parts.append("(Crit Trait!)")
        parts.append(f"Roll: {self.roll}+{self.bonus}={self.total} vs AC {self.target_ac}.")
        return " ".join(parts)


def check_hit(
    roll: int,
    attacker_dex: int,
    attacker_effects: StatusEffects,
    attacker_trait: CombatTrait,
    defender_dex: int,
    defender_effects: StatusEffects,
    defender_trait: CombatTrait,
    rng: random.Random | None = None,
) -> HitCheck:
    """Decide whether an attack lands and whether it crits.

    Natural 20 always hits and crits; natural 1 misses unless the crit is
    forced by focus or the Critical trait. An attacker's focus is consumed
    by the attempt whether or not it hits. Draws from ``rng`` only for the
    defender's Evasion and the attacker's Critical trait, in that order.
    """
    rng = rng or random.Random()
    if not 1 <= roll <= D20:
        raise ValueError(f"d20 roll out of range: {roll}")

    bonus = hit_bonus(attacker_dex, attacker_effects)
    total = roll + bonus
    if attacker_effects.active(StatusKind.BLINDED):
        total //= 2
    target_ac = defender_ac(defender_dex, defender_effects)

    dodged = defender_trait == CombatTrait.EVASION and chance(EVASION_CHANCE, rng)
    trait_crit = attacker_trait == CombatTrait.CRITICAL and chance(CRIT_TRAIT_CHANCE, rng)

    focused = attacker_effects.flag(StatusKind.FOCUSED)
    if focused:
        attacker_effects.set_flag(StatusKind.FOCUSED, False)

    critical = roll == D20 or focused or trait_crit
    hit = not dodged and (critical or (total >= target_ac and roll != 1))
    return HitCheck(
        roll=roll,
        bonus=bonus,
        total=total,
        target_ac=target_ac,
        hit=hit,
        critical=critical,
        dodged=dodged,
        focused=focused,
        trait_crit=trait_crit,
    )
