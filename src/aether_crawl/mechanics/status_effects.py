"""Start-of-turn status effect processing. Pure mechanics, no I/O."""
from __future__ import annotations

import math
from dataclasses import dataclass, field

from aether_crawl.models.status import StatusEffects, StatusKind

# Plain countdowns, decremented after the damage-over-time effects.
DECAYING: tuple[StatusKind, ...] = (
    StatusKind.FROZEN,
    StatusKind.BLEEDING,
    StatusKind.CHILLED,
    StatusKind.SHOCKED,
    StatusKind.SUNDERED,
    StatusKind.BLINDED,
    StatusKind.STONESKIN,
    StatusKind.BLUR,
    StatusKind.RAGED,
    StatusKind.STUNNED,
)

REGEN_HEAL = 2
REGEN_CON_THRESHOLD = 20


@dataclass
class TickResult:
    damage: int = 0
    heal: int = 0
    entries: list[str] = field(default_factory=list)

    @property
    def log(self) -> str:
        return " ".join(self.entries)


def toxic_damage(stacks: int) -> int:
    return 5 + 5 * stacks if stacks > 0 else 0


def burn_damage(max_hp: int) -> int:
    return max(1, math.ceil(max_hp * 0.10))


def tick(effects: StatusEffects, is_player: bool, max_hp: int, con_stat: int = 10) -> TickResult:
    """Advance ``effects`` by one turn in place and report damage/heal.

    Toxic escalates and never decays; burning cancels regeneration; the
    shield always expires.
    """
    result = TickResult()

    stacks = effects.stacks(StatusKind.TOXIC)
    if stacks > 0:
        dmg = toxic_damage(stacks)
        result.damage += dmg
        result.entries.append(f"(Toxic: -{dmg} HP)")
        effects.add_stacks(StatusKind.TOXIC, 1)

    if effects.duration(StatusKind.BURNING) > 0:
        dmg = burn_damage(max_hp)
        result.damage += dmg
        result.entries.append(f"(Burn: -{dmg} HP)")
        effects.decrement(StatusKind.BURNING)
        if effects.active(StatusKind.REGEN):
            effects.clear(StatusKind.REGEN)
            result.entries.append("(Regen cancelled by fire)")

    if effects.duration(StatusKind.REGEN) > 0:
        heal = REGEN_HEAL
        if is_player and con_stat >= REGEN_CON_THRESHOLD:
            heal += 1
        result.heal += heal
        result.entries.append(f"(Regen: +{heal} HP)")
        effects.decrement(StatusKind.REGEN)

    for kind in DECAYING:
        effects.decrement(kind)

    effects.clear(StatusKind.SHIELD)
    return result
