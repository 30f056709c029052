"""Random draws used by the combat rules.

Every helper takes the caller's ``random.Random`` so a seeded or scripted
generator reproduces a whole round.
"""
from __future__ import annotations

import random

D20 = 20
DAMAGE_SPREAD = 0.1


def roll_d20(rng: random.Random | None = None) -> int:
    """The natural face of one d20."""
    return (rng or random).randint(1, D20)


def roll_die(sides: int, rng: random.Random | None = None, low: int = 1) -> int:
    if sides < low:
        raise ValueError(f"Die needs at least {low} face(s), got {sides}")
    return (rng or random).randint(low, sides)


def chance(probability: float, rng: random.Random | None = None) -> bool:
    """True with the given probability. Always consumes one draw."""
    return (rng or random).random() < probability


def damage_variance(amount: int, rng: random.Random | None = None, spread: float = DAMAGE_SPREAD) -> int:
    """Scale ``amount`` by a uniform factor in [1 - spread, 1 + spread], truncated."""
    return int(amount * (rng or random).uniform(1 - spread, 1 + spread))
