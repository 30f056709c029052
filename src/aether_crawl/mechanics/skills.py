"""Skill loadout and cooldown rules."""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from aether_crawl.models.character import Player
from aether_crawl.models.enums import DamageType, SkillEffect, StatType
from aether_crawl.models.skill import Skill

logger = logging.getLogger(__name__)

MAX_ACTIVE_SKILLS = 5
SKILL_OPTION_COUNT = 3
DEFAULT_SKILL_SCALE = 1.5
DEFAULT_SKILL_COOLDOWN = 3
DEFAULT_SKILL_COST = 100


def _require_skill(player: Player, skill_id: str) -> Skill:
    skill = player.find_skill(skill_id)
    if skill is None:
        raise ValueError(f"{player.name} does not know skill {skill_id}")
    return skill


def toggle_skill(player: Player, skill_id: str) -> bool:
    """Flip a skill between active and inactive. Returns the new state.

    At most five skills can be active; activating a sixth raises ValueError.
    """
    skill = _require_skill(player, skill_id)
    if not skill.is_active and len(player.active_skills) >= MAX_ACTIVE_SKILLS:
        raise ValueError(f"Max {MAX_ACTIVE_SKILLS} active skills!")
    skill.is_active = not skill.is_active
    return skill.is_active


def learn_skill(player: Player, skill: Skill) -> Skill:
    if player.find_skill(skill.id) is not None:
        raise ValueError(f"{player.name} already knows {skill.name}")
    player.skills.append(skill)
    logger.info(f"{player.name} learned {skill.name}")
    return skill


def forget_cost(player: Player, skill: Skill) -> int:
    return skill.cost or player.level * 100


def forget_skill(player: Player, skill_id: str) -> int:
    """Pay to unlearn a skill. Returns the gold spent."""
    skill = _require_skill(player, skill_id)
    cost = forget_cost(player, skill)
    if player.gold < cost:
        raise ValueError(f"Not enough gold to forget skill! Need {cost}.")
    player.gold -= cost
    player.skills = [s for s in player.skills if s.id != skill_id]
    return cost


def start_cooldown(skill: Skill) -> None:
    skill.current_cooldown = skill.cooldown


def tick_cooldowns(skills: Iterable[Skill], shocked: bool = False) -> None:
    """End-of-round cooldown recovery; a shocked player recovers nothing."""
    if shocked:
        return
    for skill in skills:
        skill.current_cooldown = max(0, skill.current_cooldown - 1)


def skill_option(
    stat: StatType,
    name: str,
    description: str = "",
    effect: Optional[SkillEffect] = None,
    effect_value: int = 0,
    damage_type: Optional[DamageType] = None,
) -> Skill:
    """A freshly offered level-up skill: inactive, standard scale and cooldown."""
    return Skill(
        name=name,
        description=description,
        stat=stat,
        damage_scale=DEFAULT_SKILL_SCALE,
        cooldown=DEFAULT_SKILL_COOLDOWN,
        effect=effect or SkillEffect.DAMAGE,
        effect_value=effect_value or 0,
        damage_type=damage_type or DamageType.MAGIC,
        cost=DEFAULT_SKILL_COST,
        is_active=False,
    )


def fallback_skill_options(stat: StatType, count: int = SKILL_OPTION_COUNT) -> list[Skill]:
    return [
        skill_option(stat, name=f"Skill {i + 1}", description="A basic skill.")
        for i in range(count)
    ]
