from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from aether_crawl.models.character import Enemy
from aether_crawl.models.item import Item
from aether_crawl.models.skill import Skill
from aether_crawl.models.status import StatusEffects


class ActionType(str, Enum):
    ATTACK = "attack"
    SKILL = "skill"


class TurnPhase(str, Enum):
    TICK = "TICK"
    PLAYER_ACTION = "PLAYER_ACTION"
    BLEED_CHECK = "BLEED_CHECK"
    ENEMY_ACTION = "ENEMY_ACTION"
    AGGREGATE = "AGGREGATE"
    DEFEATED = "DEFEATED"
    CONTINUE = "CONTINUE"


class PlayerAction(BaseModel):
    action_type: ActionType = ActionType.ATTACK
    skill_id: Optional[str] = None

    @classmethod
    def attack(cls) -> PlayerAction:
        return cls(action_type=ActionType.ATTACK)

    @classmethod
    def use_skill(cls, skill_id: str) -> PlayerAction:
        return cls(action_type=ActionType.SKILL, skill_id=skill_id)


class TurnOutcome(BaseModel):
    """Everything one resolved round hands back to the caller.

    ``damage_to_player`` / ``damage_to_enemy`` are net values for the round
    (damage minus healing) and go negative when a side healed more than it
    lost. ``player_hit`` / ``enemy_hit`` are the single-hit damages the
    narration talks about.
    """

    model_config = ConfigDict(from_attributes=True)

    action_description: str = ""
    narrative: str = ""
    mechanics: str = ""
    damage_to_player: int = 0
    damage_to_enemy: int = 0
    player_hit: int = 0
    enemy_hit: int = 0
    enemy_defeated: bool = False
    xp_gained: int = 0
    gold_gained: int = 0
    player_hp: int = 0
    enemy_state: Optional[Enemy] = None
    player_status: StatusEffects = Field(default_factory=StatusEffects)
    skills: list[Skill] = Field(default_factory=list)
    loot: list[Item] = Field(default_factory=list)
    phases: list[TurnPhase] = Field(default_factory=list)
