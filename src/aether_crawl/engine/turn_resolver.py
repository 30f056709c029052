"""Turn resolver — runs one full combat round.

TICK -> PLAYER_ACTION -> BLEED_CHECK -> ENEMY_ACTION -> AGGREGATE
     -> DEFEATED | CONTINUE

The resolver works on deep copies of the player and enemy, so callers keep
their own objects untouched and apply the returned ``TurnOutcome``.
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from aether_crawl.config import GameSettings
from aether_crawl.mechanics.damage import (
    AttackResult,
    attacker_from_enemy,
    attacker_from_player,
    defender_from_enemy,
    defender_from_player,
    player_trait,
    resolve_attack,
)
from aether_crawl.mechanics.dice import D20, chance, roll_d20
from aether_crawl.mechanics.leveling import defeat_rewards, scale_rewards
from aether_crawl.mechanics.loot import LootRoll, loot_drop_chance, mint_item, roll_loot
from aether_crawl.mechanics.skills import start_cooldown, tick_cooldowns
from aether_crawl.mechanics.status_effects import TickResult, tick
from aether_crawl.models.character import Enemy, Player
from aether_crawl.models.combat import ActionType, PlayerAction, TurnOutcome, TurnPhase
from aether_crawl.models.skill import Skill
from aether_crawl.models.status import StatusEffects, StatusKind

if TYPE_CHECKING:
    from aether_crawl.llm.narrator import Narrator

logger = logging.getLogger(__name__)

BLEED_FRACTION = 0.05
NARRATION_FAILED = " (AI Narrative Failed)"


class InvalidCombatState(ValueError):
    """The requested round cannot be resolved from the given state."""


def bleed_damage(max_hp: int) -> int:
    return math.ceil(max_hp * BLEED_FRACTION)


def describe_action(player: Player, skill: Skill | None) -> str:
    if skill is not None:
        return f"use {skill.name}"
    weapon = player.weapon.name if player.weapon else "fists"
    return f"attack with {weapon}"


def fallback_narrative(action: str, damage_dealt: int, damage_taken: int) -> str:
    return f"You {action}. You deal {damage_dealt} damage. The enemy deals {damage_taken} damage."


@dataclass
class _Round:
    """Scratch state accumulated while a round is being resolved."""

    player: Player
    enemy: Enemy
    skill: Optional[Skill]
    player_tick: TickResult = field(default_factory=TickResult)
    enemy_tick: TickResult = field(default_factory=TickResult)
    player_attack: Optional[AttackResult] = None
    enemy_attack: Optional[AttackResult] = None
    player_bleed: int = 0
    enemy_bleed: int = 0
    loot_roll: Optional[LootRoll] = None
    log: list[str] = field(default_factory=list)
    phases: list[TurnPhase] = field(default_factory=list)

    def player_damage_taken(self) -> int:
        dmg = self.player_tick.damage + self.player_bleed
        if self.enemy_attack:
            dmg += self.enemy_attack.damage
        if self.player_attack:
            dmg += self.player_attack.reflected
        return dmg

    def player_healed(self) -> int:
        heal = self.player_tick.heal
        if self.player_attack:
            heal += self.player_attack.heal
        return heal

    def enemy_damage_taken(self) -> int:
        dmg = self.enemy_tick.damage + self.enemy_bleed
        if self.player_attack:
            dmg += self.player_attack.damage
        if self.enemy_attack:
            dmg += self.enemy_attack.reflected
        return dmg

    def enemy_healed(self) -> int:
        heal = self.enemy_tick.heal
        if self.enemy_attack:
            heal += self.enemy_attack.heal
        return heal

    def tentative_enemy_hp(self) -> int:
        return self.enemy.hp - self.enemy_damage_taken() + self.enemy_healed()

    def tentative_player_hp(self) -> int:
        return self.player.hp - self.player_damage_taken() + self.player_healed()


class TurnResolver:
    """Resolves combat rounds against a fixed set of game settings.

    Every random draw except the player's own d20 comes from ``rng``. The
    optional ``narrator`` turns the mechanical outcome into prose; without
    one the plain templated narrative is used.
    """

    def __init__(
        self,
        settings: GameSettings | None = None,
        rng: random.Random | None = None,
        narrator: Narrator | None = None,
    ) -> None:
        self.settings = settings or GameSettings()
        self.rng = rng or random.Random()
        self.narrator = narrator

    def resolve(
        self,
        player: Player,
        enemy: Enemy | None,
        action: PlayerAction,
        roll: int,
    ) -> TurnOutcome:
        if enemy is None:
            raise InvalidCombatState("No enemy to fight!")
        if not 1 <= roll <= D20:
            raise InvalidCombatState(f"d20 roll out of range: {roll}")

        player = player.model_copy(deep=True)
        enemy = enemy.model_copy(deep=True)
        skill = self._select_skill(player, action)
        state = _Round(player=player, enemy=enemy, skill=skill)

        self._tick_phase(state)
        self._player_phase(state, roll)
        self._bleed_phase(state)
        self._enemy_phase(state)
        outcome = self._aggregate_phase(state)
        self._narrate(state, outcome)
        logger.debug(f"Round resolved: {outcome.mechanics}")
        return outcome

    # -- Phases --

    def _select_skill(self, player: Player, action: PlayerAction) -> Skill | None:
        if action.action_type != ActionType.SKILL:
            return None
        if not action.skill_id:
            raise InvalidCombatState("Skill action without a skill id")
        skill = player.find_skill(action.skill_id)
        if skill is None:
            raise InvalidCombatState(f"Unknown skill: {action.skill_id}")
        if not skill.is_active:
            raise InvalidCombatState(f"{skill.name} is not an active skill")
        if not skill.ready:
            raise InvalidCombatState(f"{skill.name} is on cooldown ({skill.current_cooldown} turns)")
        start_cooldown(skill)
        return skill

    def _tick_phase(self, state: _Round) -> None:
        state.phases.append(TurnPhase.TICK)
        player, enemy = state.player, state.enemy
        state.player_tick = tick(player.status, True, player.max_hp, player.stats.constitution)
        state.enemy_tick = tick(enemy.status, False, enemy.max_hp, enemy.stats.constitution)
        if state.player_tick.entries:
            state.log.append(f"[Player]: {state.player_tick.log}")
        if state.enemy_tick.entries:
            state.log.append(f"[Enemy]: {state.enemy_tick.log}")

    def _player_phase(self, state: _Round, roll: int) -> None:
        state.phases.append(TurnPhase.PLAYER_ACTION)
        player, enemy = state.player, state.enemy
        if player.status.active(StatusKind.STUNNED):
            state.log.append("You are Stunned! Turn skipped.")
            return

        if player.status.active(StatusKind.BLEEDING):
            state.player_bleed = bleed_damage(player.max_hp)
            state.log.append(f"(Bleed: You take {state.player_bleed})")

        state.player_attack = resolve_attack(
            attacker_from_player(player, state.skill),
            defender_from_enemy(enemy),
            player.status,
            enemy.status,
            roll,
            self.rng,
            defender_hp=state.tentative_enemy_hp(),
        )
        state.log.append(state.player_attack.log)

    def _bleed_phase(self, state: _Round) -> None:
        state.phases.append(TurnPhase.BLEED_CHECK)
        enemy = state.enemy
        if state.tentative_enemy_hp() <= 0 or enemy.status.active(StatusKind.STUNNED):
            return
        if enemy.status.active(StatusKind.BLEEDING):
            state.enemy_bleed = bleed_damage(enemy.max_hp)
            state.log.append(f"(Bleed: Enemy takes {state.enemy_bleed})")

    def _enemy_phase(self, state: _Round) -> None:
        if state.tentative_enemy_hp() <= 0:
            return
        state.phases.append(TurnPhase.ENEMY_ACTION)
        player, enemy = state.player, state.enemy
        if enemy.status.active(StatusKind.STUNNED):
            state.log.append("| Enemy Stunned!")
            return

        enemy_roll = roll_d20(self.rng)
        state.enemy_attack = resolve_attack(
            attacker_from_enemy(enemy),
            defender_from_player(player, state.skill),
            enemy.status,
            player.status,
            enemy_roll,
            self.rng,
            defender_hp=state.tentative_player_hp(),
        )
        if state.enemy_attack.hit:
            state.log.append(f"| Enemy: {state.enemy_attack.log}")
        else:
            state.log.append(f"| Enemy Missed. {state.enemy_attack.check.describe()}")

    def _aggregate_phase(self, state: _Round) -> TurnOutcome:
        state.phases.append(TurnPhase.AGGREGATE)
        player, enemy = state.player, state.enemy

        net_to_player = state.player_damage_taken() - state.player_healed()
        net_to_enemy = state.enemy_damage_taken() - state.enemy_healed()
        player.hp -= net_to_player
        player.clamp_hp()
        enemy.hp -= net_to_enemy
        enemy.clamp_hp()

        outcome = TurnOutcome(
            action_description=describe_action(player, state.skill),
            damage_to_player=net_to_player,
            damage_to_enemy=net_to_enemy,
            player_hit=state.enemy_attack.damage if state.enemy_attack else 0,
            enemy_hit=state.player_attack.damage if state.player_attack else 0,
        )

        if enemy.hp <= 0:
            state.phases.append(TurnPhase.DEFEATED)
            self._defeat(state, outcome)
        else:
            state.phases.append(TurnPhase.CONTINUE)
            outcome.enemy_state = enemy

        tick_cooldowns(player.skills, shocked=player.status.active(StatusKind.SHOCKED))

        outcome.player_hp = player.hp
        outcome.player_status = player.status
        outcome.skills = player.skills
        outcome.phases = state.phases
        outcome.mechanics = " ".join(s for s in state.log if s)
        return outcome

    def _defeat(self, state: _Round, outcome: TurnOutcome) -> None:
        player, enemy = state.player, state.enemy
        trait = player_trait(player, state.skill)
        outcome.enemy_defeated = True

        rewards = scale_rewards(
            defeat_rewards(enemy.level, enemy.difficulty, self.rng, trait),
            self.settings,
        )
        outcome.xp_gained = rewards.xp
        outcome.gold_gained = rewards.gold

        drop_chance = loot_drop_chance(enemy.difficulty, self.settings, trait)
        if chance(drop_chance, self.rng):
            state.loot_roll = roll_loot(enemy.level, enemy.difficulty, self.rng)
            outcome.loot = [mint_item(state.loot_roll)]

        player.status = StatusEffects()
        state.log.append(f"{enemy.name} was defeated!")
        logger.info(
            f"{enemy.name} defeated: +{outcome.xp_gained} XP, +{outcome.gold_gained} gold, "
            f"{len(outcome.loot)} item(s)"
        )

    # -- Narration --

    def _narrate(self, state: _Round, outcome: TurnOutcome) -> None:
        dealt = outcome.enemy_hit
        taken = outcome.player_hit
        fallback = fallback_narrative(outcome.action_description, dealt, taken)
        if self.narrator is None:
            outcome.narrative = fallback
            return

        loot_roll = state.loot_roll
        reply = self.narrator.narrate(outcome, state.player, state.enemy, loot_roll, self.settings)
        if reply is None or not reply.narrative:
            outcome.narrative = fallback
            outcome.mechanics += NARRATION_FAILED
            return

        outcome.narrative = reply.narrative
        if loot_roll is not None and outcome.loot:
            item = outcome.loot[0]
            item.name = reply.loot_name or item.name
            item.description = reply.loot_description or item.description
