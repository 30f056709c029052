"""Main application bootstrap — wires settings, collaborators and the resolver together."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from aether_crawl.config import GameSettings, load_settings
from aether_crawl.engine.turn_resolver import TurnResolver
from aether_crawl.mechanics.character_creation import create_player, get_preset
from aether_crawl.mechanics.dice import roll_d20
from aether_crawl.mechanics.encounters import build_enemy, encounter_intro, encounter_tier
from aether_crawl.mechanics.inventory import buy, equip, use_potion
from aether_crawl.mechanics.leveling import allocate_stat, award_xp
from aether_crawl.mechanics.loot import merchant_rolls
from aether_crawl.mechanics.skills import MAX_ACTIVE_SKILLS, learn_skill
from aether_crawl.models.character import Enemy, Player
from aether_crawl.models.combat import PlayerAction, TurnOutcome
from aether_crawl.models.enums import EnemyTier, ItemType
from aether_crawl.models.item import Item

logger = logging.getLogger(__name__)

# Drink a potion below this fraction of max HP when auto-playing.
POTION_THRESHOLD = 0.35


@dataclass
class RunState:
    run_number: int = 1
    round_number: int = 1
    max_rounds: int = 6


@dataclass
class SimulationReport:
    player: Player
    runs_completed: int = 0
    rounds_won: int = 0
    turns: int = 0
    defeated_by: Optional[str] = None
    events: list[str] = field(default_factory=list)


TurnHook = Callable[[int, TurnOutcome], None]


class GameApp:
    """Main application class that bootstraps and runs the game."""

    def __init__(
        self,
        settings: GameSettings | None = None,
        config_path: Path | str | None = None,
        model_override: str | None = None,
        offline: bool = False,
        seed: int | None = None,
    ):
        self.settings = settings or load_settings(config_path)
        if model_override:
            self.settings.llm.model = model_override
        self.offline = offline
        self.rng = random.Random(seed)

        # Lazy-initialized components
        self._llm = None
        self._narrator = None
        self._flavor = None
        self._resolver = None

    # -- Component initialization (lazy) --

    @property
    def llm(self):
        if self._llm is None and not self.offline:
            from aether_crawl.llm.litellm_provider import LiteLLMProvider

            self._llm = LiteLLMProvider(self.settings.llm)
        return self._llm

    @property
    def narrator(self):
        if self._narrator is None:
            from aether_crawl.llm.narrator import Narrator

            self._narrator = Narrator(self.llm)
        return self._narrator

    @property
    def flavor(self):
        if self._flavor is None:
            from aether_crawl.llm.flavor import FlavorGenerator

            self._flavor = FlavorGenerator(self.llm)
        return self._flavor

    @property
    def resolver(self) -> TurnResolver:
        if self._resolver is None:
            narrator = None if self.offline else self.narrator
            self._resolver = TurnResolver(self.settings, rng=self.rng, narrator=narrator)
        return self._resolver

    # -- Game steps --

    def new_player(self, class_name: str, name: str | None = None) -> Player:
        preset = get_preset(class_name)
        flavor = self.flavor.character_flavor(preset, self.settings, name)
        player = create_player(preset, flavor)
        logger.info(f"Created {player.name}, {player.class_archetype} ({preset.name})")
        return player

    def new_encounter(self, player: Player, run: RunState) -> Enemy:
        settings = self.settings.model_copy(update={"max_rounds": run.max_rounds})
        is_boss = encounter_tier(run.round_number, settings) == EnemyTier.BOSS
        flavor = self.flavor.enemy_flavor(player.level, settings, is_boss=is_boss)
        return build_enemy(flavor, run.round_number, player.level, player.max_hp, settings)

    def choose_action(self, player: Player) -> PlayerAction:
        """Auto-play policy: the first ready active skill, else a basic attack."""
        for skill in player.active_skills:
            if skill.ready:
                return PlayerAction.use_skill(skill.id)
        return PlayerAction.attack()

    def play_turn(self, player: Player, enemy: Enemy, action: PlayerAction | None = None,
                  roll: int | None = None) -> TurnOutcome:
        action = action or self.choose_action(player)
        roll = roll or roll_d20(self.rng)
        return self.resolver.resolve(player, enemy, action, roll)

    def apply_outcome(self, player: Player, outcome: TurnOutcome) -> int:
        """Fold a resolved round back into ``player``. Returns levels gained."""
        player.hp = outcome.player_hp
        player.status = outcome.player_status
        player.skills = outcome.skills
        if not outcome.enemy_defeated:
            return 0
        player.gold += outcome.gold_gained
        player.inventory.extend(outcome.loot)
        return award_xp(player, outcome.xp_gained)

    def level_up(self, player: Player, levels: int) -> None:
        """Spend new stat points on the main stat and learn one new skill per level."""
        for _ in range(levels):
            if player.stat_points <= 0:
                break
            allocate_stat(player, player.main_stat)
            options = self.flavor.skill_options(
                player.main_stat, self.settings, existing=[s.name for s in player.skills]
            )
            if options:
                skill = learn_skill(player, options[0])
                if len(player.active_skills) < MAX_ACTIVE_SKILLS:
                    skill.is_active = True

    def restock_merchant(self, player: Player) -> list[Item]:
        return self.flavor.merchant_items(merchant_rolls(player.level, self.rng), self.settings)

    def shop(self, player: Player, stock: list[Item]) -> list[Item]:
        """Buy gear that beats what is equipped, best value first."""
        bought: list[Item] = []
        for item in sorted(stock, key=lambda i: i.value, reverse=True):
            current = {ItemType.WEAPON: player.weapon, ItemType.ARMOR: player.armor}.get(item.item_type)
            if item.item_type in (ItemType.WEAPON, ItemType.ARMOR):
                if current is not None and current.value >= item.value:
                    continue
            if player.gold < item.cost:
                continue
            purchase = buy(player, item)
            bought.append(purchase)
            if purchase.item_type in (ItemType.WEAPON, ItemType.ARMOR):
                equip(player, purchase.id)
        return bought

    def _maybe_heal(self, player: Player) -> None:
        if player.max_hp <= 0 or player.hp / player.max_hp >= POTION_THRESHOLD:
            return
        potion = next((i for i in player.inventory if i.item_type == ItemType.POTION), None)
        if potion is not None:
            use_potion(player, potion.id)

    def _upgrade_from_loot(self, player: Player, loot: list[Item]) -> None:
        for item in loot:
            current = player.weapon if item.item_type == ItemType.WEAPON else player.armor
            if item.item_type in (ItemType.WEAPON, ItemType.ARMOR):
                if current is None or item.value > current.value:
                    equip(player, item.id)

    # -- Run loop --

    def simulate(
        self,
        class_name: str = "warrior",
        runs: int = 1,
        name: str | None = None,
        max_turns_per_fight: int = 100,
        on_turn: TurnHook | None = None,
    ) -> SimulationReport:
        """Auto-play ``runs`` dungeon runs or until the player falls."""
        player = self.new_player(class_name, name)
        report = SimulationReport(player=player)
        run = RunState(max_rounds=self.settings.max_rounds)

        while report.runs_completed < runs:
            enemy: Enemy | None = self.new_encounter(player, run)
            report.events.append(f"Run {run.run_number}, round {run.round_number}: {encounter_intro(enemy)}")

            for _ in range(max_turns_per_fight):
                self._maybe_heal(player)
                outcome = self.play_turn(player, enemy)
                report.turns += 1
                if on_turn is not None:
                    on_turn(run.round_number, outcome)
                levels = self.apply_outcome(player, outcome)
                if player.hp <= 0:
                    report.defeated_by = enemy.name
                    report.events.append(f"{player.name} was defeated by the {enemy.name}.")
                    return report
                if outcome.enemy_defeated:
                    self._upgrade_from_loot(player, outcome.loot)
                    self.level_up(player, levels)
                    break
                enemy = outcome.enemy_state
            else:
                report.events.append(f"The fight with {enemy.name} dragged on; retreating.")
                return report

            report.rounds_won += 1
            if run.round_number >= run.max_rounds:
                report.runs_completed += 1
                stock = self.restock_merchant(player)
                bought = self.shop(player, stock)
                report.events.append(
                    f"Boss defeated! The merchant sold {len(bought)} of {len(stock)} item(s)."
                )
                run = RunState(
                    run_number=run.run_number + 1,
                    round_number=1,
                    max_rounds=run.max_rounds + 1,
                )
                logger.info(f"Starting run {run.run_number}: the dungeon grows deeper ({run.max_rounds} rounds)")
            else:
                run.round_number += 1

        return report
