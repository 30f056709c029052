"""Turns a resolved combat round into prose via the LLM."""
from __future__ import annotations

import logging

from aether_crawl.config import GameSettings
from aether_crawl.llm.output_parser import OutputParser
from aether_crawl.llm.provider import LLMProvider
from aether_crawl.llm.templates import render
from aether_crawl.mechanics.loot import LootRoll
from aether_crawl.models.character import Enemy, Player
from aether_crawl.models.combat import TurnOutcome
from aether_crawl.models.llm_contract import NarrationReply

logger = logging.getLogger(__name__)


class Narrator:
    def __init__(self, llm: LLMProvider | None):
        self._llm = llm

    def build_prompt(
        self,
        outcome: TurnOutcome,
        player: Player,
        enemy: Enemy,
        loot: LootRoll | None,
        settings: GameSettings,
    ) -> str:
        return render(
            "combat_narration.j2",
            theme=settings.theme,
            language=settings.language,
            player_name=player.name,
            player_hp=player.hp,
            player_max_hp=player.max_hp,
            enemy_name=enemy.name,
            enemy_hp=enemy.hp,
            enemy_max_hp=enemy.max_hp,
            action=outcome.action_description,
            damage_dealt=outcome.enemy_hit,
            damage_taken=outcome.player_hit,
            defeated=outcome.enemy_defeated,
            mechanics=outcome.mechanics,
            loot_type=loot.item_type.value if loot else None,
        )

    def narrate(
        self,
        outcome: TurnOutcome,
        player: Player,
        enemy: Enemy,
        loot: LootRoll | None,
        settings: GameSettings,
    ) -> NarrationReply | None:
        """Ask the LLM for narration. Returns None on any failure."""
        if self._llm is None:
            return None
        try:
            prompt = self.build_prompt(outcome, player, enemy, loot, settings)
            raw = self._llm.generate_structured(
                prompt, temperature=settings.llm.temperature, max_tokens=256
            )
        except Exception as e:
            logger.warning(f"Narration failed: {e}")
            return None
        if not isinstance(raw, dict):
            logger.warning(f"Narration reply was {type(raw).__name__}, not an object")
            return None

        reply = OutputParser.parse_narration(raw)
        if reply is None:
            logger.warning("Narration returned no narrative, using fallback")
        return reply
