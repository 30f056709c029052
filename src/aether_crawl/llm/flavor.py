"""Cosmetic content from the LLM: enemies, merchant stock names, characters, skills.

Every method has a fixed placeholder fallback, so the game stays playable
with no provider configured or when the provider misbehaves.
"""
from __future__ import annotations

import logging
from typing import Iterable

from aether_crawl.config import GameSettings
from aether_crawl.llm.output_parser import OutputParser
from aether_crawl.llm.provider import LLMProvider
from aether_crawl.llm.templates import render
from aether_crawl.mechanics.character_creation import ClassPreset, fallback_character_flavor
from aether_crawl.mechanics.encounters import FALLBACK_ENEMY_FLAVOR
from aether_crawl.mechanics.loot import LootRoll, mint_item
from aether_crawl.mechanics.skills import SKILL_OPTION_COUNT, fallback_skill_options
from aether_crawl.models.enums import (
    CombatTrait,
    DamageType,
    EnemyRole,
    EnemyTier,
    MaterialType,
    SkillEffect,
    StatType,
)
from aether_crawl.models.item import Item
from aether_crawl.models.llm_contract import CharacterFlavor, EnemyFlavor
from aether_crawl.models.skill import Skill

logger = logging.getLogger(__name__)

# Traits an enemy may be generated with.
ENEMY_TRAITS = (
    CombatTrait.FIRE,
    CombatTrait.POISON,
    CombatTrait.LIFESTEAL,
    CombatTrait.ARMOR_PIERCE,
    CombatTrait.NONE,
)

FALLBACK_MERCHANT_DESCRIPTION = "A standard item."


def fallback_merchant_name(roll: LootRoll) -> str:
    prefix = "Elite " if roll.tier != EnemyTier.MINION else ""
    return f"{prefix}{roll.item_type.value}"


class FlavorGenerator:
    def __init__(self, llm: LLMProvider | None):
        self._llm = llm

    def _note_fallback(self, what: str) -> None:
        if self._llm is None:
            logger.debug(f"{what}: no LLM configured, using fallback")
        else:
            logger.warning(f"{what} failed, using fallback")

    def _ask(self, template: str, temperature: float = 0.9, max_tokens: int = 512, **context) -> dict:
        if self._llm is None:
            return {}
        try:
            prompt = render(template, **context)
            raw = self._llm.generate_structured(prompt, temperature=temperature, max_tokens=max_tokens)
        except Exception as e:
            logger.warning(f"Flavor generation ({template}) failed: {e}")
            return {}
        if not isinstance(raw, dict):
            logger.warning(f"Flavor generation ({template}) returned {type(raw).__name__}, discarding")
            return {}
        return raw

    def enemy_flavor(self, player_level: int, settings: GameSettings, is_boss: bool = False) -> EnemyFlavor:
        raw = self._ask(
            "enemy_flavor.j2",
            theme=settings.theme,
            language=settings.language,
            player_level=player_level,
            is_boss=is_boss,
            roles=[r.value for r in EnemyRole],
            traits=[t.value for t in ENEMY_TRAITS],
            materials=[m.value for m in MaterialType],
            damage_types=[d.value for d in DamageType],
        )
        flavor = OutputParser.parse_enemy_flavor(raw) if raw else None
        if flavor is None:
            self._note_fallback("Enemy generation")
            return FALLBACK_ENEMY_FLAVOR.model_copy()
        return flavor

    def merchant_items(self, rolls: list[LootRoll], settings: GameSettings) -> list[Item]:
        """Name a merchant's stock. Unnamed entries keep a plain placeholder."""
        raw = self._ask(
            "merchant_items.j2",
            theme=settings.theme,
            language=settings.language,
            items=rolls,
        )
        names = OutputParser.parse_item_names(raw, len(rolls))
        if raw and not any(names):
            logger.warning("Merchant item naming returned nothing usable, using fallback")
        items: list[Item] = []
        for roll, flavor in zip(rolls, names):
            if flavor is None:
                items.append(mint_item(roll, fallback_merchant_name(roll), FALLBACK_MERCHANT_DESCRIPTION))
            else:
                items.append(mint_item(roll, flavor.name, flavor.description))
        return items

    def character_flavor(
        self,
        preset: ClassPreset,
        settings: GameSettings,
        player_name: str | None = None,
    ) -> CharacterFlavor:
        raw = self._ask(
            "character_flavor.j2",
            theme=settings.theme,
            language=settings.language,
            class_name=preset.name,
            main_stat=preset.main_stat.value,
            player_name=player_name,
            damage_types=[d.value for d in DamageType],
        )
        flavor = OutputParser.parse_character_flavor(raw, player_name) if raw else None
        if flavor is None:
            self._note_fallback("Character generation")
            return fallback_character_flavor(player_name)
        return flavor

    def skill_options(
        self,
        stat: StatType,
        settings: GameSettings,
        existing: Iterable[str] = (),
        count: int = SKILL_OPTION_COUNT,
    ) -> list[Skill]:
        raw = self._ask(
            "skill_options.j2",
            temperature=0.9,
            count=count,
            stat=stat.value,
            language=settings.language,
            existing=list(existing),
            effects=[e.value for e in SkillEffect],
            damage_types=[d.value for d in DamageType],
        )
        options = OutputParser.parse_skill_options(raw, stat)[:count] if raw else []
        if not options:
            self._note_fallback("Skill generation")
            return fallback_skill_options(stat, count)
        return options
