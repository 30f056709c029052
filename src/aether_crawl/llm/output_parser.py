"""Parse and validate LLM outputs into typed records.

Every parser is lenient: unknown enum values are coerced to a default and
missing fields are filled in, so a half-usable reply still yields a record.
Parsers return ``None`` only when the reply lacks the one field that cannot
be invented (a name, a narrative).
"""
from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Optional, TypeVar

from aether_crawl.mechanics.skills import skill_option
from aether_crawl.models.enums import (
    CombatTrait,
    DamageType,
    EnemyRole,
    MaterialType,
    SkillEffect,
    StatType,
)
from aether_crawl.models.llm_contract import (
    CharacterFlavor,
    EnemyFlavor,
    GearFlavor,
    ItemFlavor,
    NarrationReply,
)
from aether_crawl.models.skill import Skill

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: type[E], value: Any, default: Optional[E]) -> Optional[E]:
    """Match ``value`` against an enum's values case-insensitively."""
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str) or not value.strip():
        return default
    wanted = value.strip().lower().replace(" ", "_")
    for member in enum_cls:
        if member.value.lower() == wanted or member.name.lower() == wanted:
            return member
    logger.debug(f"Unknown {enum_cls.__name__} value {value!r}, using {default}")
    return default


def _text(raw: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class OutputParser:
    @staticmethod
    def parse_enemy_flavor(raw: dict[str, Any]) -> EnemyFlavor | None:
        name = _text(raw, "name")
        if not name:
            return None
        return EnemyFlavor(
            name=name,
            description=_text(raw, "description"),
            role=coerce_enum(EnemyRole, raw.get("role"), EnemyRole.BALANCED),
            trait=coerce_enum(CombatTrait, raw.get("trait"), CombatTrait.NONE),
            material=coerce_enum(MaterialType, raw.get("material"), MaterialType.FLESH),
            damage_type=coerce_enum(
                DamageType, raw.get("damageType", raw.get("damage_type")), DamageType.MAGIC
            ),
        )

    @staticmethod
    def parse_narration(raw: dict[str, Any]) -> NarrationReply | None:
        narrative = _text(raw, "narrative")
        if not narrative:
            return None
        return NarrationReply(
            narrative=narrative,
            loot_name=_text(raw, "lootName", "loot_name") or None,
            loot_description=_text(raw, "lootDescription", "loot_description") or None,
        )

    @staticmethod
    def parse_item_names(raw: dict[str, Any], count: int) -> list[ItemFlavor | None]:
        """Pad or trim to exactly ``count`` entries; unusable entries are ``None``."""
        items = raw.get("items", [])
        if not isinstance(items, list):
            items = []
        parsed: list[ItemFlavor | None] = []
        for entry in items[:count]:
            if isinstance(entry, dict) and _text(entry, "name"):
                parsed.append(ItemFlavor(
                    name=_text(entry, "name"),
                    description=_text(entry, "description") or "A mysterious item.",
                ))
            else:
                parsed.append(None)
        parsed.extend([None] * (count - len(parsed)))
        return parsed

    @staticmethod
    def parse_gear(raw: Any, default_name: str, default_description: str) -> GearFlavor:
        raw = raw if isinstance(raw, dict) else {}
        return GearFlavor(
            name=_text(raw, "name") or default_name,
            description=_text(raw, "description") or default_description,
            damage_type=coerce_enum(DamageType, raw.get("damageType", raw.get("damage_type")), None),
        )

    @staticmethod
    def parse_character_flavor(raw: dict[str, Any], player_name: str | None = None) -> CharacterFlavor | None:
        name = player_name or _text(raw, "name")
        if not name:
            return None
        return CharacterFlavor(
            name=name,
            class_flavor_name=_text(raw, "classFlavorName", "class_flavor_name", "classArchetype") or "Adventurer",
            visual_prompt=_text(raw, "visualPrompt", "visual_prompt"),
            weapon=OutputParser.parse_gear(raw.get("weapon"), "Basic Weapon", "A simple weapon."),
            armor=OutputParser.parse_gear(raw.get("armor"), "Basic Armor", "Simple protection."),
            first_skill=OutputParser.parse_gear(
                raw.get("firstSkill", raw.get("first_skill")), "Basic Attack", "A simple attack."
            ),
        )

    @staticmethod
    def parse_skill_options(raw: dict[str, Any], stat: StatType) -> list[Skill]:
        skills = raw.get("skills", [])
        if not isinstance(skills, list):
            return []
        options: list[Skill] = []
        for entry in skills:
            if not isinstance(entry, dict) or not _text(entry, "name"):
                continue
            options.append(skill_option(
                stat,
                name=_text(entry, "name"),
                description=_text(entry, "description"),
                effect=coerce_enum(SkillEffect, entry.get("effect"), SkillEffect.DAMAGE),
                effect_value=max(0, _int(entry.get("effectValue", entry.get("effect_value")))),
                damage_type=coerce_enum(
                    DamageType, entry.get("damageType", entry.get("damage_type")), DamageType.MAGIC
                ),
            ))
        return options

    @staticmethod
    def extract_json_from_text(text: str) -> dict[str, Any] | None:
        text = text.strip()
        if "```json" in text:
            start = text.index("```json") + 7
            end = text.find("```", start)
            try:
                parsed = json.loads(text[start:end if end != -1 else None].strip())
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, dict):
                return parsed
            if parsed is not None:
                logger.warning(f"LLM returned non-dict JSON ({type(parsed).__name__}), discarding")
        brace_depth = 0
        start_idx = None
        for i, c in enumerate(text):
            if c == "{":
                if brace_depth == 0:
                    start_idx = i
                brace_depth += 1
            elif c == "}" and brace_depth > 0:
                brace_depth -= 1
                if brace_depth == 0 and start_idx is not None:
                    try:
                        return json.loads(text[start_idx : i + 1])
                    except json.JSONDecodeError:
                        start_idx = None
        return None
