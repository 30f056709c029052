"""Character creation — class presets and the starting kit."""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from aether_crawl.mechanics.combat_math import ac_for_dex
from aether_crawl.mechanics.leveling import max_hp_for_con
from aether_crawl.models.character import Player, Stats
from aether_crawl.models.enums import DamageType, ItemType, StatType
from aether_crawl.models.item import Item
from aether_crawl.models.llm_contract import CharacterFlavor, GearFlavor
from aether_crawl.models.skill import Skill

STARTER_WEAPON_VALUE = 4
STARTER_ARMOR_VALUE = 1
STARTER_POTION_HEAL = 15


@dataclass(frozen=True)
class ClassPreset:
    name: str
    main_stat: StatType
    strength: int
    dexterity: int
    intelligence: int
    constitution: int

    def stats(self) -> Stats:
        return Stats(
            strength=self.strength,
            dexterity=self.dexterity,
            intelligence=self.intelligence,
            constitution=self.constitution,
        )


CLASS_PRESETS: Mapping[str, ClassPreset] = MappingProxyType({
    "warrior": ClassPreset("Warrior", StatType.STR, strength=16, dexterity=12, intelligence=8, constitution=14),
    "mage": ClassPreset("Mage", StatType.INT, strength=8, dexterity=12, intelligence=16, constitution=10),
    "rogue": ClassPreset("Rogue", StatType.DEX, strength=10, dexterity=16, intelligence=12, constitution=12),
    "guardian": ClassPreset("Guardian", StatType.CON, strength=12, dexterity=10, intelligence=8, constitution=16),
})


def get_preset(class_name: str) -> ClassPreset:
    preset = CLASS_PRESETS.get(class_name.lower())
    if preset is None:
        raise ValueError(f"Unknown class: {class_name}")
    return preset


def fallback_character_flavor(name: str | None = None) -> CharacterFlavor:
    return CharacterFlavor(
        name=name or "Glitch Walker",
        class_flavor_name="Wanderer",
        visual_prompt="A glitchy silhouette",
        weapon=GearFlavor(name="Debug Stick", description="Unknown object"),
        armor=GearFlavor(name="Null Robes", description="Offers no protection"),
        first_skill=GearFlavor(name="Reboot", description="Try again."),
    )


def create_player(preset: ClassPreset, flavor: CharacterFlavor | None = None) -> Player:
    """Assemble a level-1 player from a class preset and its cosmetic flavor."""
    flavor = flavor or fallback_character_flavor()
    stats = preset.stats()
    max_hp = max_hp_for_con(stats.constitution)

    weapon = Item(
        name=flavor.weapon.name,
        description=flavor.weapon.description or "A simple weapon",
        item_type=ItemType.WEAPON,
        value=STARTER_WEAPON_VALUE,
        cost=10,
        stat_modifier=preset.main_stat,
        damage_type=flavor.weapon.damage_type or DamageType.BLUNT,
    )
    armor = Item(
        name=flavor.armor.name,
        description=flavor.armor.description or "Basic protection",
        item_type=ItemType.ARMOR,
        value=STARTER_ARMOR_VALUE,
        cost=5,
    )
    first_skill = Skill(
        name=flavor.first_skill.name,
        description=flavor.first_skill.description or "A basic skill",
        stat=preset.main_stat,
        damage_scale=1.5,
        cooldown=3,
        damage_type=flavor.first_skill.damage_type or DamageType.BLUNT,
        cost=0,
        is_active=True,
    )
    potion = Item(
        name="Starter Potion",
        description="Heals minor wounds",
        item_type=ItemType.POTION,
        value=STARTER_POTION_HEAL,
        cost=10,
    )

    return Player(
        name=flavor.name,
        class_archetype=flavor.class_flavor_name or preset.name,
        main_stat=preset.main_stat,
        hp=max_hp,
        max_hp=max_hp,
        ac=ac_for_dex(stats.dexterity),
        stats=stats,
        gold=0,
        weapon=weapon,
        armor=armor,
        skills=[first_skill],
        inventory=[potion],
    )
