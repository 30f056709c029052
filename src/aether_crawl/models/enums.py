"""Shared enumerations used by the models and the mechanics."""
from __future__ import annotations

from enum import Enum


class StatType(str, Enum):
    STR = "Strength"
    DEX = "Dexterity"
    INT = "Intelligence"
    CON = "Constitution"


class DamageType(str, Enum):
    SLASHING = "SLASHING"
    BLUNT = "BLUNT"
    PIERCING = "PIERCING"
    MAGIC = "MAGIC"
    FIRE = "FIRE"
    ICE = "ICE"
    POISON = "POISON"


class MaterialType(str, Enum):
    FLESH = "FLESH"
    LEATHER = "LEATHER"
    PLATE = "PLATE"
    BONE = "BONE"
    SPIRIT = "SPIRIT"


class CombatTrait(str, Enum):
    FIRE = "Fire"
    ICE = "Ice"
    POISON = "Poison"
    LIFESTEAL = "Lifesteal"
    ARMOR_PIERCE = "Armor_Pierce"
    CRITICAL = "Critical"
    EXECUTE = "Execute"
    THORNS = "Thorns"
    EVASION = "Evasion"
    BERSERK = "Berserk"
    GLASS_CANNON = "Glass_Cannon"
    MIDAS = "Midas"
    SCAVENGER = "Scavenger"
    STUN = "Stun"
    IGNITE = "Ignite"
    FREEZE = "Freeze"
    PIERCE = "Pierce"
    ENERGY_SHIELD = "Energy_Shield"
    NONE = "None"


class ItemType(str, Enum):
    WEAPON = "WEAPON"
    ARMOR = "ARMOR"
    POTION = "POTION"
    SCROLL = "SCROLL"


class SkillEffect(str, Enum):
    DAMAGE = "DAMAGE"
    HEAL = "HEAL"
    STUN = "STUN"
    LEECH = "LEECH"
    ARMOR_BREAK = "ARMOR_BREAK"


class EnemyRole(str, Enum):
    TANK = "TANK"
    SWARM = "SWARM"
    ASSASSIN = "ASSASSIN"
    BRUTE = "BRUTE"
    BALANCED = "BALANCED"


class EnemyTier(str, Enum):
    MINION = "Minion"
    ELITE = "Elite"
    BOSS = "Boss"


class Difficulty(str, Enum):
    EASY = "Easy"
    NORMAL = "Normal"
    HARD = "Hard"
    EXTREME = "Extreme"
