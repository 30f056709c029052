"""Material weakness / resistance matrix.

Pure mechanics with no I/O and no randomness. Every material reacts to damage types
the same way for the player and for enemies.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from aether_crawl.models.enums import DamageType, MaterialType

WEAK_MULTIPLIER = 1.5
RESIST_MULTIPLIER = 0.5


@dataclass(frozen=True)
class MaterialProfile:
    weak: tuple[DamageType, ...]
    resist: tuple[DamageType, ...]


MATERIAL_MATRIX: Mapping[MaterialType, MaterialProfile] = MappingProxyType({
    MaterialType.FLESH: MaterialProfile(
        weak=(DamageType.SLASHING,),
        resist=(DamageType.BLUNT,),
    ),
    MaterialType.LEATHER: MaterialProfile(
        weak=(DamageType.PIERCING,),
        resist=(DamageType.SLASHING,),
    ),
    MaterialType.PLATE: MaterialProfile(
        weak=(DamageType.BLUNT, DamageType.MAGIC),
        resist=(DamageType.SLASHING,),
    ),
    MaterialType.BONE: MaterialProfile(
        weak=(DamageType.BLUNT, DamageType.MAGIC),
        resist=(DamageType.PIERCING,),
    ),
    MaterialType.SPIRIT: MaterialProfile(
        weak=(DamageType.MAGIC, DamageType.FIRE),
        resist=(DamageType.SLASHING, DamageType.BLUNT, DamageType.PIERCING),
    ),
})

# Checked in order; the first keyword found in the armor name wins.
_ARMOR_KEYWORDS: tuple[tuple[tuple[str, ...], MaterialType], ...] = (
    (("plate", "mail", "iron", "steel", "metal"), MaterialType.PLATE),
    (("leather", "hide", "skin"), MaterialType.LEATHER),
    (("bone", "skull"), MaterialType.BONE),
)


def material_multiplier(material: MaterialType, damage_type: DamageType) -> tuple[float, str]:
    """Return (multiplier, label) for a hit of ``damage_type`` on ``material``.

    The label is ``"WEAK"``, ``"RESIST"`` or ``""``.
    """
    profile = MATERIAL_MATRIX[material]
    if damage_type in profile.weak:
        return WEAK_MULTIPLIER, "WEAK"
    if damage_type in profile.resist:
        return RESIST_MULTIPLIER, "RESIST"
    return 1.0, ""


def apply_material(amount: int, material: MaterialType, damage_type: DamageType) -> int:
    mult, _ = material_multiplier(material, damage_type)
    return int(amount * mult)


def infer_material(armor_name: Optional[str]) -> MaterialType:
    """Guess a material from an armor's name. Unarmored means FLESH."""
    if not armor_name:
        return MaterialType.FLESH
    lowered = armor_name.lower()
    for keywords, material in _ARMOR_KEYWORDS:
        if any(k in lowered for k in keywords):
            return material
    return MaterialType.FLESH


def primary_weakness(material: MaterialType) -> DamageType:
    return MATERIAL_MATRIX[material].weak[0]


def primary_resistance(material: MaterialType) -> DamageType:
    return MATERIAL_MATRIX[material].resist[0]


def poison_immune(material: MaterialType) -> bool:
    """Spirits and skeletons have no blood to poison."""
    return material in (MaterialType.SPIRIT, MaterialType.BONE)
