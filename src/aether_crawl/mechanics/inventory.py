"""Inventory, equipment and merchant trades as pure state edits."""
from __future__ import annotations

import uuid

from aether_crawl.models.character import Player
from aether_crawl.models.enums import ItemType
from aether_crawl.models.item import Item


def sell_price(item: Item) -> int:
    """A merchant pays half the item's value (minimum 1 gp)."""
    return max(1, item.value // 2)


def _take_from_inventory(player: Player, item_id: str) -> Item:
    item = player.find_item(item_id)
    if item is None:
        raise ValueError(f"{item_id} is not in {player.name}'s inventory")
    player.inventory = [i for i in player.inventory if i.id != item_id]
    return item


def equip(player: Player, item_id: str) -> Item | None:
    """Equip a weapon or armor from the inventory.

    The previously equipped piece goes back into the inventory and is returned.
    """
    item = player.find_item(item_id)
    if item is None:
        raise ValueError(f"{item_id} is not in {player.name}'s inventory")
    if item.item_type not in (ItemType.WEAPON, ItemType.ARMOR):
        raise ValueError(f"{item.name} cannot be equipped")

    _take_from_inventory(player, item_id)
    if item.item_type == ItemType.WEAPON:
        previous, player.weapon = player.weapon, item
    else:
        previous, player.armor = player.armor, item
    if previous is not None:
        player.inventory.append(previous)
    return previous


def use_potion(player: Player, item_id: str) -> int:
    """Drink a potion. Returns the HP actually restored."""
    item = player.find_item(item_id)
    if item is None:
        raise ValueError(f"{item_id} is not in {player.name}'s inventory")
    if item.item_type != ItemType.POTION:
        raise ValueError(f"{item.name} is not a potion")
    _take_from_inventory(player, item_id)
    before = player.hp
    player.hp = min(player.max_hp, player.hp + item.value)
    return player.hp - before


def buy(player: Player, item: Item) -> Item:
    """Buy a merchant item. The purchased copy gets a fresh id."""
    if player.gold < item.cost:
        raise ValueError(f"Not enough gold for {item.name}: need {item.cost}, have {player.gold}")
    player.gold -= item.cost
    bought = item.model_copy(update={"id": str(uuid.uuid4())})
    player.inventory.append(bought)
    return bought


def sell(player: Player, item_id: str) -> int:
    """Sell an inventory item. Returns the gold received."""
    item = _take_from_inventory(player, item_id)
    price = sell_price(item)
    player.gold += price
    return price
