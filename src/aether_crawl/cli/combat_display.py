"""Combat-specific display helpers — rich panels and tables for a crawl."""
from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from aether_crawl.models.character import Enemy, Player
from aether_crawl.models.combat import TurnOutcome
from aether_crawl.models.enums import EnemyTier
from aether_crawl.models.item import Item

console = Console()

_TIER_STYLE = {
    EnemyTier.MINION: "red",
    EnemyTier.ELITE: "bold yellow",
    EnemyTier.BOSS: "bold magenta",
}


def hp_bar(current: int, maximum: int, width: int = 12) -> Text:
    pct = max(0.0, current / maximum) if maximum > 0 else 0.0
    filled = int(pct * width)
    color = "green" if pct > 0.5 else "yellow" if pct > 0.25 else "red"
    bar = Text()
    bar.append("█" * filled, style=color)
    bar.append("░" * (width - filled), style="dim")
    bar.append(f" {current}/{maximum}")
    return bar


class CombatDisplay:
    def __init__(self, console_: Console | None = None) -> None:
        self.console = console_ or console

    def show_enemy(self, enemy: Enemy, round_number: int | None = None) -> None:
        style = _TIER_STYLE.get(enemy.difficulty, "red")
        table = Table(box=box.SIMPLE, show_header=False)
        table.add_column("Stat", style="bold")
        table.add_column("Value")
        table.add_row("HP", hp_bar(enemy.hp, enemy.max_hp))
        table.add_row("AC", str(enemy.ac))
        table.add_row("Role", enemy.role.value)
        table.add_row("Trait", enemy.trait.value)
        table.add_row("Material", enemy.material.value)
        table.add_row("Weak / Resist", f"{enemy.weakness.value if enemy.weakness else '-'} / "
                                       f"{enemy.resistance.value if enemy.resistance else '-'}")
        table.add_row("Attacks with", enemy.damage_type.value)
        table.add_row(
            "STR / DEX / INT / CON",
            f"{enemy.stats.strength} / {enemy.stats.dexterity} / "
            f"{enemy.stats.intelligence} / {enemy.stats.constitution}",
        )
        if enemy.pierce:
            table.add_row("Pierce", f"{enemy.pierce:.0%}")
        title = f"[{style}]{enemy.difficulty.value}: {enemy.name}[/{style}]"
        if round_number is not None:
            title = f"Round {round_number} — {title}"
        self.console.print(Panel(table, title=title, subtitle=enemy.description or None,
                                 border_style=style.split()[-1], box=box.HEAVY))

    def show_turn(self, outcome: TurnOutcome) -> None:
        self.console.print(f"[italic]{outcome.narrative}[/italic]")
        self.console.print(f"[dim]{outcome.mechanics}[/dim]")
        if outcome.enemy_defeated:
            self.console.print(
                f"[bold green]Victory![/bold green] +{outcome.xp_gained} XP, +{outcome.gold_gained} gold"
            )
            for item in outcome.loot:
                self.console.print(f"  [cyan]Loot:[/cyan] {item.name} ({item.item_type.value} {item.value})")

    def show_player(self, player: Player) -> None:
        table = Table(box=box.ROUNDED, show_header=False, title=f"{player.name} — {player.class_archetype}")
        table.add_column("Stat", style="bold")
        table.add_column("Value")
        table.add_row("Level", f"{player.level} ({player.xp}/{player.max_xp} XP)")
        table.add_row("HP", hp_bar(player.hp, player.max_hp))
        table.add_row("AC", str(player.ac))
        table.add_row("Gold", str(player.gold))
        table.add_row("Weapon", player.weapon.name if player.weapon else "fists")
        table.add_row("Armor", player.armor.name if player.armor else "none")
        table.add_row("Skills", ", ".join(
            f"{s.name}{'' if s.is_active else ' (inactive)'}" for s in player.skills
        ) or "-")
        self.console.print(table)

    def show_items(self, items: list[Item], title: str = "Merchant") -> None:
        table = Table(title=title, box=box.SIMPLE_HEAVY)
        table.add_column("Item")
        table.add_column("Type")
        table.add_column("Value", justify="right")
        table.add_column("Cost", justify="right")
        for item in items:
            table.add_row(item.name, item.item_type.value, str(item.value), str(item.cost))
        self.console.print(table)
