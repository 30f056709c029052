"""Typer CLI application."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.logging import RichHandler

from aether_crawl.models.enums import Difficulty

app = typer.Typer(
    name="aether-crawl",
    help="A turn-based dungeon crawl with LLM-narrated combat",
    no_args_is_help=True,
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    _setup_logging(verbose)


@app.command()
def simulate(
    class_name: str = typer.Option("warrior", "--class", "-c", help="warrior, mage, rogue or guardian"),
    runs: int = typer.Option(1, "--runs", "-r", min=1, help="Dungeon runs to attempt"),
    name: Optional[str] = typer.Option(None, "--name", help="Character name"),
    difficulty: Optional[Difficulty] = typer.Option(None, "--difficulty", "-d"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible runs"),
    offline: bool = typer.Option(False, "--offline", help="Skip the LLM and use templated text"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config.toml"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="LLM model to use"),
) -> None:
    """Auto-play a character through one or more dungeon runs."""
    from aether_crawl.app import GameApp
    from aether_crawl.cli.combat_display import CombatDisplay
    from aether_crawl.config import load_settings

    settings = load_settings(config, difficulty=difficulty)
    game_app = GameApp(settings=settings, model_override=model, offline=offline, seed=seed)
    display = CombatDisplay()

    def on_turn(round_number: int, outcome) -> None:
        display.show_turn(outcome)

    try:
        report = game_app.simulate(class_name, runs=runs, name=name, on_turn=on_turn)
    except ValueError as e:
        display.console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    for event in report.events:
        display.console.print(f"[bold]{event}[/bold]")
    display.show_player(report.player)
    display.console.print(
        f"Runs completed: {report.runs_completed}, rounds won: {report.rounds_won}, turns: {report.turns}"
    )
    if report.defeated_by:
        raise typer.Exit(code=2)


@app.command()
def encounter(
    level: int = typer.Option(1, "--level", "-l", min=1, help="Player level"),
    max_hp: int = typer.Option(90, "--max-hp", min=1, help="Player max HP"),
    round_number: int = typer.Option(1, "--round", min=1),
    difficulty: Optional[Difficulty] = typer.Option(None, "--difficulty", "-d"),
    offline: bool = typer.Option(False, "--offline", help="Use the placeholder enemy"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Preview the enemy generated for a round."""
    from aether_crawl.app import GameApp
    from aether_crawl.cli.combat_display import CombatDisplay
    from aether_crawl.config import load_settings
    from aether_crawl.mechanics.encounters import build_enemy, encounter_tier
    from aether_crawl.models.enums import EnemyTier

    settings = load_settings(config, difficulty=difficulty)
    game_app = GameApp(settings=settings, offline=offline)
    is_boss = encounter_tier(round_number, settings) == EnemyTier.BOSS
    flavor = game_app.flavor.enemy_flavor(level, settings, is_boss=is_boss)
    enemy = build_enemy(flavor, round_number, level, max_hp, settings)
    CombatDisplay().show_enemy(enemy, round_number)


@app.command()
def check(
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Check the configured LLM provider."""
    from aether_crawl.cli.combat_display import console
    from aether_crawl.config import load_settings
    from aether_crawl.llm.litellm_provider import LiteLLMProvider

    settings = load_settings(config)
    console.print(f"Difficulty: [bold]{settings.difficulty.value}[/bold], rounds per run: {settings.max_rounds}")
    try:
        provider = LiteLLMProvider(settings.llm)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    if provider.is_available():
        console.print(f"[green]✓[/green] {provider.describe()} via {settings.llm.provider}")
    else:
        console.print(
            f"[yellow]✗[/yellow] {provider.describe()} via {settings.llm.provider} is not reachable; "
            "narration will use templated fallbacks"
        )


if __name__ == "__main__":
    app()
