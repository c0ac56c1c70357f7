"""noteflash CLI: study and maintain a YAML card collection."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from noteflash.application.config import AppConfig, resolve_config
from noteflash.domain.errors import InvalidQualityError, NoteflashError

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="noteflash: SM-2 spaced-repetition scheduling for flashcards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage noteflash configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def _log_level(verbosity: int) -> int:
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _config(ctx: typer.Context) -> AppConfig:
    obj = ctx.obj or {}
    try:
        config = resolve_config(
            {
                "collection": obj.get("collection"),
                "policy": obj.get("policy"),
                "rating_scale": obj.get("scale"),
            }
        )
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        _fail(f"Invalid configuration: {errors}")

    # -v flags add to the configured verbosity
    logging.getLogger("noteflash").setLevel(
        _log_level(config.verbose + obj.get("verbose_bonus", 0))
    )
    return config


def _open_repo(config: AppConfig):
    from noteflash.infrastructure.adapters import YamlCardRepository

    logger.debug(f"Using collection {config.collection}")
    return YamlCardRepository(config.collection)


def _fail(error: Exception | str) -> None:
    typer.secho(f"Error: {error}", fg="red", err=True)
    raise typer.Exit(1)


def _card_line(card, now: datetime) -> str:
    from noteflash.application.stats import MetricsCalculator

    when = MetricsCalculator().next_review_text(card, now=now)
    return f"{card.id}  [{card.deck}]  {card.status.value:<10}  {when:<18}  {card.front}"


def _echo_cards(cards, now: datetime, json_output: bool, empty: str) -> None:
    from noteflash.infrastructure.serialization import card_to_dict

    if json_output:
        typer.echo(json.dumps([card_to_dict(c) for c in cards], indent=2))
        return
    if not cards:
        typer.secho(empty, fg="yellow")
        return
    for card in cards:
        typer.echo(_card_line(card, now))


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    collection: Annotated[
        Path | None,
        typer.Option("--collection", "-c", help="Card collection file (YAML)."),
    ] = None,
    policy: Annotated[
        str | None, typer.Option(help="Scheduling policy: strict or simple.")
    ] = None,
    scale: Annotated[
        str | None, typer.Option(help="Rating scale: three, four or numeric.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for noteflash."""
    ctx.ensure_object(dict)
    ctx.obj.update(collection=collection, policy=policy, scale=scale, verbose_bonus=verbose)


# ---------------------------------------------------------------------------
# Collection commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    front: Annotated[str, typer.Argument(help="Question side.")],
    back: Annotated[str, typer.Argument(help="Answer side.")],
    deck: Annotated[str, typer.Option(help="Deck name.")] = "Default",
    tag: Annotated[
        list[str] | None, typer.Option("--tag", "-t", help="Tag (repeatable).")
    ] = None,
):
    """[bold green]Add[/bold green] a new card to the collection."""
    from noteflash.application.id_service import create_card

    try:
        config = _config(ctx)
        repo = _open_repo(config)
        card = create_card(front=front, back=back, deck=deck, tags=tag or ())
        repo.add(card)
    except NoteflashError as e:
        _fail(e)

    typer.secho(f"Added {card.id} to deck '{deck}'.", fg="green")


@app.command()
def due(
    ctx: typer.Context,
    deck: Annotated[str, typer.Option(help="Deck name, or 'all'.")] = "all",
    limit: Annotated[int | None, typer.Option(help="Show at most this many cards.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List cards due for review, most overdue first."""
    from noteflash.application.scheduling.base import utcnow
    from noteflash.application.selection import due_cards

    try:
        repo = _open_repo(_config(ctx))
    except NoteflashError as e:
        _fail(e)

    now = utcnow()
    cards = due_cards(repo.list_cards(), deck=deck, now=now, limit=limit)
    _echo_cards(cards, now, json_output, "No cards due.")


@app.command()
def new(
    ctx: typer.Context,
    deck: Annotated[str, typer.Option(help="Deck name, or 'all'.")] = "all",
    limit: Annotated[
        int | None, typer.Option(help="Defaults to the daily new-card limit.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List cards that have never been reviewed."""
    from noteflash.application.scheduling.base import utcnow
    from noteflash.application.selection import new_cards

    try:
        config = _config(ctx)
        repo = _open_repo(config)
    except NoteflashError as e:
        _fail(e)

    cards = new_cards(
        repo.list_cards(),
        deck=deck,
        limit=config.new_cards_per_day if limit is None else limit,
    )
    _echo_cards(cards, utcnow(), json_output, "No new cards.")


@app.command()
def review(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Id of the reviewed card.")],
    rating: Annotated[str, typer.Argument(help="Rating label or number on the active scale.")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Record a single review and reschedule the card."""
    from noteflash.application.quality import get_scale, quality_feedback
    from noteflash.application.review_service import ReviewService
    from noteflash.application.scheduling import get_policy
    from noteflash.application.scheduling.base import utcnow
    from noteflash.infrastructure.serialization import card_to_dict

    try:
        config = _config(ctx)
        scale = get_scale(config.rating_scale)
        service = ReviewService(
            _open_repo(config),
            get_policy(config.policy, config),
            scale=scale,
            new_cards_per_day=config.new_cards_per_day,
        )
        now = utcnow()
        card = service.review(card_id, rating, now=now)
    except NoteflashError as e:
        _fail(e)

    if card is None:
        _fail(f"Card not found: {card_id}")

    if json_output:
        typer.echo(json.dumps(card_to_dict(card), indent=2))
        return
    typer.secho(quality_feedback(scale.normalize(rating)), fg="green")
    typer.echo(_card_line(card, now))


@app.command()
def study(
    ctx: typer.Context,
    deck: Annotated[str, typer.Option(help="Deck name, or 'all'.")] = "all",
    new_limit: Annotated[
        int | None, typer.Option("--new", help="New cards to introduce this session.")
    ] = None,
):
    """Run an interactive study session over due and new cards."""
    from noteflash.application.quality import get_scale, quality_feedback
    from noteflash.application.scheduling import get_policy
    from noteflash.application.selection import due_cards, new_cards
    from noteflash.application.session_builder import StudySession

    try:
        config = _config(ctx)
        repo = _open_repo(config)
        scale = get_scale(config.rating_scale)
        policy = get_policy(config.policy, config)
    except NoteflashError as e:
        _fail(e)

    snapshot = repo.list_cards()
    session = StudySession.from_pools(
        due_cards(snapshot, deck=deck),
        new_cards(
            snapshot,
            deck=deck,
            limit=config.new_cards_per_day if new_limit is None else new_limit,
        ),
        policy=policy,
        scale=scale,
        on_review=repo.save,
        **config.session_layout(),
    )

    if session.is_finished:
        typer.secho("Nothing to study.", fg="yellow")
        return

    prompt = f"Rating ({'/'.join(scale.choices())}, q to quit)"
    while not session.is_finished:
        entry = session.current
        typer.secho(f"\n[{entry.card.deck}] {entry.card.front}", bold=True)
        typer.prompt("Press Enter to show the answer", default="", show_default=False)
        typer.echo(entry.card.back)

        answer = typer.prompt(prompt)
        if answer.strip().lower() in ("q", "quit"):
            break
        try:
            session.rate(answer)
        except InvalidQualityError as e:
            typer.secho(str(e), fg="red")
            continue
        typer.echo(quality_feedback(entry.last_rating_in_session))

    summary = session.stats.to_dict()
    typer.secho(
        f"\nStudied {summary['unique_cards']} cards "
        f"({summary['new_cards_studied']} new) in {summary['total_reviews']} reviews.",
        fg="green",
    )


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


@app.command()
def stats(
    ctx: typer.Context,
    deck: Annotated[str, typer.Option(help="Deck name, or 'all'.")] = "all",
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show workload and retention statistics."""
    from noteflash.application.stats import StatsService

    try:
        config = _config(ctx)
        service = StatsService(_open_repo(config), new_cards_per_day=config.new_cards_per_day)
    except NoteflashError as e:
        _fail(e)

    summary = service.summary(deck)
    if json_output:
        typer.echo(json.dumps(summary, indent=2))
        return

    typer.echo(f"Deck: {summary['deck']}  Cards: {summary['total']}")
    typer.echo(
        f"Due today: {summary['due_today']}  New today: {summary['new_today']}"
        f"  Reviewed today: {summary['reviewed_today']}"
    )
    typer.echo(
        f"Mature: {summary['maturity_rate']}%  Avg ease: {summary['average_ease_factor']}"
        f"  Avg interval: {summary['average_interval']}d"
    )


@app.command()
def forecast(
    ctx: typer.Context,
    deck: Annotated[str, typer.Option(help="Deck name, or 'all'.")] = "all",
    days: Annotated[int, typer.Option(min=1, help="Days to look ahead.")] = 7,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show how many cards fall due on each of the coming days."""
    from noteflash.application.stats import StatsService

    try:
        service = StatsService(_open_repo(_config(ctx)))
    except NoteflashError as e:
        _fail(e)

    counts = service.forecast(deck, days=days)
    if json_output:
        typer.echo(json.dumps(counts, indent=2))
        return
    for day, count in counts.items():
        typer.echo(f"{day}  {count:>4}  {'#' * min(count, 50)}")


# ---------------------------------------------------------------------------
# Migration
# ---------------------------------------------------------------------------


@app.command()
def migrate(
    ctx: typer.Context,
    source: Annotated[Path, typer.Argument(help="Simple-store export (YAML or JSON).")],
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Report what would be migrated without saving.")
    ] = False,
):
    """Import cards from a simple three-state store into the collection."""
    from noteflash.application.migration import migrate_simple_cards
    from noteflash.application.scheduling.base import utcnow
    from noteflash.infrastructure.adapters import InMemoryCardRepository, load_simple_records

    now = utcnow()
    try:
        records = load_simple_records(source, now=now)
        repo = _open_repo(_config(ctx))
        target = InMemoryCardRepository(repo.list_cards()) if dry_run else repo
        result = migrate_simple_cards(records, target, now=now)
    except NoteflashError as e:
        _fail(e)

    prefix = "[dry-run] " if dry_run else ""
    typer.secho(
        f"{prefix}Migrated {result.migrated} cards, skipped {result.skipped} already present.",
        fg="green",
    )


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _config(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
