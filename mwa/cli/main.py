"""
MWA CLI - Command Line Interface for the Multi-Winner Auction engine

Main entry point for all CLI commands.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import click

from mwa.utils.logger import MWALogger, get_logger, setup_logging

logger = get_logger("cli")


# =============================================================================
# Step Execution
# =============================================================================

OPERATIONS = ("bid", "end", "extend", "withdraw")


def execute_step(auction, step: Dict[str, Any]) -> Tuple[bool, str]:
    """
    Apply one scripted operation to an auction.

    Args:
        auction: Target Auction
        step: {"op": bid|end|extend|withdraw, "caller": ..., plus
            "amount" (bid), "extra" (extend) and "now" (all but withdraw)}

    Returns:
        (success, message)
    """
    from mwa.core.errors import AuctionError

    op = step.get("op")
    caller = step.get("caller")
    now = step.get("now", 0)

    try:
        if op == "bid":
            record = auction.place_bid(caller, step.get("amount"), now)
            return True, f"{caller} bid {record.amount} (#{record.sequence}), highest={auction.highest_bid}"
        if op == "end":
            winners = auction.end_auction(caller, now)
            return True, f"ended by {caller}: winners={list(winners)}"
        if op == "extend":
            expiry = auction.increase_duration(caller, now, step.get("extra", 0))
            return True, f"expiry extended to {expiry}"
        if op == "withdraw":
            amount = auction.withdraw(caller)
            return True, f"{caller} withdrew {amount}"
    except AuctionError as exc:
        return False, f"{type(exc).__name__}: {exc}"

    return False, f"Unknown operation {op!r} (expected one of {', '.join(OPERATIONS)})"


def run_steps(auction, steps: List[Dict[str, Any]]) -> int:
    """Execute steps, echoing each outcome. Returns the rejection count."""
    rejected = 0
    for i, step in enumerate(steps):
        ok, message = execute_step(auction, step)
        if not ok:
            rejected += 1
        click.echo(f"  [{i}] {'✓' if ok else '✗'} {step.get('op')}: {message}")
    return rejected


def echo_results(auction, labels: Dict[Any, str] = None) -> None:
    labels = labels or {}
    click.echo(f"\nPhase: {auction.phase.name}")
    click.echo(f"Highest bid: {auction.highest_bid}")
    if auction.is_open:
        click.echo("Winners: (not decided)")
        return
    if not auction.winners:
        click.echo("Winners: none")
        return
    click.echo("Winners:")
    for rank, (participant, amount) in enumerate(auction.results()):
        click.echo(f"  #{rank + 1} {labels.get(participant, participant)}: {amount}")


# =============================================================================
# Demo Scenarios
# =============================================================================


def _scenarios() -> Dict[str, Dict[str, Any]]:
    from mwa.utils.validation import MAX_AMOUNT

    return {
        "a": {
            "title": "Strictly greater with no increment",
            "config": {"duration": 100, "num_winners": 1, "bid_increment": 0},
            "steps": [
                {"op": "bid", "caller": "X", "amount": 10, "now": 0},
                {"op": "bid", "caller": "Y", "amount": 10, "now": 1},
                {"op": "bid", "caller": "Y", "amount": 11, "now": 2},
                {"op": "end", "caller": "owner", "now": 50},
            ],
        },
        "b": {
            "title": "Two winners with an increment of 5",
            "config": {"duration": 100, "num_winners": 2, "bid_increment": 5},
            "steps": [
                {"op": "bid", "caller": "X", "amount": 100, "now": 0},
                {"op": "bid", "caller": "Y", "amount": 104, "now": 1},
                {"op": "bid", "caller": "Y", "amount": 106, "now": 2},
                {"op": "bid", "caller": "Z", "amount": 112, "now": 3},
                {"op": "end", "caller": "owner", "now": 4},
            ],
        },
        "c": {
            "title": "Increment overflow is rejected",
            "config": {"duration": 100, "num_winners": 1, "bid_increment": MAX_AMOUNT - 5},
            "steps": [
                {"op": "bid", "caller": "X", "amount": MAX_AMOUNT - 4, "now": 0},
                {"op": "bid", "caller": "Y", "amount": MAX_AMOUNT, "now": 1},
            ],
        },
        "d": {
            "title": "Only the owner can end",
            "config": {"duration": 100, "num_winners": 1, "bid_increment": 0},
            "steps": [
                {"op": "bid", "caller": "X", "amount": 10, "now": 0},
                {"op": "end", "caller": "Y", "now": 1},
            ],
        },
    }


# =============================================================================
# Commands
# =============================================================================


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, debug):
    """Multi-Winner Auction engine"""
    from mwa.core.config import load_settings

    settings = load_settings()
    level = logging.DEBUG if debug else settings.log_level

    MWALogger.reset()
    setup_logging(level=level, log_dir=str(settings.log_dir), log_to_file=settings.log_to_file)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command("demo")
@click.option(
    "--scenario",
    type=click.Choice(["a", "b", "c", "d"], case_sensitive=False),
    default="b",
    help="Demo scenario to run",
)
def demo(scenario):
    """Run a built-in auction scenario"""
    from mwa.core.auction import Auction, EventLog
    from mwa.core.config import AuctionConfig
    from mwa.core.ledger import EscrowLedger
    from mwa.crypto import generate_keypair
    from mwa.utils.validation import MAX_AMOUNT

    chosen = _scenarios()[scenario.lower()]
    click.echo(f"🔨 Scenario {scenario.upper()}: {chosen['title']}\n")

    # Give every named party a real address
    names = {"owner"} | {step["caller"] for step in chosen["steps"]}
    addresses = {name: generate_keypair().address for name in sorted(names)}
    for name, address in addresses.items():
        click.echo(f"  {name:<5} = {address}")
    click.echo()

    ledger = EscrowLedger({addresses[n]: MAX_AMOUNT for n in names if n != "owner"})
    events = EventLog()
    auction = Auction(
        owner=addresses["owner"],
        config=AuctionConfig(**chosen["config"]),
        opened_at=0,
        ledger=ledger,
        sink=events,
    )

    steps = [dict(step, caller=addresses[step["caller"]]) for step in chosen["steps"]]
    run_steps(auction, steps)
    echo_results(auction, labels={address: name for name, address in addresses.items()})
    click.echo(f"Events emitted: {len(events)}")


@cli.command("run")
@click.argument("script", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print final state as JSON")
def run(script, as_json):
    """
    Replay a JSON auction script.

    The script holds "config", "owner", optional "opened_at" and
    "funds" ({participant: amount}), and a list of "steps".
    """
    from pydantic import ValidationError

    from mwa.core.auction import Auction, EventLog
    from mwa.core.config import AuctionConfig
    from mwa.core.errors import AuctionError
    from mwa.core.ledger import EscrowLedger

    try:
        data = json.loads(script.read_text())
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Invalid JSON in {script}: {exc}")

    if not isinstance(data, dict):
        raise click.ClickException("Script must be a JSON object")
    if "owner" not in data:
        raise click.ClickException("Script must define an owner")

    try:
        config = AuctionConfig.model_validate(data.get("config", {}))
        auction = Auction(
            owner=data["owner"],
            config=config,
            opened_at=data.get("opened_at", 0),
            ledger=EscrowLedger(data.get("funds", {})),
            sink=EventLog(),
        )
    except (ValidationError, AuctionError) as exc:
        raise click.ClickException(f"Invalid auction setup: {exc}")

    steps = data.get("steps", [])
    click.echo(f"▶ Replaying {len(steps)} step(s) against auction {auction.short_id}")
    rejected = run_steps(auction, steps)
    click.echo(f"  {len(steps) - rejected} accepted, {rejected} rejected")

    if as_json:
        click.echo(json.dumps(auction.stats(), indent=2, default=str))
    else:
        echo_results(auction)


@cli.command("config")
@click.option("--file", "config_file", default=None, type=click.Path(exists=True, dir_okay=False))
def show_config(config_file):
    """Show the effective auction configuration"""
    from pydantic import ValidationError

    from mwa.core.config import load_config

    try:
        config = load_config(config_file)
    except ValidationError as exc:
        raise click.ClickException(f"Invalid configuration:\n{exc}")
    except ValueError as exc:
        raise click.ClickException(f"Invalid configuration file: {exc}")

    click.echo("📋 Auction configuration:")
    for key, value in config.model_dump().items():
        click.echo(f"  {key}: {value}")


if __name__ == "__main__":
    cli()
