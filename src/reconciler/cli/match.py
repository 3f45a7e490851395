#!/usr/bin/env python3
"""
Match CLI - Receipt/Charge Reconciliation Commands

Review candidates, commit or skip pairings, run auto-matching and retrain
the confidence model.
"""

import click

from ..analysis.patterns import PatternAnalyzer
from ..core.errors import ReconciliationError, TrainingInProgressError
from ..matching.models import MatchCandidate
from ..matching.normalizer import MerchantNormalizer
from ..service import ReconciliationService


def _service(ctx: click.Context) -> ReconciliationService:
    service = ctx.obj.get("service")
    if service is None:
        service = ReconciliationService.from_config(ctx.obj["config"])
        ctx.obj["service"] = service
    return service


def _echo_candidate(candidate: MatchCandidate, verbose: bool) -> None:
    receipt = candidate.receipt
    charge = candidate.charge
    click.echo(
        f"{candidate.confidence:>3}%  receipt {receipt.id} ({receipt.merchant or '?'}, "
        f"{receipt.amount or '?'}, {receipt.date or '?'})  ->  charge {charge.id} "
        f"({charge.description}, {charge.amount}, {charge.date})"
    )
    if verbose:
        click.echo(f"      rule={candidate.rule_score} learned={candidate.learned_score}")
        for reason in candidate.reasons:
            click.echo(f"      - {reason}")


@click.group()
def match() -> None:
    """Receipt/charge matching commands."""
    pass


@match.command()
@click.argument("statement_id")
@click.option("--same-statement", is_flag=True, help="Only consider receipts and charges in this statement")
@click.option("--verbose", "-v", is_flag=True, help="Show score breakdown")
@click.pass_context
def candidates(ctx: click.Context, statement_id: str, same_statement: bool, verbose: bool) -> None:
    """
    List the best charge for each unmatched receipt.

    Example:
      reconciler match candidates 2025-08
    """
    try:
        batch = _service(ctx).get_candidates(statement_id, cross_statement=not same_statement)
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(
        f"{len(batch.pairs)} candidate(s) from {len(batch.receipts)} unmatched receipt(s) "
        f"and {len(batch.charges)} unmatched charge(s)"
    )
    for candidate in batch.pairs:
        _echo_candidate(candidate, verbose or ctx.obj.get("verbose", False))


@match.command()
@click.argument("receipt_id")
@click.option("--limit", type=int, default=None, help="Number of suggestions (default from config)")
@click.pass_context
def suggest(ctx: click.Context, receipt_id: str, limit: int | None) -> None:
    """Show the top candidate charges for one receipt."""
    try:
        suggestions = _service(ctx).suggest_matches(receipt_id, limit=limit)
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    if not suggestions:
        click.echo(f"No candidate charges for receipt {receipt_id}")
        return
    for candidate in suggestions:
        _echo_candidate(candidate, ctx.obj.get("verbose", False))


@match.command()
@click.argument("receipt_id")
@click.argument("charge_id")
@click.pass_context
def commit(ctx: click.Context, receipt_id: str, charge_id: str) -> None:
    """Match a receipt to a charge."""
    try:
        receipt, charge = _service(ctx).commit_match(receipt_id, charge_id)
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"✅ Matched receipt {receipt.id} to charge {charge.id}")
    click.echo(f"  Organized path: {receipt.organized_path}")


@match.command()
@click.argument("receipt_id")
@click.pass_context
def unmatch(ctx: click.Context, receipt_id: str) -> None:
    """Remove a receipt's match."""
    try:
        receipt = _service(ctx).unmatch(receipt_id)
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Receipt {receipt.id} is now unmatched")


@match.command()
@click.argument("receipt_id")
@click.argument("charge_id")
@click.option("--reason", help="Why the suggestion was rejected")
@click.pass_context
def skip(ctx: click.Context, receipt_id: str, charge_id: str, reason: str | None) -> None:
    """Reject a suggested pairing (used as negative training data)."""
    event = _service(ctx).record_skip(receipt_id, charge_id, reason=reason)
    if event is None:
        click.echo("⚠️  Skip was not recorded (unknown receipt or charge)")
        return
    click.echo(f"Skipped receipt {receipt_id} / charge {charge_id}")


@match.command()
@click.argument("receipt_id")
@click.pass_context
def auto(ctx: click.Context, receipt_id: str) -> None:
    """Try to auto-match a receipt within its statement."""
    try:
        result = _service(ctx).attempt_auto_match(receipt_id)
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    if result.matched:
        click.echo(f"✅ Auto-matched to charge {result.charge.id} ({result.confidence}% confidence)")
    else:
        click.echo(
            f"Not matched: {result.reason} "
            f"(confidence {result.confidence}%, threshold {result.threshold}%)"
        )


@match.command()
@click.argument("receipt_id")
@click.option("--merchant", help="Merchant name")
@click.option("--amount", help="Total in dollars, e.g. 23.45")
@click.option("--date", "date_str", help="Receipt date (YYYY-MM-DD)")
@click.option("--category", help="Expense category")
@click.option(
    "--status",
    type=click.Choice(["pending", "processing", "completed"]),
    help="Processing status",
)
@click.pass_context
def update(
    ctx: click.Context,
    receipt_id: str,
    merchant: str | None,
    amount: str | None,
    date_str: str | None,
    category: str | None,
    status: str | None,
) -> None:
    """
    Update receipt fields and match progressively.

    Example:
      reconciler match update r-123 --amount 23.45 --date 2025-08-15
    """
    fields = {
        "merchant": merchant,
        "amount": amount,
        "date": date_str,
        "category": category,
        "processing_status": status,
    }
    fields = {name: value for name, value in fields.items() if value is not None}
    if not fields:
        raise click.ClickException("Nothing to update")

    try:
        result = _service(ctx).update_receipt(receipt_id, **fields)
    except (ReconciliationError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    receipt = result.receipt
    click.echo(f"Updated receipt {receipt.id} (statement: {receipt.statement_id or 'unassigned'})")
    if result.auto_matched:
        click.echo(f"✅ Auto-matched to charge {receipt.matched_charge_id} ({result.auto_match.confidence}% confidence)")
    elif result.auto_match is not None:
        click.echo(f"Not auto-matched: {result.auto_match.reason}")


@match.command()
@click.argument("receipt_id")
@click.pass_context
def assign(ctx: click.Context, receipt_id: str) -> None:
    """Assign a receipt to the statement covering its date."""
    try:
        receipt = _service(ctx).assign_statement(receipt_id)
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Receipt {receipt.id} statement: {receipt.statement_id or 'unassigned'}")
    click.echo(f"  Organized path: {receipt.organized_path}")


@match.command()
@click.pass_context
def train(ctx: click.Context) -> None:
    """Retrain the confidence model from recent matches and skips."""
    try:
        weights = _service(ctx).train()
    except TrainingInProgressError as e:
        raise click.ClickException(str(e)) from e

    if weights is None:
        click.echo("Not enough training data yet; keeping current weights")
        return

    click.echo(f"✅ Model retrained (version {weights.version}):")
    for name, value in weights.parameters().items():
        click.echo(f"  {name}: {value:.4f}")


@match.command()
@click.pass_context
def threshold(ctx: click.Context) -> None:
    """Show the current adaptive auto-match threshold."""
    click.echo(f"Adaptive threshold: {_service(ctx).adaptive_threshold()}%")


@match.command()
@click.option("--days", type=int, default=30, show_default=True, help="Look-back window")
@click.pass_context
def insights(ctx: click.Context, days: int) -> None:
    """Report recurring patterns in skipped suggestions."""
    service = _service(ctx)
    analyzer = PatternAnalyzer(service.repository, service.skip_ledger)

    found = analyzer.analyze(days=days)
    if not found:
        click.echo(f"No skip patterns found in the last {days} days")
    for insight in found:
        click.echo(f"\n{insight.description} ({insight.frequency} occurrences)")
        click.echo(f"  → {insight.recommendation}")

    merchants = analyzer.problematic_merchants(days=days)
    if merchants:
        click.echo("\nFrequently skipped merchant pairs:")
        for mismatch in merchants:
            click.echo(f"  {mismatch.receipt_merchant} / {mismatch.charge_description}: {mismatch.frequency}x")


@match.command()
@click.argument("name")
@click.argument("other", required=False)
def normalize(name: str, other: str | None) -> None:
    """
    Show the normalized form of a merchant name.

    With a second name, also show their similarity.

    Example:
      reconciler match normalize "AMZN MKTP US" "Amazon.com"
    """
    config_obj = click.get_current_context().obj["config"]
    normalizer = MerchantNormalizer()
    normalizer.load_aliases(config_obj.storage.aliases_file)

    click.echo(f"{name!r} -> {normalizer.normalize(name)!r}")
    if other is not None:
        click.echo(f"{other!r} -> {normalizer.normalize(other)!r}")
        click.echo(f"Similarity: {normalizer.similarity(name, other):.2f}")


@match.command()
@click.argument("pattern")
@click.argument("canonical")
@click.option("--regex", is_flag=True, help="Treat PATTERN as a regular expression")
@click.pass_context
def alias(ctx: click.Context, pattern: str, canonical: str, regex: bool) -> None:
    """Add a merchant alias to the aliases file."""
    aliases_file = ctx.obj["config"].storage.aliases_file
    normalizer = MerchantNormalizer(aliases=[])
    normalizer.load_aliases(aliases_file)
    try:
        normalizer.add_alias(pattern, canonical, is_regex=regex)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    normalizer.save_aliases(aliases_file)
    click.echo(f"✅ Alias added: {pattern} -> {canonical}")
