"""
LevelSight CLI - Command-line interface.

Runs the level analysis pipeline over a bar file and prints either a
console report or the JSON result bundle.
"""
import json
from pathlib import Path

import typer

from levelsight.data.bar_loader import load_bars
from levelsight.engine.orchestrator import Orchestrator
from levelsight.indicators.validation_utils import DataValidationError
from levelsight.shared.models.report import AnalysisResult
from levelsight.shared.models.scoring import DisplayLevels, ScoredLevel

app = typer.Typer(help="📐 LevelSight - Support/resistance confluence analysis")


def _format_level(level: ScoredLevel) -> str:
    return (
        f"   {level.id:<4} ${level.price:>10.2f}  score {level.confluence_score:>3}  "
        f"{level.strength.value:<6}  {level.distance_percent:5.2f}% away  {level.description}"
    )


def _echo_report(result: AnalysisResult, display: DisplayLevels) -> None:
    ind = result.indicators
    levels = result.levels

    typer.echo(f"\n📐 {ind.symbol} ({ind.timeframe}) - ${ind.current_price:.2f} "
               f"({ind.price_change_percent:+.2f}%) over {ind.data_points} bars")
    typer.echo("=" * 60)

    for row in result.summary.rows:
        typer.echo(f"{row.indicator:<20} {row.value:<28} {row.status_label}")
    typer.echo(f"Overextension        {result.summary.overextension_description}")

    typer.echo("\n🔴 Resistance")
    for level in sorted(display.resistance, key=lambda lv: lv.price, reverse=True):
        typer.echo(_format_level(level))
    if not display.resistance:
        typer.echo("   (none)")

    typer.echo("🟢 Support")
    for level in display.support:
        typer.echo(_format_level(level))
    if not display.support:
        typer.echo("   (none)")

    confidence = levels.confidence
    typer.echo(f"\nConfidence: {confidence.overall} ({confidence.label.value})")
    for adjustment in confidence.factors:
        typer.echo(f"   {adjustment.impact:+d} {adjustment.name}: {adjustment.reason}")

    for zones in (result.long_zones, result.short_zones):
        source = "levels" if zones.from_levels else "fallback"
        typer.echo(
            f"\n{zones.direction.value.upper():<5} entry ${zones.entry_zone.low:.2f} - ${zones.entry_zone.high:.2f} "
            f"| target ${zones.target:.2f} | stop ${zones.stop:.2f} "
            f"| R:R {zones.risk_reward_ratio:.2f}:1 ({source})"
        )


@app.command()
def analyze(
    file: Path = typer.Argument(..., help="Bar file (.csv or .json records)"),
    symbol: str = typer.Option(..., help="Instrument symbol, e.g. AAPL"),
    timeframe: str = typer.Option("1d", help="Bar interval (5m, 1h, 4h, 1d, 1w, ...)"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
    expanded: bool = typer.Option(False, "--expanded", help="Show the expanded level selection"),
):
    """
    📐 Score support and resistance levels for one bar series.

    Executes the full pipeline:
    - EMA / ATR / Bollinger / swing / Fibonacci / volume profile indicators
    - Confluence scoring and level consolidation
    - Display selection and overall confidence
    - Long and short trade zones
    """
    try:
        bars = load_bars(file)
        result = Orchestrator().analyze(bars, symbol, timeframe)
    except DataValidationError as e:
        typer.echo(f"❌ Invalid bar data: {e}", err=True)
        raise typer.Exit(code=1)

    if result is None:
        typer.echo(f"❌ Not enough data to analyze {symbol} ({len(bars)} bars)", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    display = result.levels.expanded_levels if expanded else result.levels.display_levels
    _echo_report(result, display)


@app.command()
def version():
    """Display LevelSight version information."""
    typer.echo("📐 LevelSight v0.1.0")
    typer.echo("Support/resistance confluence engine for OHLCV bars")


if __name__ == "__main__":
    app()
