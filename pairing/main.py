from __future__ import annotations

import json
from datetime import datetime, timezone
from itertools import combinations
from pathlib import Path
from typing import Dict, List, NoReturn, Optional, Tuple

import pandas as pd
import typer
from pydantic import ValidationError
from rich import print
from rich.table import Table

from .config import load_settings
from .data_models import Identity, MatchResult, PersonAttributes
from .engine import STABLE_MATCHING_MIN_SIZE, STRATEGIES, PairingEngine
from .history import record_pairs, save_attributes
from .ingest import load_attributes, load_roster
from .preferences import LOWEST_SCORE, is_previously_matched, ranked_with_scores


app = typer.Typer(help="Icebreaker pairing CLI")

INPUT_ERRORS = (FileNotFoundError, ValueError, ValidationError)


def _fail(exc: Exception) -> NoReturn:
	print(f"[red]Error:[/red] {exc}")
	raise typer.Exit(code=1)


def _load_inputs(roster_path: Path, attributes_path: Optional[Path]) -> Tuple[List[Identity], Dict[str, PersonAttributes]]:
	roster = load_roster(roster_path)
	attributes = load_attributes(attributes_path)
	return roster, attributes


def _result_rows(result: MatchResult) -> List[dict]:
	rows = []
	for i, pair in enumerate(result.pairs, start=1):
		rows.append(
			{
				"pair_index": i,
				"a_id": pair.first.id,
				"a_name": pair.first.name,
				"b_id": pair.second.id,
				"b_name": pair.second.name,
				"previously_matched": pair.previously_matched,
				"strategy": result.strategy,
			}
		)
	return rows


@app.command()
def pair(
	roster_path: Path = typer.Argument(..., help="Roster CSV (identityId, displayName)"),
	attributes_path: Optional[Path] = typer.Option(None, "--attributes", help="Attribute store JSON"),
	max_retries: Optional[int] = typer.Option(None, help="Reshuffles allowed when a repeat pair shows up"),
	seed: Optional[int] = typer.Option(None, help="Random seed for a reproducible run"),
	strategy: str = typer.Option("auto", help=f"Pairing strategy: {', '.join(STRATEGIES)}"),
	out_path: Optional[Path] = typer.Option(None, "--out", help="Write pairs CSV to this path"),
	json_out: Optional[Path] = typer.Option(None, help="Write the result records as JSON"),
	record_history: Optional[Path] = typer.Option(None, help="Write the attribute store with this run's pairs added"),
):
	"""Pair everyone on the roster for this cycle."""
	try:
		settings = load_settings()
		roster, attributes = _load_inputs(roster_path, attributes_path)

		def progress(attempt: int, max_attempts: int, repeats: int) -> None:
			note = "[green]no repeats[/green]" if repeats == 0 else f"[yellow]{repeats} repeat pair(s)[/yellow]"
			print(f"   - attempt {attempt}/{max_attempts}: {note}")

		engine = PairingEngine(
			max_retries=settings.max_retries if max_retries is None else max_retries,
			random_seed=settings.random_seed,
			progress_fn=progress,
		)
		print(f"Making {len(roster) // 2} pairs among {len(roster)} people...")
		result = engine.create_pairs(roster, attributes, seed=seed, strategy=strategy)
	except INPUT_ERRORS as e:
		_fail(e)

	if result.seed is not None:
		print(f"Random seed is {result.seed}")

	table = Table("#", "Person A", "Person B", "Repeat")
	for row in _result_rows(result):
		repeat = "[yellow]yes[/yellow]" if row["previously_matched"] else ""
		table.add_row(str(row["pair_index"]), row["a_name"], row["b_name"], repeat)
	print(table)
	if result.odd_person is not None:
		print(f"[bold]Odd person:[/bold] {result.odd_person}")
	print(
		f"[bold]Generated {len(result.pairs)} pairs[/bold] "
		f"(strategy={result.strategy}, attempts={result.attempts}, repeats={result.previously_matched_count})"
	)

	if out_path:
		pd.DataFrame(_result_rows(result)).to_csv(out_path, index=False)
		print(f"[green]Saved pairs to[/green] {out_path}")
	if json_out:
		json_out.write_text(json.dumps(result.to_records(), ensure_ascii=False, indent=2), encoding="utf-8")
		print(f"[green]Saved result records to[/green] {json_out}")
	if record_history:
		updated = record_pairs(attributes, result, matched_at=datetime.now(timezone.utc))
		save_attributes(record_history, updated)
		print(f"[green]Saved updated attribute store to[/green] {record_history}")


@app.command()
def rank(
	roster_path: Path = typer.Argument(..., help="Roster CSV (identityId, displayName)"),
	who: str = typer.Option(..., help="Identity id to rank the rest of the roster for"),
	attributes_path: Optional[Path] = typer.Option(None, "--attributes", help="Attribute store JSON"),
	top_k: int = typer.Option(15, help="Number of candidates to show"),
):
	"""Show how one person ranks everybody else on the roster."""
	try:
		roster, attributes = _load_inputs(roster_path, attributes_path)
	except INPUT_ERRORS as e:
		_fail(e)

	if not any(person.id == who for person in roster):
		_fail(ValueError(f"'{who}' is not on the roster"))
	candidates = [person for person in roster if person.id != who]

	table = Table("Rank", "Name", "Id", "Score", "Matched before")
	for position, (candidate, score) in enumerate(ranked_with_scores(who, candidates, attributes)[:top_k], start=1):
		shown = "low preference" if score == LOWEST_SCORE else str(score)
		matched = "yes" if attributes.get(who, PersonAttributes()).has_matched_with(candidate.id) else ""
		table.add_row(str(position), candidate.name, candidate.id, shown, matched)
	print(table)


@app.command()
def check(
	roster_path: Path = typer.Argument(..., help="Roster CSV (identityId, displayName)"),
	attributes_path: Optional[Path] = typer.Option(None, "--attributes", help="Attribute store JSON"),
):
	"""Summarize a roster before pairing it."""
	try:
		roster, attributes = _load_inputs(roster_path, attributes_path)
	except INPUT_ERRORS as e:
		_fail(e)

	with_records = sum(1 for person in roster if person.id in attributes)
	possible = len(roster) * (len(roster) - 1) // 2
	repeats = sum(1 for a, b in combinations(roster, 2) if is_previously_matched(a, b, attributes))

	table = Table("Metric", "Value")
	table.add_row("People", str(len(roster)))
	table.add_row("Pairs per cycle", str(len(roster) // 2))
	table.add_row("Odd person", "yes" if len(roster) % 2 else "no")
	table.add_row("With attribute records", str(with_records))
	table.add_row("Possible pairs", str(possible))
	table.add_row("Possible pairs already matched", str(repeats))
	table.add_row("Algorithm", "stable" if len(roster) >= STABLE_MATCHING_MIN_SIZE else "random")
	print(table)


if __name__ == "__main__":
	app()
