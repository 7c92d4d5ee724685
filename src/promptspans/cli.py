"""CLI tool for labeling a prompt.

Usage:
    promptspans-label "Low angle tracking shot of a man at golden hour, 24fps"
    promptspans-label --file prompt.txt --candidates tagger.json --json
    PROMPTSPANS_PRESET=strict promptspans-label "..." --validate --notes
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from promptspans.labeling.config import LABELING_PRESETS, LabelingOptions, get_labeling_config
from promptspans.labeling.pipeline import LabelingResult, SpanLabeler
from promptspans.labeling.processing.resolver import OverlapStrategy
from promptspans.labeling.vocab.taggers import DEFAULT_TAGGER_THRESHOLD, candidates_from_tagger
from promptspans.shared.logger import PipelineLogger


def _format_table(result: LabelingResult) -> str:
    """Format spans as a terminal table."""
    if not result.spans:
        return "No spans found."

    lines = [
        "Start  End    Role                     Conf  Source             Text",
        "-----  -----  -----------------------  ----  -----------------  ----",
    ]
    for span in result.spans:
        conf = f"{span.score:.2f}" if span.confidence is not None else "  - "
        text = span.text if len(span.text) <= 40 else span.text[:37] + "..."
        lines.append(
            f"{span.start:<7}{span.end:<7}{span.role:<25}{conf:<6}{span.source.value:<19}{text}"
        )
    return "\n".join(lines)


def _load_json_list(path: Path, key: str) -> list[Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list (or an object with a '{key}' list)")
    return data


@click.command()
@click.argument("text", required=False)
@click.option("--file", "text_file", type=click.Path(path_type=Path), help="Read the prompt from a file")
@click.option(
    "--candidates",
    "candidates_file",
    type=click.Path(path_type=Path),
    help="JSON list of candidate spans {text, start, end, role, confidence, source}",
)
@click.option(
    "--tagger-output",
    "tagger_file",
    type=click.Path(path_type=Path),
    help="JSON list of raw NER detections {text, label, score, start, end}",
)
@click.option(
    "--tagger-threshold",
    default=DEFAULT_TAGGER_THRESHOLD,
    type=float,
    help=f"Threshold the tagger ran with (default: {DEFAULT_TAGGER_THRESHOLD})",
)
@click.option(
    "--preset",
    default="default",
    envvar="PROMPTSPANS_PRESET",
    type=click.Choice(sorted(LABELING_PRESETS)),
    help="Configuration preset (env: PROMPTSPANS_PRESET)",
)
@click.option("--min-confidence", type=float, help="Override the confidence threshold")
@click.option("--max-spans", type=int, help="Override the span cap")
@click.option("--strict", is_flag=True, help="Drop unknown roles instead of using the fallback role")
@click.option(
    "--overlap-strategy",
    type=click.Choice([s.value for s in OverlapStrategy]),
    help="How same-category overlaps are decided",
)
@click.option("--allow-overlaps", is_flag=True, help="Skip overlap resolution")
@click.option("--validate", is_flag=True, help="Run the taxonomy audit on the result")
@click.option("--json", "json_output", is_flag=True, help="Output JSON instead of a table")
@click.option("--notes", "show_notes", is_flag=True, help="Print diagnostic notes")
@click.option("--log-file", type=click.Path(path_type=Path), help="Write INFO+ run log here")
@click.option("--trace-file", type=click.Path(path_type=Path), help="Write full trace (incl. notes) here")
@click.option("--verbose", is_flag=True, help="Echo run log lines to the console")
def main(
    text: str | None,
    text_file: Path | None,
    candidates_file: Path | None,
    tagger_file: Path | None,
    tagger_threshold: float,
    preset: str,
    min_confidence: float | None,
    max_spans: int | None,
    strict: bool,
    overlap_strategy: str | None,
    allow_overlaps: bool,
    validate: bool,
    json_output: bool,
    show_notes: bool,
    log_file: Path | None,
    trace_file: Path | None,
    verbose: bool,
) -> None:
    """Label the spans of a video prompt.

    TEXT: The prompt text (or use --file).
    """
    try:
        if text_file is not None:
            text = text_file.read_text(encoding="utf-8")
        if text is None:
            raise click.UsageError("Provide TEXT or --file")

        candidates: list[Any] = []
        if candidates_file is not None:
            candidates.extend(_load_json_list(candidates_file, "spans"))
        if tagger_file is not None:
            detections = _load_json_list(tagger_file, "detections")
            candidates.extend(candidates_from_tagger(detections, threshold=tagger_threshold))

        options = LabelingOptions(
            min_confidence=min_confidence,
            max_spans=max_spans,
            strict_mode=True if strict else None,
            overlap_strategy=overlap_strategy,
            allow_overlaps=True if allow_overlaps else None,
            validate_taxonomy=True if validate else None,
        )
        config = options.to_config(get_labeling_config(preset))
    except click.UsageError:
        raise
    except OSError as e:
        click.echo(f"Error: Could not read input: {e}", err=True)
        sys.exit(1)
    except json.JSONDecodeError as e:
        click.echo(f"Error: Invalid JSON input: {e}", err=True)
        sys.exit(1)
    except ValidationError as e:
        click.echo(f"Error: Invalid option: {e.errors()[0]['msg']}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    with PipelineLogger(log_file=log_file, trace_file=trace_file, console=verbose) as run_log:
        run_log.install_stdlib_bridge()
        run_log.section(f"Labeling ({config.name})")
        labeler = SpanLabeler(run_logger=run_log)
        result = labeler.label(text, candidates, config)
        run_log.info(f"{len(result.spans)} spans, {len(result.notes)} notes")
        run_log.summary()

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    click.echo(_format_table(result))
    if result.validation is not None:
        status = "valid" if result.validation.is_valid else "invalid"
        click.echo(f"\nTaxonomy: {status} ({len(result.validation.issues)} issues)")
        for issue in result.validation.issues:
            click.echo(f"  [{issue.severity.value}] {issue.message}")
    if show_notes and result.notes:
        click.echo("\nNotes:")
        for note in result.notes:
            click.echo(f"  - {note}")


if __name__ == "__main__":
    main()
