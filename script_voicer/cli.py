"""CLI interface with subcommand routing and batch orchestration."""

import argparse
import asyncio
import csv
import logging
import os
import re
import sys

from script_voicer.config import load_credentials, resolve_api_url, resolve_model
from script_voicer.constants import OUTPUT_DIR, VERSION
from script_voicer.errors import BatchError, MissingCredentialsError, NoValidRowsError
from script_voicer.exporter import clip_filename, export
from script_voicer.models import BatchProgress, ItemStatus, RunProgress, ScriptRow
from script_voicer.parser import ingest, inspect_records, read_script
from script_voicer.resources import AudioResourceManager
from script_voicer.scheduler import BatchScheduler
from script_voicer.store import WorkItemStore
from script_voicer.tts import SynthesisClient


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(1)


def slug_from_path(script_path: str) -> str:
    """Convert a script filename to an output directory slug.

    "Episode 1 - Script.csv" → "episode_1_script"
    """
    basename = os.path.splitext(os.path.basename(script_path))[0]
    return re.sub(r"[^a-zA-Z0-9]+", "_", basename).strip("_").lower() or "script"


def _load_records(file_path: str) -> list[dict]:
    if not os.path.exists(file_path):
        _fail(f"File not found: {file_path}")
    try:
        return read_script(file_path)
    except (csv.Error, UnicodeDecodeError) as e:
        _fail(f"Failed to parse CSV file: {e}")


def _print_progress(update: RunProgress) -> None:
    item = update.item
    label = clip_filename(item.row)
    if item.status is ItemStatus.SUCCEEDED:
        print(f"  Segment {update.current}/{update.total}: {label} done")
    else:
        print(f"  Segment {update.current}/{update.total}: {label} FAILED ({item.error})")


def _print_summary(progress: BatchProgress) -> None:
    print(
        f"Generated {progress.succeeded}/{progress.total}"
        f" ({progress.failed} failed, {progress.pending} pending)"
    )


def _confirm_retry(failed: int) -> bool:
    response = input(f"Retry {failed} failed row(s)? [y/N] ").strip().lower()
    return response in ("y", "yes")


def produce(
    rows: list[ScriptRow],
    client: SynthesisClient,
    output_dir: str,
    metadata: dict,
    interactive: bool = False,
) -> BatchProgress:
    """Run the batch (plus any operator-approved retries) and export the clips.

    Each run gets its own event loop; the retry prompt is asked between runs,
    never while a run is in progress.
    """
    with AudioResourceManager() as resources:
        store = WorkItemStore(resources)
        store.load(rows)
        scheduler = BatchScheduler(store, client)

        print(f"Generating audio for {len(rows)} rows...")
        progress = asyncio.run(scheduler.run_batch(on_progress=_print_progress))
        _print_summary(progress)

        while progress.failed and interactive and _confirm_retry(progress.failed):
            progress = asyncio.run(scheduler.run_batch(on_progress=_print_progress))
            _print_summary(progress)

        paths = export(store, output_dir, metadata)
        print(f"Exported {len(paths)} clip(s) to {output_dir}")
        store.clear()
    return progress


def cmd_run(args):
    """Synthesize every valid row of a script CSV."""
    # per-item failures already show up as progress lines
    level = logging.DEBUG if args.verbose else logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    file_path = args.file
    records = _load_records(file_path)
    rows = ingest(records)
    if not rows:
        _fail(str(NoValidRowsError()))

    credentials = load_credentials(api_key=args.api_key, group_id=args.group_id)
    if not credentials.complete:
        _fail(str(MissingCredentialsError()))

    model = resolve_model(args.model)
    slug = slug_from_path(file_path)
    output_dir = args.output or os.path.join(OUTPUT_DIR, slug)
    metadata = {"project": slug, "source": os.path.abspath(file_path), "model": model}
    interactive = sys.stdin.isatty() and not args.no_prompt

    client = SynthesisClient(credentials, model=model, api_url=resolve_api_url())
    try:
        progress = produce(rows, client, output_dir, metadata, interactive=interactive)
    except BatchError as e:
        _fail(str(e))

    if progress.failed:
        print(f"{progress.failed} row(s) failed; re-run to retry them.", file=sys.stderr)
        raise SystemExit(1)


def cmd_check(args):
    """Validate a script CSV without calling the synthesis service."""
    file_path = args.file
    records = _load_records(file_path)
    report = inspect_records(records)

    print(f"Script:  {file_path}")
    print(f"Rows:    {len(report.rows)} accepted, {len(report.skipped)} skipped")

    for skipped in report.skipped:
        print(f"  [skip] line {skipped.line}: missing {', '.join(skipped.missing)}")

    if report.rows:
        print("Cast:")
        voices = {}
        for row in report.rows:
            voices.setdefault(row.character, [])
            if row.voice_id not in voices[row.character]:
                voices[row.character].append(row.voice_id)
        for character, voice_ids in voices.items():
            print(f"  {character:<15} → {', '.join(voice_ids)}")
    else:
        _fail(str(NoValidRowsError()))


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="script-voicer",
        description="Script Voicer: batch voice synthesis for tabular scripts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run
    run_parser = subparsers.add_parser("run", help="Synthesize audio for every valid row")
    run_parser.add_argument("file", help="Path to the script CSV")
    run_parser.add_argument("--api-key", help="MiniMax API key (default: $MINIMAX_API_KEY)")
    run_parser.add_argument("--group-id", help="MiniMax group id (default: $MINIMAX_GROUP_ID)")
    run_parser.add_argument("--model", help="Speech model (default: $MINIMAX_MODEL or speech-2.6-turbo)")
    run_parser.add_argument("-o", "--output", help="Export directory (default: output/<slug>)")
    run_parser.add_argument("--no-prompt", action="store_true", help="Never ask to retry failed rows")
    run_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    run_parser.set_defaults(func=cmd_run)

    # check
    check_parser = subparsers.add_parser("check", help="Validate a script CSV")
    check_parser.add_argument("file", help="Path to the script CSV")
    check_parser.set_defaults(func=cmd_check)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    args.func(args)
