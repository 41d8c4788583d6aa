"""Export succeeded clips as named MP3s with a provenance manifest."""

import json
import logging
import os
import shutil
from dataclasses import asdict
from datetime import datetime, timezone

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from script_voicer.constants import AUDIO_FORMAT, MANIFEST_NAME, VERSION
from script_voicer.models import ItemStatus, ScriptRow
from script_voicer.store import WorkItemStore

logger = logging.getLogger(__name__)


def clip_filename(row: ScriptRow) -> str:
    """Download name for a row's clip: ``{Shot}_{Character}.mp3``.

    Path separators are replaced so the name always stays inside the export
    directory.
    """
    stem = f"{row.shot}_{row.character}"
    for sep in ("/", "\\", os.sep):
        stem = stem.replace(sep, "_")
    return f"{stem}.{AUDIO_FORMAT}"


def _unique_name(name: str, taken: set[str]) -> str:
    if name not in taken:
        return name
    stem, ext = os.path.splitext(name)
    n = 2
    while f"{stem}_{n}{ext}" in taken:
        n += 1
    return f"{stem}_{n}{ext}"


def clip_duration(path: str) -> float | None:
    """Clip length in seconds, or None if pydub cannot decode it."""
    try:
        audio = AudioSegment.from_file(path, format=AUDIO_FORMAT)
    except (CouldntDecodeError, IndexError, OSError) as e:
        logger.warning("Could not decode %s for duration: %s", path, e)
        return None
    return round(len(audio) / 1000, 1)


def export(
    store: WorkItemStore,
    output_dir: str,
    metadata: dict,
    measure: bool = True,
) -> list[str]:
    """Copy every succeeded clip into ``output_dir`` and write output.json.

    ``metadata`` supplies ``project``, ``source`` and ``model`` for the
    manifest. Returns the paths of the exported clips, in row order.
    """
    os.makedirs(output_dir, exist_ok=True)

    paths = []
    taken = set()
    entries = []
    for item in store.items():
        entry = {
            "shot": item.row.shot,
            "character": item.row.character,
            "voice_id": item.row.voice_id,
            "emotion": item.row.emotion,
            "status": item.status.value,
        }
        if item.status is ItemStatus.SUCCEEDED and item.handle is not None:
            name = _unique_name(clip_filename(item.row), taken)
            taken.add(name)
            path = os.path.join(output_dir, name)
            shutil.copyfile(item.handle.path, path)
            paths.append(path)
            entry["file"] = name
            entry["bytes"] = item.handle.size
            entry["duration_seconds"] = clip_duration(path) if measure else None
        elif item.status is ItemStatus.FAILED:
            entry["error"] = item.error
        entries.append(entry)

    manifest = {
        "project": metadata.get("project", ""),
        "source": metadata.get("source", ""),
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "producer_version": VERSION,
        "model": metadata.get("model", ""),
        "items": entries,
        "stats": asdict(store.progress()),
    }

    manifest_path = os.path.join(output_dir, MANIFEST_NAME)
    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2)

    return paths
