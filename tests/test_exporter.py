"""Tests for exporter module (Layer 3)."""

import json
import os

import pytest

from script_voicer.exporter import clip_filename, export, clip_duration
from script_voicer.models import AudioResource, ScriptRow
from script_voicer.store import WorkItemStore


def _metadata():
    return {"project": "episode_1", "source": "episode_1.csv", "model": "speech-2.6-turbo"}


@pytest.fixture
def store(resources, sample_rows):
    store = WorkItemStore(resources)
    store.load(sample_rows)
    return store


def _succeed(store, resources, index, data=b"audio"):
    item = store.items()[index]
    store.mark_succeeded(item.id, resources.materialize(AudioResource(data=data)))


def test_clip_filename():
    row = ScriptRow(shot="001", character="Neo", voice_id="v1", text="Hello")
    assert clip_filename(row) == "001_Neo.mp3"


def test_clip_filename_strips_separators():
    row = ScriptRow(shot="1/2", character="A\\B", voice_id="v1", text="Hello")
    assert clip_filename(row) == "1_2_A_B.mp3"


def test_export_copies_succeeded_clips(tmp_path, store, resources):
    _succeed(store, resources, 0, b"one")
    _succeed(store, resources, 2, b"three")
    store.mark_failed(store.items()[1].id, "Minimax Error: rate limited")

    out = str(tmp_path / "out")
    paths = export(store, out, _metadata(), measure=False)

    assert [os.path.basename(p) for p in paths] == ["001_Neo.mp3", "003_Morpheus.mp3"]
    with open(paths[1], "rb") as f:
        assert f.read() == b"three"


def test_export_duplicate_names(tmp_path, resources):
    store = WorkItemStore(resources)
    row = ScriptRow(shot="001", character="Neo", voice_id="v1", text="Hello")
    store.load([row, row, row])
    for i in range(3):
        _succeed(store, resources, i)
    paths = export(store, str(tmp_path / "out"), _metadata(), measure=False)
    assert [os.path.basename(p) for p in paths] == ["001_Neo.mp3", "001_Neo_2.mp3", "001_Neo_3.mp3"]


def test_manifest_has_required_fields(tmp_path, store, resources):
    _succeed(store, resources, 0)
    out = str(tmp_path / "out")
    export(store, out, _metadata(), measure=False)
    with open(os.path.join(out, "output.json")) as f:
        data = json.load(f)
    for field in ["project", "source", "generated_at", "producer_version", "model", "items", "stats"]:
        assert field in data, f"Missing field: {field}"
    assert data["model"] == "speech-2.6-turbo"


def test_manifest_items_and_stats(tmp_path, store, resources):
    _succeed(store, resources, 0)
    store.mark_failed(store.items()[1].id, "API Error: 500 Internal Server Error")
    out = str(tmp_path / "out")
    export(store, out, _metadata(), measure=False)
    with open(os.path.join(out, "output.json")) as f:
        data = json.load(f)

    assert data["stats"] == {"total": 5, "succeeded": 1, "failed": 1, "pending": 3}
    first, second, third = data["items"][:3]
    assert first["status"] == "succeeded"
    assert first["file"] == "001_Neo.mp3"
    assert first["bytes"] == 5
    assert second["status"] == "failed"
    assert second["error"] == "API Error: 500 Internal Server Error"
    assert third["status"] == "pending"
    assert third["emotion"] == "calm"
    assert "file" not in third


def test_export_measures_duration(tmp_path, tiny_mp3, resources):
    store = WorkItemStore(resources)
    store.load([ScriptRow(shot="001", character="Neo", voice_id="v1", text="Hello")])
    _succeed(store, resources, 0, tiny_mp3.read_bytes())
    out = str(tmp_path / "out")
    export(store, out, _metadata())
    with open(os.path.join(out, "output.json")) as f:
        data = json.load(f)
    assert data["items"][0]["duration_seconds"] > 0


def test_clip_duration_undecodable(tmp_path):
    path = tmp_path / "junk.mp3"
    path.write_bytes(b"not audio at all")
    assert clip_duration(str(path)) is None
