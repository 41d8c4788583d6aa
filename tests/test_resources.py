"""Tests for the audio resource manager (Layer 1c)."""

import os

import pytest

from script_voicer.models import AudioResource
from script_voicer.resources import AudioResourceManager


def test_materialize_writes_file(resources):
    handle = resources.materialize(AudioResource(data=b"hello"))
    assert os.path.exists(handle.path)
    assert handle.size == 5
    assert handle.mime_type == "audio/mp3"
    assert handle.path.endswith(".mp3")
    assert resources.read(handle) == b"hello"


def test_materialize_keeps_mime_type(resources):
    handle = resources.materialize(AudioResource(data=b"x", mime_type="audio/mpeg"))
    assert handle.mime_type == "audio/mpeg"


def test_handles_are_distinct(resources):
    a = resources.materialize(AudioResource(data=b"a"))
    b = resources.materialize(AudioResource(data=b"a"))
    assert a.id != b.id
    assert a.path != b.path
    assert len(resources.live_handles()) == 2


def test_release_deletes_file(resources):
    handle = resources.materialize(AudioResource(data=b"hello"))
    resources.release(handle)
    assert not os.path.exists(handle.path)
    assert not resources.is_live(handle)
    with pytest.raises(KeyError):
        resources.read(handle)


def test_release_twice_is_noop(resources):
    handle = resources.materialize(AudioResource(data=b"hello"))
    resources.release(handle)
    resources.release(handle)
    resources.release(None)
    assert resources.live_handles() == []


def test_close_releases_everything(tmp_path):
    manager = AudioResourceManager(root=str(tmp_path / "clips"))
    handles = [manager.materialize(AudioResource(data=b"x")) for _ in range(3)]
    manager.close()
    assert manager.live_handles() == []
    for handle in handles:
        assert not os.path.exists(handle.path)
    # Caller-supplied root is left in place
    assert os.path.isdir(tmp_path / "clips")


def test_temporary_root_removed_on_exit():
    with AudioResourceManager() as manager:
        handle = manager.materialize(AudioResource(data=b"x"))
        root = os.path.dirname(handle.path)
        assert os.path.isdir(root)
    assert not os.path.exists(root)
