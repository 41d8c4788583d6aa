"""Shared fixtures for script voicer tests."""

import pytest
from pydub import AudioSegment

from script_voicer.config import Credentials
from script_voicer.models import ScriptRow
from script_voicer.resources import AudioResourceManager


@pytest.fixture
def tiny_mp3(tmp_path):
    """Generate a 100ms silent MP3 for testing."""
    path = tmp_path / "test.mp3"
    silence = AudioSegment.silent(duration=100)
    silence.export(str(path), format="mp3")
    return path


@pytest.fixture
def credentials():
    return Credentials.create(api_key=" key-1 ", group_id=" group-1 ")


@pytest.fixture
def sample_rows():
    """Five accepted rows, shots 001-005."""
    return [
        ScriptRow(shot="001", character="Neo", voice_id="v1", text="Hello"),
        ScriptRow(shot="002", character="Trinity", voice_id="v2", text="Follow the white rabbit."),
        ScriptRow(shot="003", character="Morpheus", voice_id="v3", text="Welcome.", emotion="calm"),
        ScriptRow(shot="004", character="Neo", voice_id="v1", text="Whoa."),
        ScriptRow(shot="005", character="Smith", voice_id="v4", text="Mr. Anderson."),
    ]


@pytest.fixture
def resources(tmp_path):
    manager = AudioResourceManager(root=str(tmp_path / "clips"))
    yield manager
    manager.close()
