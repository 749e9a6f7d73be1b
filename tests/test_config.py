"""Tests for settings loaded from the environment and .env files."""

from __future__ import annotations

from pathlib import Path

import pytest

from study_organizer.config import OrganizerSettings
from study_organizer.errors import ConfigurationError


@pytest.fixture
def empty_env_file(tmp_path: Path) -> str:
    path = tmp_path / ".env"
    path.write_text("")
    return str(path)


def test_defaults(empty_env_file: str) -> None:
    settings = OrganizerSettings.from_env(empty_env_file)
    assert settings.review_bucket == "Admin Review"
    assert settings.storage == "memory"
    assert not settings.detailed_exam_paths
    assert settings.max_key_attempts == 1000


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, empty_env_file: str) -> None:
    monkeypatch.setenv("STUDY_REVIEW_BUCKET", "Triage")
    monkeypatch.setenv("STUDY_DETAILED_EXAM_PATHS", "yes")
    monkeypatch.setenv("STUDY_PARTIAL_ROUTING", "0")
    monkeypatch.setenv("STUDY_MAX_KEY_ATTEMPTS", "25")
    monkeypatch.setenv("STUDY_STORAGE", " S3 ")
    monkeypatch.setenv("STUDY_S3_BUCKET", "notesbubble")

    settings = OrganizerSettings.from_env(empty_env_file)

    assert settings.review_bucket == "Triage"
    assert settings.detailed_exam_paths
    assert not settings.partial_routing
    assert settings.max_key_attempts == 25
    assert settings.storage == "s3"
    assert settings.s3_bucket == "notesbubble"


def test_dotenv_file_is_read(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # set then delete so monkeypatch restores the variable afterwards
    monkeypatch.setenv("STUDY_GROUP_SUBJECTS", "placeholder")
    monkeypatch.delenv("STUDY_GROUP_SUBJECTS")
    env_file = tmp_path / ".env"
    env_file.write_text("STUDY_GROUP_SUBJECTS=true\n")

    assert OrganizerSettings.from_env(str(env_file)).group_subjects


@pytest.mark.parametrize(
    "name, value",
    [
        ("STUDY_DETAILED_EXAM_PATHS", "maybe"),
        ("STUDY_MAX_KEY_ATTEMPTS", "lots"),
        ("STUDY_MAX_KEY_ATTEMPTS", "0"),
        ("STUDY_STORAGE", "floppy"),
    ],
)
def test_invalid_values(monkeypatch: pytest.MonkeyPatch, empty_env_file: str, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        OrganizerSettings.from_env(empty_env_file)


def test_review_bucket_must_not_be_blank() -> None:
    with pytest.raises(ConfigurationError):
        OrganizerSettings(review_bucket="/")
