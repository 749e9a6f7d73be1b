"""Tests for dry runs, uploads and event-driven relocation."""

from __future__ import annotations

import pytest

from study_organizer.config import OrganizerSettings
from study_organizer.errors import StorageError
from study_organizer.organizer import StudyOrganizer, created_keys
from study_organizer.storage import MemoryStorage, StoredObject

WORKSHEET = "H2 Chemistry Chapter 7 Worksheet.pdf"
WORKSHEET_KEY = f"A levels/H2 Chemistry/Chapters/Chapter 7/{WORKSHEET}"


class BrokenStorage(MemoryStorage):
    supports_conditional_put = False

    def exists(self, key: str) -> bool:
        raise StorageError("bucket unavailable", key=key)


def test_dry_run_never_touches_storage() -> None:
    storage = MemoryStorage()
    organizer = StudyOrganizer(storage)

    first = organizer.dry_run(WORKSHEET)
    second = organizer.dry_run(WORKSHEET)

    assert first == second == {"name": WORKSHEET, "target_key": WORKSHEET_KEY}
    assert storage.keys() == []


def test_dry_run_override_wins() -> None:
    result = StudyOrganizer().dry_run("uploads/blob.bin", override=f'"{WORKSHEET}" ')
    assert result == {"name": WORKSHEET, "target_key": WORKSHEET_KEY}


def test_dry_run_without_a_name() -> None:
    assert StudyOrganizer().dry_run(None) == {
        "name": "upload.bin",
        "target_key": "Admin Review/upload.bin",
    }


def test_upload_never_overwrites() -> None:
    storage = MemoryStorage()
    organizer = StudyOrganizer(storage)

    assert organizer.upload(WORKSHEET, b"v1", "application/pdf") == {"ok": True, "key": WORKSHEET_KEY}
    second = organizer.upload(WORKSHEET, b"v2", "application/pdf")

    assert second["key"] == "A levels/H2 Chemistry/Chapters/Chapter 7/H2 Chemistry Chapter 7 Worksheet (1).pdf"
    assert storage.objects[WORKSHEET_KEY].data == b"v1"
    assert storage.objects[second["key"]].data == b"v2"


def test_upload_fallback_is_a_success() -> None:
    result = StudyOrganizer().upload("random_notes.pdf", b"x")
    assert result == {"ok": True, "key": "Admin Review/random_notes.pdf"}


def test_upload_surfaces_storage_errors() -> None:
    organizer = StudyOrganizer(BrokenStorage())
    with pytest.raises(StorageError):
        organizer.upload(WORKSHEET, b"x")


def test_relocate_moves_into_place() -> None:
    storage = MemoryStorage({f"Inbox/{WORKSHEET}": StoredObject(b"pdf", "application/pdf")})
    moved = StudyOrganizer(storage).relocate(f"Inbox/{WORKSHEET}")

    assert moved.moved
    assert moved.target == WORKSHEET_KEY
    assert storage.keys() == [WORKSHEET_KEY]
    assert storage.objects[WORKSHEET_KEY].content_type == "application/pdf"


def test_relocate_leaves_placed_files_alone() -> None:
    storage = MemoryStorage({WORKSHEET_KEY: StoredObject(b"pdf", "application/pdf")})
    moved = StudyOrganizer(storage).relocate(WORKSHEET_KEY)

    assert not moved.moved
    assert storage.keys() == [WORKSHEET_KEY]


def test_relocate_does_not_clobber_existing_target() -> None:
    storage = MemoryStorage({
        WORKSHEET_KEY: StoredObject(b"old", "application/pdf"),
        f"Inbox/{WORKSHEET}": StoredObject(b"new", "application/pdf"),
    })
    moved = StudyOrganizer(storage).relocate(f"Inbox/{WORKSHEET}")

    assert moved.target.endswith("Worksheet (1).pdf")
    assert storage.objects[WORKSHEET_KEY].data == b"old"
    assert storage.objects[moved.target].data == b"new"


def test_handle_r2_event() -> None:
    storage = MemoryStorage({f"Inbox/{WORKSHEET}": StoredObject(b"pdf", "application/pdf")})
    event = {"action": "PutObject", "bucket": "notesbubble", "object": {"key": f"Inbox/{WORKSHEET}"}}

    moves = StudyOrganizer(storage).handle_event(event)

    assert [m.target for m in moves] == [WORKSHEET_KEY]


def test_handle_s3_event_decodes_keys() -> None:
    storage = MemoryStorage({f"Inbox/{WORKSHEET}": StoredObject(b"pdf", "application/pdf")})
    event = {
        "Records": [
            {
                "eventName": "ObjectCreated:Put",
                "s3": {"object": {"key": "Inbox/H2+Chemistry+Chapter+7+Worksheet.pdf"}},
            },
            {"eventName": "ObjectRemoved:Delete", "s3": {"object": {"key": "Inbox/gone.pdf"}}},
        ]
    }

    moves = StudyOrganizer(storage).handle_event(event)

    assert [m.source for m in moves] == [f"Inbox/{WORKSHEET}"]
    assert storage.keys() == [WORKSHEET_KEY]


def test_created_keys_ignores_other_actions() -> None:
    assert created_keys({"action": "DeleteObject", "object": {"key": "x.pdf"}}) == []
    assert created_keys({}) == []


def test_settings_flow_through() -> None:
    organizer = StudyOrganizer(settings=OrganizerSettings(review_bucket="Triage"))
    assert organizer.dry_run("random_notes.pdf")["target_key"] == "Triage/random_notes.pdf"


def test_relocating_a_deduplicated_copy_is_a_no_op() -> None:
    placed = "O levels/Chemistry/General Practice/Chemistry Secondary.pdf"
    storage = MemoryStorage({
        placed: StoredObject(b"old", "application/pdf"),
        "Inbox/Chemistry Secondary.pdf": StoredObject(b"new", "application/pdf"),
    })
    organizer = StudyOrganizer(storage)

    first = organizer.relocate("Inbox/Chemistry Secondary.pdf")
    assert first.target == "O levels/Chemistry/General Practice/Chemistry Secondary (1).pdf"

    second = organizer.relocate(first.target)
    assert not second.moved
    assert set(storage.keys()) == {placed, first.target}


def test_dry_run_name_matches_key_segment() -> None:
    result = StudyOrganizer().dry_run("x/'H2 Chem Notes.pdf")

    assert result["name"] == "'H2 Chem Notes.pdf"
    assert result["target_key"] == "A levels/H2 Chemistry/General Notes/'H2 Chem Notes.pdf"
    assert result["target_key"].split("/")[-1] == result["name"]
