"""Tests for collision-free key allocation."""

from __future__ import annotations

import pytest

from study_organizer.errors import KeyAllocationFailed
from study_organizer.keys import candidate_keys, put_unique, resolve_unique_key, split_key
from study_organizer.storage import MemoryStorage, StorageBackend


class ExistingKeys(StorageBackend):
    """Probe-only backend: an existence predicate over a fixed key set."""

    def __init__(self, keys=()):
        self.keys = set(keys)
        self.puts: list[str] = []

    def exists(self, key: str) -> bool:
        return key in self.keys

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self.keys.add(key)
        self.puts.append(key)

    def copy(self, src: str, dst: str) -> None:
        self.keys.add(dst)

    def delete(self, key: str) -> None:
        self.keys.discard(key)


def test_split_key() -> None:
    assert split_key("A levels/H2 Chemistry/a.pdf") == ("A levels/H2 Chemistry/", "a", ".pdf")
    assert split_key("a.tar.gz") == ("", "a.tar", ".gz")
    assert split_key("x/README") == ("x/", "README", "")


def test_candidate_keys_are_capped() -> None:
    assert list(candidate_keys("d/a.pdf", 3)) == ["d/a.pdf", "d/a (1).pdf", "d/a (2).pdf"]


def test_free_key_is_returned_unchanged() -> None:
    assert resolve_unique_key(ExistingKeys(), "a.pdf") == "a.pdf"


def test_first_collision_gets_suffix_one() -> None:
    assert resolve_unique_key(ExistingKeys({"a.pdf"}), "a.pdf") == "a (1).pdf"


def test_second_collision_gets_suffix_two() -> None:
    assert resolve_unique_key(ExistingKeys({"a.pdf", "a (1).pdf"}), "a.pdf") == "a (2).pdf"


def test_suffix_lands_inside_the_folder() -> None:
    storage = ExistingKeys({"O levels/Physics/notes.pdf"})
    assert resolve_unique_key(storage, "O levels/Physics/notes.pdf") == "O levels/Physics/notes (1).pdf"


def test_names_without_extension() -> None:
    assert resolve_unique_key(ExistingKeys({"README"}), "README") == "README (1)"


def test_resolver_gives_up_after_cap() -> None:
    storage = ExistingKeys({"a.pdf", "a (1).pdf", "a (2).pdf"})
    with pytest.raises(KeyAllocationFailed) as excinfo:
        resolve_unique_key(storage, "a.pdf", max_attempts=3)
    assert excinfo.value.attempts == 3
    assert excinfo.value.key == "a.pdf"


def test_put_unique_probes_when_backend_has_no_conditional_put() -> None:
    storage = ExistingKeys({"a.pdf"})
    assert put_unique(storage, "a.pdf", b"data") == "a (1).pdf"
    assert storage.puts == ["a (1).pdf"]


def test_put_unique_uses_conditional_put() -> None:
    storage = MemoryStorage()
    assert put_unique(storage, "a.pdf", b"first", "application/pdf") == "a.pdf"
    assert put_unique(storage, "a.pdf", b"second", "application/pdf") == "a (1).pdf"

    assert storage.objects["a.pdf"].data == b"first"
    assert storage.objects["a (1).pdf"].data == b"second"
    assert storage.objects["a (1).pdf"].content_type == "application/pdf"


def test_put_unique_conditional_cap() -> None:
    storage = MemoryStorage()
    put_unique(storage, "a.pdf", b"1")
    with pytest.raises(KeyAllocationFailed):
        put_unique(storage, "a.pdf", b"2", max_attempts=1)


def test_conditional_put_is_not_implemented_by_default() -> None:
    with pytest.raises(NotImplementedError):
        ExistingKeys().put_if_absent("a.pdf", b"", "application/pdf")
