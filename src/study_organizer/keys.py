"""Collision-free key allocation.

``put_unique`` is the write path: backends that can write-if-absent get a
single conditional put per candidate; everything else falls back to probing
with ``exists`` and then writing, which can still race with a concurrent
upload of the same name.
"""
import logging
import posixpath
from typing import Iterator

from .errors import KeyAllocationFailed
from .storage import StorageBackend

logger = logging.getLogger(__name__)


# "a/b/c (1).pdf" -> ("a/b/", "c (1)", ".pdf")
def split_key(key: str) -> tuple[str, str, str]:
    slash = key.rfind('/')
    directory = key[:slash + 1]
    base = key[slash + 1:]
    stem, ext = posixpath.splitext(base)
    return directory, stem, ext


# the key itself, then "stem (1).ext", "stem (2).ext", ...
def candidate_keys(key: str, max_attempts: int) -> Iterator[str]:
    directory, stem, ext = split_key(key)
    yield key
    for i in range(1, max_attempts):
        yield f"{directory}{stem} ({i}){ext}"


def resolve_unique_key(storage: StorageBackend, key: str, max_attempts: int = 1000) -> str:
    for candidate in candidate_keys(key, max_attempts):
        if not storage.exists(candidate):
            if candidate != key:
                logger.info("Key %s is taken, using %s", key, candidate)
            return candidate
    raise KeyAllocationFailed(key, max_attempts)


def put_unique(storage: StorageBackend, key: str, data: bytes,
               content_type: str = 'application/octet-stream', max_attempts: int = 1000) -> str:
    if not storage.supports_conditional_put:
        final_key = resolve_unique_key(storage, key, max_attempts)
        storage.put(final_key, data, content_type)
        return final_key

    for candidate in candidate_keys(key, max_attempts):
        if storage.put_if_absent(candidate, data, content_type):
            if candidate != key:
                logger.info("Key %s is taken, wrote %s", key, candidate)
            return candidate
    raise KeyAllocationFailed(key, max_attempts)
