import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote_plus

from .classifier import StudyClassifier
from .config import OrganizerSettings
from .keys import put_unique, resolve_unique_key
from .router import basename, resolve_incoming_name, target_key_for
from .storage import MemoryStorage, StorageBackend

logger = logging.getLogger(__name__)

CREATE_ACTIONS = ('PutObject', 'CopyObject', 'CompleteMultipartUpload')


# outcome of moving one stored object to where it belongs
@dataclass
class Relocation:
    source: str
    target: str
    moved: bool


class StudyOrganizer:
    """Ties classification to a storage backend.

    ``dry_run`` never touches storage. ``upload`` writes under a fresh key and
    ``relocate`` moves an object that is already stored (copy, then delete).
    Storage errors propagate as ``StorageError``; nothing is retried here.
    """

    def __init__(self, storage: Optional[StorageBackend] = None,
                 settings: Optional[OrganizerSettings] = None,
                 classifier: Optional[StudyClassifier] = None):
        self.settings = settings or OrganizerSettings()
        self.storage = storage if storage is not None else MemoryStorage()
        self.classifier = classifier or StudyClassifier()

    def _name(self, name: Optional[str], override: Optional[str] = None) -> str:
        return resolve_incoming_name(name, override, placeholder=self.settings.placeholder_name)

    def target_key(self, file_name: str) -> str:
        return target_key_for(file_name, self.classifier, self.settings)

    def dry_run(self, name: Optional[str], override: Optional[str] = None) -> dict:
        file_name = self._name(name, override)
        return {'name': file_name, 'target_key': self.target_key(file_name)}

    def upload(self, name: Optional[str], data: bytes,
               content_type: str = 'application/octet-stream',
               override: Optional[str] = None) -> dict:
        file_name = self._name(name, override)
        raw_key = self.target_key(file_name)
        key = put_unique(self.storage, raw_key, data, content_type, self.settings.max_key_attempts)
        logger.info("Uploaded '%s' as %s", file_name, key)
        return {'ok': True, 'key': key}

    def relocate(self, key: str) -> Relocation:
        target = self.target_key(basename(key))
        if target == key:
            return Relocation(key, key, moved=False)

        final_key = resolve_unique_key(self.storage, target, self.settings.max_key_attempts)
        self.storage.copy(key, final_key)
        self.storage.delete(key)
        logger.info("Moved %s -> %s", key, final_key)
        return Relocation(key, final_key, moved=True)

    def handle_event(self, event: dict) -> list[Relocation]:
        return [self.relocate(key) for key in created_keys(event)]


def created_keys(event: dict) -> list[str]:
    """Object keys created according to a storage notification.

    Understands R2 event notifications (``{"action", "object": {"key"}}``) and
    S3 notifications (``{"Records": [{"eventName", "s3": {"object": {"key"}}}]}``,
    whose keys arrive URL-encoded).
    """
    if 'Records' in event:
        keys = []
        for record in event['Records']:
            if not record.get('eventName', '').startswith('ObjectCreated'):
                continue
            key = record.get('s3', {}).get('object', {}).get('key')
            if key:
                keys.append(unquote_plus(key))
        return keys

    if event.get('action') in CREATE_ACTIONS:
        key = event.get('object', {}).get('key')
        if key:
            return [key]
    return []
