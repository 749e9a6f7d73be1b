from .classifier import ClassificationResult, StudyClassifier
from .config import OrganizerSettings
from .errors import ConfigurationError, KeyAllocationFailed, StorageError, StudyOrganizerError
from .keys import put_unique, resolve_unique_key
from .organizer import Relocation, StudyOrganizer
from .router import determine_target_key, resolve_incoming_name, target_key_for
from .storage import MemoryStorage, S3Storage, StorageBackend
from .taxonomy import ResourceType, Stream, Taxonomy, default_taxonomy

__all__ = [
    "ClassificationResult",
    "ConfigurationError",
    "KeyAllocationFailed",
    "MemoryStorage",
    "OrganizerSettings",
    "Relocation",
    "ResourceType",
    "S3Storage",
    "StorageBackend",
    "StorageError",
    "Stream",
    "StudyClassifier",
    "StudyOrganizer",
    "StudyOrganizerError",
    "Taxonomy",
    "default_taxonomy",
    "determine_target_key",
    "put_unique",
    "resolve_incoming_name",
    "resolve_unique_key",
    "target_key_for",
]
