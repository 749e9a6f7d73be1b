import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off', ''}

STORAGE_BACKENDS = ('memory', 'drive', 's3')


@dataclass
class OrganizerSettings:
    review_bucket: str = "Admin Review"
    # exam files go to Prelims / Exam Papers with year and school segments
    detailed_exam_paths: bool = False
    # insert the O level subject group ("Pure Science (PP-PB-PC)") above the subject
    group_subjects: bool = False
    # known stream + unknown subject -> "<stream>/Other" instead of the review bucket
    partial_routing: bool = False
    unsorted_subject: str = "Other"
    max_key_attempts: int = 1000
    placeholder_name: str = "upload.bin"

    storage: str = "memory"
    drive_root_id: str = "root"
    drive_credentials: str = "credentials.json"
    drive_token: str = "token.json"
    s3_bucket: Optional[str] = None
    s3_endpoint_url: Optional[str] = None
    s3_prefix: str = ""

    def __post_init__(self):
        if self.max_key_attempts < 1:
            raise ConfigurationError("max_key_attempts must be at least 1")
        if self.storage not in STORAGE_BACKENDS:
            raise ConfigurationError(
                f"Unknown storage backend '{self.storage}'. Choose one of: {', '.join(STORAGE_BACKENDS)}"
            )
        if not self.review_bucket.strip('/'):
            raise ConfigurationError("review_bucket must not be empty")

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'OrganizerSettings':
        # .env values never override variables already set in the environment
        load_dotenv(env_file)
        defaults = cls()
        return cls(
            review_bucket=os.getenv("STUDY_REVIEW_BUCKET", defaults.review_bucket),
            detailed_exam_paths=_env_bool("STUDY_DETAILED_EXAM_PATHS", defaults.detailed_exam_paths),
            group_subjects=_env_bool("STUDY_GROUP_SUBJECTS", defaults.group_subjects),
            partial_routing=_env_bool("STUDY_PARTIAL_ROUTING", defaults.partial_routing),
            unsorted_subject=os.getenv("STUDY_UNSORTED_SUBJECT", defaults.unsorted_subject),
            max_key_attempts=_env_int("STUDY_MAX_KEY_ATTEMPTS", defaults.max_key_attempts),
            placeholder_name=os.getenv("STUDY_PLACEHOLDER_NAME", defaults.placeholder_name),
            storage=os.getenv("STUDY_STORAGE", defaults.storage).strip().lower(),
            drive_root_id=os.getenv("STUDY_DRIVE_ROOT_ID", defaults.drive_root_id),
            drive_credentials=os.getenv("STUDY_DRIVE_CREDENTIALS", defaults.drive_credentials),
            drive_token=os.getenv("STUDY_DRIVE_TOKEN", defaults.drive_token),
            s3_bucket=os.getenv("STUDY_S3_BUCKET") or None,
            s3_endpoint_url=os.getenv("STUDY_S3_ENDPOINT_URL") or None,
            s3_prefix=os.getenv("STUDY_S3_PREFIX", defaults.s3_prefix),
        )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got '{raw}'")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'") from None
