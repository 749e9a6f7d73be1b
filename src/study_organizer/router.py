"""Destination paths for classified files.

The one strict rule: if the stream or the subject is unknown the file goes to
``<review bucket>/<filename>`` and nowhere else. ``partial_routing`` relaxes
that for files whose stream is known.
"""
import logging
import re
from typing import Optional

from .classifier import ClassificationResult, StudyClassifier
from .config import OrganizerSettings
from .taxonomy import ResourceType, Stream

logger = logging.getLogger(__name__)

_QUOTES = re.compile(r'''^['"]+|['"]+$''')
# " (1)" .. " (999)"; four-digit years in brackets are left alone
_COPY_SUFFIX = re.compile(r' \([1-9]\d{0,2}\)(?=(\.[^.]*)?$)')

GENERAL_NOTES = "General Notes"
CHAPTERS = "Chapters"
GENERAL_PRACTICE = "General Practice"


def clean_name(raw: Optional[str]) -> str:
    if not raw:
        return ''
    return _QUOTES.sub('', raw.strip()).strip()


# final path segment only; "a/b\\c.pdf" -> "c.pdf"
def basename(path: str) -> str:
    return re.split(r'[/\\]', path)[-1]


# drop the " (n)" a collision added, so "Chemistry Secondary (1).pdf" is not read as sec 1
def strip_copy_suffix(filename: str) -> str:
    return _COPY_SUFFIX.sub('', filename)


def resolve_incoming_name(name: Optional[str], override: Optional[str] = None,
                          placeholder: str = "upload.bin") -> str:
    """Pick the filename to classify.

    An explicit override wins over a name embedded in a path-like string.
    Quotes and surrounding whitespace are stripped, only the basename is kept,
    and an empty or dot-only result becomes ``placeholder``.
    """
    chosen = clean_name(override) or clean_name(name)
    filename = basename(chosen).strip()
    if filename in ('', '.', '..'):
        return placeholder
    return filename


def join_key(*parts: str) -> str:
    segments = []
    for part in parts:
        segments.extend(s for s in part.split('/') if s)
    return '/'.join(segments)


def build_path(result: ClassificationResult, filename: str,
               settings: Optional[OrganizerSettings] = None,
               classifier: Optional[StudyClassifier] = None) -> list[str]:
    settings = settings or OrganizerSettings()

    if result.stream is None or (result.subject is None and not settings.partial_routing):
        logger.info("Could not classify %r; routing to %s", filename, settings.review_bucket)
        return [settings.review_bucket, filename]

    base = [result.stream.value]
    if result.band:
        base.append(result.band)

    if result.subject is None:
        return base + [settings.unsorted_subject, filename]

    if settings.group_subjects and result.stream is Stream.O_LEVEL:
        taxonomy = (classifier or StudyClassifier()).taxonomy
        group = taxonomy.group_for(result.subject)
        if group:
            base.append(group)

    base.append(result.subject)
    return base + type_segments(result, settings) + [filename]


def type_segments(result: ClassificationResult, settings: OrganizerSettings) -> list[str]:
    if result.resource_type is ResourceType.NOTES:
        return [GENERAL_NOTES]

    if result.resource_type is ResourceType.TOPICAL:
        if result.chapter is not None:
            return [CHAPTERS, f"Chapter {result.chapter}"]
        return [CHAPTERS]

    if result.resource_type is ResourceType.EXAM and settings.detailed_exam_paths:
        segments = [result.exam_kind]
        if result.year is not None:
            segments.append(str(result.year))
        if result.school:
            segments.append(result.school)
        return segments

    # exams and unknown -> General Practice
    return [GENERAL_PRACTICE]


def target_key_for(filename: str, classifier: Optional[StudyClassifier] = None,
                   settings: Optional[OrganizerSettings] = None) -> str:
    """Key for an already-cleaned filename; the filename itself is kept verbatim."""
    settings = settings or OrganizerSettings()
    classifier = classifier or StudyClassifier()

    result = classifier.classify(strip_copy_suffix(filename))
    key = join_key(*build_path(result, filename, settings, classifier))
    logger.debug("Target key for %r: %s", filename, key)
    return key


def determine_target_key(name: str, classifier: Optional[StudyClassifier] = None,
                         settings: Optional[OrganizerSettings] = None) -> str:
    settings = settings or OrganizerSettings()
    filename = resolve_incoming_name(name, placeholder=settings.placeholder_name)
    return target_key_for(filename, classifier, settings)
