import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from .taxonomy import (
    EXAM_PAPERS,
    LOWER_SECONDARY,
    UPPER_SECONDARY,
    ResourceType,
    Stream,
    Taxonomy,
    default_taxonomy,
)
from .tokenizer import normalise_text, tokenize

logger = logging.getLogger(__name__)

_SEC_YEAR = re.compile(r'\bsec(?:ondary)?\s*([1-5])\b')


# what the rules concluded about a single filename
@dataclass(frozen=True)
class ClassificationResult:
    file_name: str
    stream: Optional[Stream] = None
    band: Optional[str] = None
    level: Optional[str] = None
    subject: Optional[str] = None
    resource_type: Optional[ResourceType] = None
    exam_kind: Optional[str] = None
    chapter: Optional[int] = None
    year: Optional[int] = None
    school: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.stream is not None and self.subject is not None


class StudyClassifier:
    """Rule-based classifier for study material filenames.

    Every stage reads the same token sequence; none of them depends on another's
    output except the subject decorator, which runs last.
    """

    def __init__(self, taxonomy: Optional[Taxonomy] = None):
        self.taxonomy = taxonomy or default_taxonomy()
        self._vocabulary = self.taxonomy.vocabulary()

    def classify(self, file_name: str) -> ClassificationResult:
        text = normalise_text(file_name)
        tokens = tokenize(file_name)

        stream = self.classify_stream(text, tokens)
        level = self.classify_level(tokens)
        subject = self.classify_subject(tokens, text)
        resource_type = self.classify_resource_type(text)

        result = ClassificationResult(
            file_name=file_name,
            stream=stream,
            band=self.classify_band(text, tokens) if stream is Stream.O_LEVEL else None,
            level=level,
            subject=self.decorate_subject(stream, level, subject),
            resource_type=resource_type,
            exam_kind=self.classify_exam_kind(text) if resource_type is ResourceType.EXAM else None,
            chapter=self.extract_chapter(text),
            year=self.extract_year(tokens),
            school=self.extract_school(tokens),
        )
        logger.debug("Classified %r as %s", file_name, result)
        return result

    def classify_stream(self, text: str, tokens: Sequence[str]) -> Optional[Stream]:
        label = self.taxonomy.stream_rules.classify(tokens, text)
        return Stream(label) if label else None

    def classify_level(self, tokens: Sequence[str]) -> Optional[str]:
        for token in self.taxonomy.level_tokens:
            if token in tokens:
                return token.upper()
        return None

    # upper vs lower secondary, only meaningful for the O level stream
    def classify_band(self, text: str, tokens: Sequence[str]) -> Optional[str]:
        year = self._secondary_year(text, tokens)
        if year is not None:
            return UPPER_SECONDARY if year >= self.taxonomy.upper_band_from else LOWER_SECONDARY
        if re.search(r'upper\s*secondary', text):
            return UPPER_SECONDARY
        if re.search(r'lower\s*secondary', text):
            return LOWER_SECONDARY
        return None

    def _secondary_year(self, text: str, tokens: Sequence[str]) -> Optional[int]:
        match = _SEC_YEAR.search(text)
        if match:
            return int(match.group(1))
        for current, following in zip(tokens, tokens[1:]):
            if current in ('sec', 'secondary') and following in ('1', '2', '3', '4', '5'):
                return int(following)
        return None

    def classify_subject(self, tokens: Sequence[str], text: str = '') -> Optional[str]:
        subject = self.taxonomy.subject_rules.classify(tokens, text)
        if subject:
            return subject

        # glued-together names like "chemistrynotes" never tokenise cleanly
        haystack = text or ' '.join(tokens)
        for needle, label in self.taxonomy.subject_fallbacks:
            if needle in haystack:
                logger.debug("subject: fell back to substring %r", needle)
                return label
        return None

    def classify_resource_type(self, text: str) -> Optional[ResourceType]:
        label = self.taxonomy.resource_rules.classify((), text)
        return ResourceType(label) if label else None

    def classify_exam_kind(self, text: str) -> str:
        return self.taxonomy.exam_kind_rules.classify((), text) or EXAM_PAPERS

    def decorate_subject(self, stream: Optional[Stream], level: Optional[str],
                         subject: Optional[str]) -> Optional[str]:
        if subject is None:
            return None
        if stream is Stream.A_LEVEL and level and subject in self.taxonomy.level_aware_subjects:
            return f"{level} {subject}"
        return subject

    def extract_chapter(self, text: str) -> Optional[int]:
        match = self.taxonomy.chapter_pattern.search(text)
        return int(match.group(1)) if match else None

    def extract_year(self, tokens: Sequence[str]) -> Optional[int]:
        for token in tokens:
            if self.taxonomy.year_pattern.match(token):
                return int(token)
        return None

    def extract_school(self, tokens: Sequence[str]) -> Optional[str]:
        # JC list first: A level prelims are where school names show up most
        for acronyms in (self.taxonomy.jc_schools, self.taxonomy.secondary_schools):
            for acronym in acronyms:
                if acronym in tokens:
                    return acronym.upper()
        return self._school_from_phrase(tokens)

    # "<Name> Sec" / "<Name> Secondary" -> "Name Secondary"
    def _school_from_phrase(self, tokens: Sequence[str]) -> Optional[str]:
        for i, token in enumerate(tokens):
            if token not in ('sec', 'secondary'):
                continue
            if i + 1 < len(tokens) and tokens[i + 1] in ('1', '2', '3', '4', '5'):
                continue

            name = []
            j = i - 1
            while j >= 0 and len(name) < 2:
                word = tokens[j]
                if not word.isalpha() or word in self._vocabulary:
                    break
                name.insert(0, word)
                j -= 1
            if name:
                return ' '.join(word.capitalize() for word in name) + ' Secondary'
        return None
