"""Taxonomy tables: streams, subjects, resource types and school lists.

Everything here is data. The classifier receives a ``Taxonomy`` instance, so a
deployment (or a test) can swap in its own tables with ``dataclasses.replace``.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Optional

from .rules import RuleSet, all_of, any_of, pattern, phrase, words


class Stream(str, Enum):
    A_LEVEL = "A levels"
    O_LEVEL = "O levels"
    PSLE = "PSLE"
    IP = "Integrated Programme"
    IB = "International Baccalaureate"
    UNIVERSITY = "University"


class ResourceType(str, Enum):
    EXAM = "exam"
    TOPICAL = "topical"
    NOTES = "notes"


UPPER_SECONDARY = "Upper Secondary (Secondary 3-4)"
LOWER_SECONDARY = "Lower Secondary (Secondary 1-2)"

PRELIMS = "Prelims"
EXAM_PAPERS = "Exam Papers"

JC_ACRONYMS = (
    'acjc', 'ajc', 'asrjc', 'cjc', 'dhs', 'ejc', 'hci', 'ijc', 'jjc', 'jpjc', 'mi', 'mjc', 'njc',
    'nyjc', 'pjc', 'ri', 'rvhs', 'sajc', 'srjc', 'tjc', 'tmjc', 'vjc', 'yijc', 'yjc', 'rjc',
)

SECONDARY_SCHOOL_ACRONYMS = (
    'acsi', 'acsbr', 'acss', 'bpghs', 'chij', 'chs', 'mgs', 'ngs', 'nygh', 'rgs', 'scgs', 'sji',
    'sota', 'sst', 'xms', 'zhss',
)

LEVEL_AWARE_SUBJECTS = frozenset({
    'Chemistry', 'Physics', 'Biology', 'Mathematics', 'Economics', 'Computing',
})

SEC_YEAR = words('1', '2', '3', '4', '5')
SEC = words('sec', 'secondary')


def _stream_rules() -> RuleSet:
    return RuleSet('stream', [
        # "Sec 4 ..." is secondary even when nothing says "O level"
        pattern(Stream.O_LEVEL, r'\bsec(?:ondary)?\s*[1-5]\b', priority=10),
        phrase(Stream.O_LEVEL, SEC, SEC_YEAR, priority=10),

        any_of(Stream.A_LEVEL, 'h1', 'h2', 'h3', priority=20),
        any_of(Stream.A_LEVEL, 'jc', *JC_ACRONYMS, priority=20),
        pattern(Stream.A_LEVEL, r'\ba[- ]?levels?\b', priority=20),

        pattern(Stream.O_LEVEL, r'\bo[- ]?levels?\b', priority=30),
        pattern(Stream.O_LEVEL, r'\bsecondary\b', priority=30),
        pattern(Stream.O_LEVEL, r'(upper\s*secondary|lower\s*secondary)', priority=30),

        any_of(Stream.PSLE, 'psle', 'primary', priority=40),

        any_of(Stream.IP, 'ip', priority=50),
        phrase(Stream.IP, 'integrated', ('programme', 'program'), priority=50),
        any_of(Stream.IB, 'ib', 'ibdp', priority=50),
        pattern(Stream.IB, r'\binternational\s+baccalaureate\b', priority=50),
        any_of(Stream.UNIVERSITY, 'university', 'uni', 'nus', 'ntu', 'smu', 'sutd', 'suss', priority=50),
    ])


CHEM = words('chem', 'chemistry')
PHYS = words('physics', 'phy', 'phys')
BIO = words('bio', 'biology')
MATH = words('math', 'maths', 'mathematics')
COMBINED = words('combined', 'comb')
HISTORY = words('history', 'hist')
GEOGRAPHY = words('geography', 'geog', 'geo')

# 10: compound and multi-word, 20: abbreviations, 30: single words, 40: catch-alls
def _subject_rules() -> RuleSet:
    return RuleSet('subject', [
        all_of('Pure Chemistry', 'pure', CHEM, priority=10),
        all_of('Pure Physics', 'pure', PHYS, priority=10),
        all_of('Pure Biology', 'pure', BIO, priority=10),
        all_of('Combined Chemistry', COMBINED, CHEM, priority=10),
        all_of('Combined Physics', COMBINED, PHYS, priority=10),
        all_of('Combined Biology', COMBINED, BIO, priority=10),
        all_of('Combined Science', COMBINED, ('science', 'sci'), priority=10),
        all_of('Additional Math', ('additional', 'add'), MATH, priority=10),
        phrase('Additional Math', 'a', MATH, priority=10),
        all_of('Additional Math', 'am', MATH, priority=10),
        all_of('Elementary Math', 'elementary', MATH, priority=10),
        phrase('Elementary Math', 'e', MATH, priority=10),
        all_of('Elementary Math', 'em', MATH, priority=10),
        phrase('Principles of Accounts', 'principles', 'of', 'accounts', priority=10),
        all_of('Higher Chinese', 'higher', 'chinese', priority=10),
        all_of('Higher Malay', 'higher', 'malay', priority=10),
        all_of('Higher Tamil', 'higher', 'tamil', priority=10),
        phrase('Social Studies', 'social', 'studies', priority=10),
        all_of('Elective History', 'elective', HISTORY, priority=10),
        all_of('Elective Geography', 'elective', GEOGRAPHY, priority=10),
        all_of('Pure History', 'pure', HISTORY, priority=10),
        all_of('Pure Geography', 'pure', GEOGRAPHY, priority=10),
        all_of('Pure Literature', 'pure', ('literature', 'lit'), priority=10),
        phrase('Design and Technology', 'design', 'and', 'technology', priority=10),
        phrase('Design and Technology', 'design', 'technology', priority=10),
        all_of('Nutrition and Food Science', 'nutrition', 'food', 'science', priority=10),
        phrase('General Paper', 'general', 'paper', priority=10),
        all_of('Knowledge and Inquiry', 'knowledge', 'inquiry', priority=10),
        phrase('Computing', 'computer', 'science', priority=10),

        any_of('Additional Math', 'amath', priority=20),
        any_of('Elementary Math', 'emath', priority=20),
        any_of('Principles of Accounts', 'poa', priority=20),
        any_of('Social Studies', 'ss', priority=20),
        any_of('Elective History', 'ehist', priority=20),
        any_of('Elective Geography', 'egeo', priority=20),
        any_of('Higher Chinese', 'hcl', priority=20),
        any_of('Higher Malay', 'hml', priority=20),
        any_of('Higher Tamil', 'htl', priority=20),
        any_of('Chinese', 'cl', priority=20),
        any_of('Malay', 'ml', priority=20),
        any_of('Tamil', 'tl', priority=20),
        any_of('Pure Literature', 'lit', priority=20),
        any_of('Design and Technology', 'dnt', priority=20),
        any_of('Nutrition and Food Science', 'nfs', priority=20),
        any_of('Electronics', 'elc', priority=20),
        any_of('Economics', 'econs', 'econ', priority=20),
        any_of('General Paper', 'gp', priority=20),
        any_of('Knowledge and Inquiry', 'ki', priority=20),
        any_of('English', 'el', priority=20),

        any_of('Chemistry', *CHEM, priority=30),
        any_of('Physics', *PHYS, priority=30),
        any_of('Biology', *BIO, priority=30),
        any_of('Mathematics', *MATH, priority=30),
        any_of('English', 'english', 'eng', priority=30),
        any_of('Chinese', 'chinese', priority=30),
        any_of('Malay', 'malay', priority=30),
        any_of('Tamil', 'tamil', priority=30),
        any_of('History', *HISTORY, priority=30),
        any_of('Geography', *GEOGRAPHY, priority=30),
        any_of('Literature', 'literature', priority=30),
        any_of('Economics', 'economics', priority=30),
        any_of('Computing', 'computing', priority=30),
        any_of('Electronics', 'electronics', priority=30),
        any_of('Art', 'art', priority=30),
        any_of('Music', 'music', priority=30),

        any_of('Science', 'science', 'sci', priority=40, none_of=('pure',)),
    ])


# substring lookups, only consulted when no rule matched
SUBJECT_FALLBACKS = (
    ('mathematics', 'Mathematics'),
    ('chemistry', 'Chemistry'),
    ('physics', 'Physics'),
    ('biology', 'Biology'),
    ('economics', 'Economics'),
    ('geography', 'Geography'),
    ('history', 'History'),
    ('literature', 'Literature'),
    ('computing', 'Computing'),
)

O_LEVEL_GROUPS = {
    'Pure Science (PP-PB-PC)': ('Pure Chemistry', 'Pure Physics', 'Pure Biology'),
    'Combined Science (CP-CB-CC)': (
        'Combined Chemistry', 'Combined Physics', 'Combined Biology', 'Combined Science',
    ),
    'English': ('English',),
    'Mathematics (AM-EM-POA)': (
        'Additional Math', 'Elementary Math', 'Principles of Accounts', 'Mathematics',
    ),
    'MTL (incl. Higher MTL and NTIL)': (
        'Higher Chinese', 'Higher Malay', 'Higher Tamil', 'Chinese', 'Malay', 'Tamil',
    ),
    'Elective Humanities (EH-EG-SS)': ('Social Studies', 'Elective History', 'Elective Geography'),
    'Pure Humanities (PH-PG-PL)': ('Pure History', 'Pure Geography', 'Pure Literature'),
    'Creative Arts (DNT-ART-MUS-NFS)': (
        'Design and Technology', 'Art', 'Music', 'Nutrition and Food Science',
    ),
    'Special Subjects (COM-ELC-ECN)': ('Computing', 'Electronics', 'Economics'),
}


def _resource_rules() -> RuleSet:
    return RuleSet('resource type', [
        pattern(
            ResourceType.EXAM,
            r'(\bprelim(s)?\b|\bpromo(s)?\b|\bmye\b|\beoy\b|\bmid[- ]?year\b|\bend[- ]?of[- ]?year\b'
            r'|\bpaper\s?(1|2|3|4)\b|\bp[12]\b|\bexam\b|\bpast\s?year\b|\btys\b)',
            priority=10,
        ),
        pattern(
            ResourceType.TOPICAL,
            r'(\btopical\b|\bchapter(s)?\b|\bchap\.?\b|\bch\.?\b|\btopic\b|\bunit\b'
            r'|\bworksheet(s)?\b|\bpractice\b|\brevision\b)',
            priority=20,
        ),
        pattern(
            ResourceType.NOTES,
            r'(\bnotes?\b|\bsummary\b|\bmind\s?map\b|\bcheat\s?sheet\b|\bsyllabus\b)',
            priority=30,
        ),
    ])


def _exam_kind_rules() -> RuleSet:
    return RuleSet('exam kind', [
        pattern(PRELIMS, r'\b(prelims?|promos?)\b', priority=10),
    ])


# words that mark a cue rather than part of a school's name
CUE_WORDS = frozenset({
    'a', 'o', 'and', 'of', 'the', 'for', 'level', 'levels', 'upper', 'lower', 'sec', 'secondary',
    'school', 'prelim', 'prelims', 'promo', 'promos', 'mye', 'eoy', 'exam', 'exams', 'paper',
    'papers', 'tys', 'topical', 'chapter', 'chap', 'ch', 'topic', 'unit', 'worksheet',
    'worksheets', 'practice', 'revision', 'notes', 'note', 'summary', 'syllabus', 'answers',
    'answer', 'solutions', 'pdf', 'docx',
})


@dataclass(frozen=True)
class Taxonomy:
    stream_rules: RuleSet = field(default_factory=_stream_rules)
    subject_rules: RuleSet = field(default_factory=_subject_rules)
    resource_rules: RuleSet = field(default_factory=_resource_rules)
    exam_kind_rules: RuleSet = field(default_factory=_exam_kind_rules)
    subject_fallbacks: tuple[tuple[str, str], ...] = SUBJECT_FALLBACKS
    level_tokens: tuple[str, ...] = ('h3', 'h2', 'h1')
    level_aware_subjects: frozenset[str] = LEVEL_AWARE_SUBJECTS
    upper_band_from: int = 3
    jc_schools: tuple[str, ...] = JC_ACRONYMS
    secondary_schools: tuple[str, ...] = SECONDARY_SCHOOL_ACRONYMS
    subject_groups: dict = field(default_factory=lambda: dict(O_LEVEL_GROUPS))
    chapter_pattern: re.Pattern = re.compile(r'\b(?:chapter|chap\.?|ch\.?)\s*(\d{1,2})\b')
    year_pattern: re.Pattern = re.compile(r'^(?:19|20)\d{2}$')
    cue_words: frozenset[str] = CUE_WORDS

    def group_for(self, subject: str) -> Optional[str]:
        for group, members in self.subject_groups.items():
            if subject in members:
                return group
        return None

    # every token a classifier rule can react to
    def vocabulary(self) -> frozenset[str]:
        return frozenset(
            self.stream_rules.vocabulary()
            | self.subject_rules.vocabulary()
            | self.cue_words
        )


@lru_cache(maxsize=1)
def default_taxonomy() -> Taxonomy:
    return Taxonomy()
