"""Ordered, first-match-wins rule evaluation.

A rule list is evaluated by ascending ``priority``; rules that share a
priority keep the order they were declared in. The first rule that matches
decides the label, so a compound rule ("combined" + "physics") must carry a
lower priority number than the single-word rule it would otherwise lose to.
"""
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rule:
    label: str
    priority: int = 0
    # every group must contribute at least one token
    all_of: tuple[frozenset[str], ...] = ()
    # contiguous tokens, each position a set of alternatives
    phrase: tuple[frozenset[str], ...] = ()
    # searched against the normalised lowercase text
    pattern: Optional[re.Pattern] = None
    # any of these tokens vetoes the rule
    none_of: frozenset[str] = frozenset()

    def matches(self, tokens: Sequence[str], text: str = '') -> bool:
        if not (self.all_of or self.phrase or self.pattern is not None):
            return False

        present = set(tokens)
        if self.none_of & present:
            return False
        if self.all_of and not all(group & present for group in self.all_of):
            return False
        if self.phrase and not _has_phrase(tokens, self.phrase):
            return False
        if self.pattern is not None and not self.pattern.search(text):
            return False
        return True

    # tokens this rule can match on (used to tell school names from cues)
    def vocabulary(self) -> set[str]:
        words = set()
        for group in self.all_of + self.phrase:
            words |= group
        return words


def _has_phrase(tokens: Sequence[str], phrase: tuple[frozenset[str], ...]) -> bool:
    width = len(phrase)
    for start in range(len(tokens) - width + 1):
        if all(tokens[start + i] in phrase[i] for i in range(width)):
            return True
    return False


class RuleSet:
    def __init__(self, name: str, rules: Iterable[Rule]):
        self.name = name
        # sorted() is stable, so declaration order breaks priority ties
        self.rules = tuple(sorted(rules, key=lambda rule: rule.priority))

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def first_match(self, tokens: Sequence[str], text: str = '') -> Optional[Rule]:
        for rule in self.rules:
            if rule.matches(tokens, text):
                logger.debug("%s: matched %r (priority %d)", self.name, rule.label, rule.priority)
                return rule
        return None

    def classify(self, tokens: Sequence[str], text: str = '') -> Optional[str]:
        rule = self.first_match(tokens, text)
        return rule.label if rule else None

    def labels(self) -> list[str]:
        seen = []
        for rule in self.rules:
            if rule.label not in seen:
                seen.append(rule.label)
        return seen

    def vocabulary(self) -> set[str]:
        words = set()
        for rule in self.rules:
            words |= rule.vocabulary()
        return words

    # return a copy with an extra rule; the original is left untouched
    def add_rule(self, rule: Rule) -> 'RuleSet':
        return RuleSet(self.name, self.rules + (rule,))

    # get all rules that resolve to a given label
    def get_rules_for_label(self, label: str) -> list[Rule]:
        return [rule for rule in self.rules if rule.label == label]


# small constructors so the taxonomy tables read as data
def words(*alternatives: str) -> frozenset[str]:
    return frozenset(alternatives)


def any_of(label: str, *alternatives: str, priority: int = 0, none_of: Iterable[str] = ()) -> Rule:
    return Rule(label, priority, all_of=(words(*alternatives),), none_of=frozenset(none_of))


def all_of(label: str, *groups, priority: int = 0) -> Rule:
    return Rule(label, priority, all_of=tuple(_as_group(g) for g in groups))


def phrase(label: str, *positions, priority: int = 0) -> Rule:
    return Rule(label, priority, phrase=tuple(_as_group(p) for p in positions))


def pattern(label: str, regex: str, priority: int = 0) -> Rule:
    return Rule(label, priority, pattern=re.compile(regex))


def _as_group(value) -> frozenset[str]:
    if isinstance(value, str):
        return frozenset((value,))
    return frozenset(value)
