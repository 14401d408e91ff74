from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

from Levenshtein import distance as lev_distance

# Interchangeable terms in devotional texts; a word matches any other word in its entry.
DEFAULT_SYNONYMS: Dict[str, List[str]] = {
    "lord": ["god", "master", "sovereign"],
    "father": ["dad", "creator"],
    "jesus": ["christ", "messiah", "savior", "saviour"],
    "spirit": ["comforter", "helper", "ghost"],
    "mankind": ["man", "humanity", "humankind"],
}


class MatchKind(str, Enum):
    EXACT = "exact"
    SYNONYM = "synonym"
    FUZZY = "fuzzy"
    NONE = "none"


@dataclass(frozen=True)
class TokenMatch:
    kind: MatchKind
    score: float

    @property
    def equivalent(self) -> bool:
        return self.kind is not MatchKind.NONE


NO_MATCH = TokenMatch(MatchKind.NONE, 0.0)
EXACT_MATCH = TokenMatch(MatchKind.EXACT, 1.0)
SYNONYM_MATCH = TokenMatch(MatchKind.SYNONYM, 1.0)


def merge_synonyms(
    base: Mapping[str, Iterable[str]],
    extra: Optional[Mapping[str, Iterable[str]]] = None,
) -> Dict[str, List[str]]:
    """Combine two synonym tables, extending members of keys present in both."""
    merged: Dict[str, List[str]] = {key: list(members) for key, members in base.items()}
    for key, members in (extra or {}).items():
        existing = merged.setdefault(key, [])
        for member in members:
            if member not in existing:
                existing.append(member)
    return merged


class SimilarityResolver:
    """Decides whether a candidate token stands in for a reference token.

    Checks run in order: exact equality, shared synonym entry, then typo
    tolerance. A typo is tolerated when the edit distance is at most
    ``min(max_typo_distance, len(a) // typo_length_divisor)``, so short words
    need an exact match while longer ones get a few characters of slack.

    A typo match is graded ``1 - distance / max(len(a), len(b))``. One wrong
    letter in a three or four letter word scores 0.67 to 0.75, below the
    default acceptance threshold, so such words earn no credit.
    """

    def __init__(
        self,
        synonyms: Optional[Mapping[str, Iterable[str]]] = None,
        max_typo_distance: int = 2,
        typo_length_divisor: int = 3,
    ):
        table = DEFAULT_SYNONYMS if synonyms is None else synonyms
        self.max_typo_distance = max_typo_distance
        self.typo_length_divisor = typo_length_divisor
        self._groups: Dict[str, List[FrozenSet[str]]] = {}
        for key, members in table.items():
            group = frozenset([key.lower(), *(member.lower() for member in members)])
            for word in group:
                self._groups.setdefault(word, []).append(group)

    @classmethod
    def from_config(cls, config: Dict) -> "SimilarityResolver":
        grading_cfg = config.get("grading", {})
        return cls(
            synonyms=merge_synonyms(DEFAULT_SYNONYMS, config.get("synonyms")),
            max_typo_distance=grading_cfg.get("max_typo_distance", 2),
            typo_length_divisor=grading_cfg.get("typo_length_divisor", 3),
        )

    def are_synonyms(self, a: str, b: str) -> bool:
        return any(b in group for group in self._groups.get(a, ()))

    def typo_bound(self, a: str) -> int:
        return min(self.max_typo_distance, len(a) // self.typo_length_divisor)

    def match(self, a: str, b: str) -> TokenMatch:
        if a == b:
            return EXACT_MATCH
        if self.are_synonyms(a, b):
            return SYNONYM_MATCH
        bound = self.typo_bound(a)
        if not bound:
            return NO_MATCH
        distance = lev_distance(a, b, score_cutoff=bound)
        if distance <= bound:
            return TokenMatch(MatchKind.FUZZY, 1 - distance / max(len(a), len(b)))
        return NO_MATCH

    def are_equivalent(self, a: str, b: str) -> bool:
        return self.match(a, b).equivalent


_DEFAULT_RESOLVER = SimilarityResolver()


def are_equivalent(a: str, b: str) -> bool:
    """Equivalence check against the built-in synonym table and default typo bounds."""
    return _DEFAULT_RESOLVER.are_equivalent(a, b)
