from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from .grading import ComparisonResult
from .similarity import MatchKind


class HighlightCategory(str, Enum):
    CORRECT = "correct"
    INCORRECT_FUZZY = "incorrect-fuzzy"
    MISSING = "missing"
    EXTRA = "extra"


@dataclass(frozen=True)
class HighlightedToken:
    token: str
    category: HighlightCategory
    reference: Optional[str] = None


def render(
    candidate: Sequence[str],
    reference: Sequence[str],
    result: ComparisonResult,
) -> List[HighlightedToken]:
    """Annotate a comparison for display.

    The main line follows reference order: aligned positions show the word
    the user gave, unaligned ones show the reference word as missing. Extra
    candidate words are appended in the order they were given.
    """
    tokens: List[HighlightedToken] = []
    for ref_index, ref_word in enumerate(reference):
        aligned = result.alignment[ref_index] if ref_index < len(result.alignment) else None
        if aligned is None:
            tokens.append(HighlightedToken(ref_word, HighlightCategory.MISSING, ref_word))
            continue
        category = (
            HighlightCategory.INCORRECT_FUZZY
            if aligned.kind is MatchKind.FUZZY
            else HighlightCategory.CORRECT
        )
        tokens.append(HighlightedToken(candidate[aligned.candidate_index], category, ref_word))
    for word in result.extra_words:
        tokens.append(HighlightedToken(word, HighlightCategory.EXTRA))
    return tokens
