from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .normalize import normalize
from .similarity import MatchKind, SimilarityResolver, TokenMatch

DEFAULT_FUZZY_ACCEPTANCE_THRESHOLD = 0.8
DEFAULT_PASSING_ACCURACY = 90


@dataclass(frozen=True)
class WordSubstitution:
    used: str
    reference: str


@dataclass(frozen=True)
class Alignment:
    candidate_index: int
    reference_index: int
    kind: MatchKind
    score: float


@dataclass(frozen=True)
class ComparisonResult:
    match_mask: List[bool]
    missing_words: List[str]
    extra_words: List[str]
    synonyms_used: List[WordSubstitution]
    fuzzy_matches: List[WordSubstitution]
    accuracy: int
    alignment: List[Optional[Alignment]] = field(default_factory=list)

    @property
    def matched_count(self) -> int:
        return sum(1 for matched in self.match_mask if matched)


def _accepts(match: TokenMatch, fuzzy_threshold: float) -> bool:
    if match.kind in (MatchKind.EXACT, MatchKind.SYNONYM):
        return True
    return match.kind is MatchKind.FUZZY and match.score >= fuzzy_threshold


def compare(
    candidate: Sequence[str],
    reference: Sequence[str],
    resolver: Optional[SimilarityResolver] = None,
    fuzzy_threshold: float = DEFAULT_FUZZY_ACCEPTANCE_THRESHOLD,
) -> ComparisonResult:
    """Align candidate tokens to reference tokens and score the recall.

    Candidate tokens are placed greedily in input order, each taking the
    unassigned reference token it matches best; ties go to the earliest
    reference position. Accuracy is the sum of accepted match scores over the
    reference length, so typo matches earn partial credit.
    """
    resolver = resolver or SimilarityResolver()
    scores: List[List[TokenMatch]] = [
        [resolver.match(word, ref_word) for ref_word in reference] for word in candidate
    ]

    alignment: List[Optional[Alignment]] = [None] * len(reference)
    extra_words: List[str] = []
    for cand_index, row in enumerate(scores):
        best_index: Optional[int] = None
        best_match: Optional[TokenMatch] = None
        for ref_index, match in enumerate(row):
            if alignment[ref_index] is not None or not _accepts(match, fuzzy_threshold):
                continue
            if best_match is None or match.score > best_match.score:
                best_index, best_match = ref_index, match
        if best_index is None:
            extra_words.append(candidate[cand_index])
            continue
        alignment[best_index] = Alignment(cand_index, best_index, best_match.kind, best_match.score)

    match_mask = [aligned is not None for aligned in alignment]
    missing_words = [word for word, matched in zip(reference, match_mask) if not matched]
    synonyms_used: List[WordSubstitution] = []
    fuzzy_matches: List[WordSubstitution] = []
    for aligned in alignment:
        if aligned is None or aligned.kind is MatchKind.EXACT:
            continue
        substitution = WordSubstitution(
            used=candidate[aligned.candidate_index],
            reference=reference[aligned.reference_index],
        )
        if aligned.kind is MatchKind.SYNONYM:
            synonyms_used.append(substitution)
        else:
            fuzzy_matches.append(substitution)

    if reference:
        total = sum(aligned.score for aligned in alignment if aligned is not None)
        accuracy = int(round(100 * total / len(reference)))
    else:
        accuracy = 0

    return ComparisonResult(
        match_mask=match_mask,
        missing_words=missing_words,
        extra_words=extra_words,
        synonyms_used=synonyms_used,
        fuzzy_matches=fuzzy_matches,
        accuracy=accuracy,
        alignment=alignment,
    )


def compare_texts(
    candidate_text: str,
    reference_text: str,
    config: Optional[Dict] = None,
) -> Tuple[List[str], List[str], ComparisonResult]:
    """Normalize both texts and compare them, using grading settings from config."""
    config = config or {}
    grading_config = config.get("grading", {})
    resolver = SimilarityResolver.from_config(config)
    candidate = normalize(candidate_text)
    reference = normalize(reference_text)
    result = compare(
        candidate,
        reference,
        resolver=resolver,
        fuzzy_threshold=grading_config.get(
            "fuzzy_acceptance_threshold", DEFAULT_FUZZY_ACCEPTANCE_THRESHOLD
        ),
    )
    return candidate, reference, result


def recall_passed(result: ComparisonResult, passing_accuracy: int = DEFAULT_PASSING_ACCURACY) -> bool:
    """Whether a recall is close enough to count as a successful match."""
    return result.accuracy >= passing_accuracy
