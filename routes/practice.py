from fastapi import APIRouter

from config import load_config
from models.comparison import CompareRequest, ComparisonOut, HighlightOut, SubstitutionOut
from utils.grading import ComparisonResult, compare_texts, recall_passed
from utils.highlight import render

router = APIRouter()


def comparison_payload(candidate, reference, result: ComparisonResult, config: dict) -> ComparisonOut:
    """Shape a comparison and its highlighted tokens for the UI."""
    passing = config.get("grading", {}).get("passing_accuracy", 90)
    return ComparisonOut(
        accuracy=result.accuracy,
        passed=recall_passed(result, passing),
        match_mask=result.match_mask,
        missing_words=result.missing_words,
        extra_words=result.extra_words,
        synonyms_used=[
            SubstitutionOut(used=item.used, reference=item.reference)
            for item in result.synonyms_used
        ],
        fuzzy_matches=[
            SubstitutionOut(used=item.used, reference=item.reference)
            for item in result.fuzzy_matches
        ],
        highlighted=[
            HighlightOut(token=item.token, category=item.category.value, reference=item.reference)
            for item in render(candidate, reference, result)
        ],
    )


@router.post("/compare", response_model=ComparisonOut)
async def compare_recall(payload: CompareRequest):
    """Score typed or transcribed recall against the reference passage."""
    config = load_config()
    candidate, reference, result = compare_texts(payload.candidate, payload.reference, config)
    return comparison_payload(candidate, reference, result, config)
