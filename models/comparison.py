from pydantic import BaseModel
from typing import List, Optional

class CompareRequest(BaseModel):
    candidate: str
    reference: str

class SubstitutionOut(BaseModel):
    used: str
    reference: str

class HighlightOut(BaseModel):
    token: str
    category: str
    reference: Optional[str] = None

class ComparisonOut(BaseModel):
    accuracy: int
    passed: bool
    match_mask: List[bool]
    missing_words: List[str]
    extra_words: List[str]
    synonyms_used: List[SubstitutionOut]
    fuzzy_matches: List[SubstitutionOut]
    highlighted: List[HighlightOut]
