import pytest

from utils.grading import (
    WordSubstitution,
    compare,
    compare_texts,
    recall_passed,
)
from utils.similarity import MatchKind, SimilarityResolver

PSALM = ["the", "lord", "is", "my", "shepherd"]


class TestCompare:
    def test_empty_candidate_misses_everything(self):
        result = compare([], PSALM)
        assert result.accuracy == 0
        assert result.missing_words == PSALM
        assert result.extra_words == []
        assert result.match_mask == [False] * len(PSALM)

    def test_identical_sequences(self):
        result = compare(list(PSALM), PSALM)
        assert result.accuracy == 100
        assert result.missing_words == []
        assert result.extra_words == []
        assert result.synonyms_used == []
        assert result.fuzzy_matches == []
        assert result.match_mask == [True] * len(PSALM)

    def test_empty_reference_counts_everything_extra(self):
        result = compare(["amen", "amen"], [])
        assert result.accuracy == 0
        assert result.extra_words == ["amen", "amen"]
        assert result.missing_words == []
        assert result.match_mask == []

    def test_both_empty(self):
        result = compare([], [])
        assert result.accuracy == 0
        assert result.match_mask == []

    def test_synonym_substitution_scores_full_credit(self):
        result = compare(["god", "is", "good"], ["lord", "is", "good"])
        assert result.accuracy == 100
        assert result.synonyms_used == [WordSubstitution(used="god", reference="lord")]
        assert result.missing_words == []
        assert result.extra_words == []

    def test_inserted_word_does_not_shift_alignment(self):
        result = compare(["the", "lord", "truly", "is", "my", "shepherd"], PSALM)
        assert result.accuracy == 100
        assert result.extra_words == ["truly"]
        assert result.missing_words == []

    def test_omitted_word_is_missing(self):
        result = compare(["the", "lord", "my", "shepherd"], PSALM)
        assert result.match_mask == [True, True, False, True, True]
        assert result.missing_words == ["is"]
        assert result.accuracy == 80

    def test_typo_earns_partial_credit(self):
        result = compare(["memorise", "the", "word"], ["memorize", "the", "word"])
        assert result.fuzzy_matches == [WordSubstitution(used="memorise", reference="memorize")]
        assert result.synonyms_used == []
        assert result.match_mask == [True, True, True]
        # (0.875 + 1 + 1) / 3
        assert result.accuracy == 96

    def test_weak_typo_below_threshold_is_rejected(self):
        assert SimilarityResolver().are_equivalent("heaven", "heavy")
        result = compare(["heaven"], ["heavy"])
        assert result.accuracy == 0
        assert result.extra_words == ["heaven"]
        assert result.missing_words == ["heavy"]

    def test_threshold_is_configurable(self):
        result = compare(["memorise"], ["memorize"], fuzzy_threshold=0.9)
        assert result.accuracy == 0
        assert result.extra_words == ["memorise"]

    def test_ties_go_to_earliest_reference(self):
        result = compare(["the"], ["the", "lord", "the"])
        assert result.match_mask == [True, False, False]
        assert result.missing_words == ["lord", "the"]
        assert result.accuracy == 33

    def test_repeated_words_fill_in_order(self):
        result = compare(["the", "the"], ["the", "lord", "the"])
        assert result.match_mask == [True, False, True]

    def test_equal_scores_go_to_earliest_reference(self):
        result = compare(["god"], ["lord", "god"])
        assert result.match_mask == [True, False]
        assert result.synonyms_used == [WordSubstitution(used="god", reference="lord")]
        assert result.missing_words == ["god"]
        assert result.accuracy == 50

    def test_short_word_substitution_earns_no_credit(self):
        result = compare(["the", "lard", "is"], ["the", "lord", "is"])
        assert result.extra_words == ["lard"]
        assert result.missing_words == ["lord"]
        assert result.accuracy == 67

    def test_alignment_records_candidate_positions(self):
        result = compare(["my", "the", "lord"], PSALM)
        assert result.alignment[0].candidate_index == 1
        assert result.alignment[1].candidate_index == 2
        assert result.alignment[3].candidate_index == 0
        assert result.alignment[3].kind is MatchKind.EXACT
        assert result.alignment[2] is None

    def test_counts_are_consistent(self):
        result = compare(["lord", "my", "shepard", "amen"], PSALM)
        assert result.matched_count == sum(result.match_mask)
        assert len(result.missing_words) + result.matched_count == len(PSALM)

    def test_compare_is_idempotent(self):
        candidate = ["god", "is", "my", "shepard"]
        assert compare(candidate, PSALM) == compare(candidate, PSALM)

    def test_custom_resolver(self):
        resolver = SimilarityResolver(synonyms={"shepherd": ["pastor"]})
        result = compare(["the", "lord", "is", "my", "pastor"], PSALM, resolver=resolver)
        assert result.accuracy == 100
        assert result.synonyms_used == [WordSubstitution(used="pastor", reference="shepherd")]


def test_compare_texts_normalizes_input():
    candidate, reference, result = compare_texts("God is good!", "The Lord is good.")
    assert candidate == ["god", "is", "good"]
    assert reference == ["the", "lord", "is", "good"]
    assert result.accuracy == 75
    assert result.missing_words == ["the"]
    assert result.synonyms_used == [WordSubstitution(used="god", reference="lord")]


def test_compare_texts_uses_grading_config():
    config = {"grading": {"fuzzy_acceptance_threshold": 0.9}}
    _, _, result = compare_texts("memorise", "memorize", config)
    assert result.accuracy == 0


@pytest.mark.parametrize(
    "accuracy_words, passing, expected",
    [
        (["the", "lord", "is", "my", "shepherd"], 90, True),
        (["the", "lord", "my", "shepherd"], 90, False),
        (["the", "lord", "my", "shepherd"], 80, True),
    ],
)
def test_recall_passed(accuracy_words, passing, expected):
    assert recall_passed(compare(accuracy_words, PSALM), passing) is expected
