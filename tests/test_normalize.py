from utils.normalize import normalize, normalize_text


def test_normalize_strips_punctuation_and_case():
    assert normalize("The LORD, my Shepherd!") == ["the", "lord", "my", "shepherd"]


def test_normalize_collapses_whitespace():
    assert normalize("  In the\tbeginning\n\nwas   the Word ") == [
        "in", "the", "beginning", "was", "the", "word",
    ]


def test_normalize_empty_inputs():
    assert normalize("") == []
    assert normalize("   \n\t ") == []
    assert normalize(None) == []
    assert normalize("!!! ... ,,,") == []


def test_normalize_drops_apostrophes_inside_words():
    assert normalize("Don't fear; I'm with you.") == ["dont", "fear", "im", "with", "you"]


def test_normalize_keeps_digits_and_accents():
    assert normalize("Psalm 23: Dieu est mon berger, Noël") == [
        "psalm", "23", "dieu", "est", "mon", "berger", "noël",
    ]


def test_normalize_text_returns_single_spaced_string():
    assert normalize_text("  Hello,   World ") == "hello world"
