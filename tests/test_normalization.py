from pdfchat.ingest.normalization import normalize_text


def test_whitespace_runs_collapse_to_single_space():
    assert normalize_text("Hello \t   world") == "Hello world"


def test_line_endings_and_form_feeds_become_newlines():
    assert normalize_text("one\r\ntwo\rthree\ffour") == "one\ntwo\nthree\nfour"


def test_blank_lines_are_limited_to_one_paragraph_break():
    assert normalize_text("first  \n\n\n\n   second") == "first\n\nsecond"


def test_unicode_is_composed():
    decomposed = "Cafe\u0301"

    assert normalize_text(decomposed) == "Caf\u00e9"


def test_surrounding_whitespace_is_stripped():
    assert normalize_text("\n\n  text  \n") == "text"
