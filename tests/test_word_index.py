import logging

from inkcomplete.services.reject_list import RejectList
from inkcomplete.services.word_index import EMPTY_INDEX, WordIndex, WordIndexBuilder


def test_word_lists_bucket_and_sort_by_length():
    index = WordIndexBuilder.from_word_lists(
        ["world\nwore\nwonderful\napple\na\n", "an\r\nwork"],
        min_word_length=2,
    )
    assert index.lookup("w") == ("wore", "work", "world", "wonderful")
    assert index.lookup("a") == ("an", "apple")
    assert index.lookup("z") == ()
    assert len(index) == 6


def test_word_lists_apply_reject_list():
    index = WordIndexBuilder.from_word_lists(
        ["world\nwork\nwore"],
        min_word_length=2,
        reject_list=RejectList(["work"]),
    )
    assert "work" not in index.lookup("w")


def test_short_and_blank_lines_are_skipped():
    index = WordIndexBuilder.from_word_lists(["x\n\n   \nok"], min_word_length=2)
    assert index.words() == ["ok"]


def test_unreadable_files_are_skipped(tmp_path, caplog):
    good = tmp_path / "good.txt"
    good.write_text("hello\nhelp", encoding="utf-8")
    missing = tmp_path / "missing.txt"
    with caplog.at_level(logging.WARNING):
        index = WordIndexBuilder.from_word_files([missing, good], min_word_length=2)
    assert index.lookup("h") == ("help", "hello")
    assert "missing.txt" in caplog.text


def test_tokenize_skips_code_math_links_and_urls():
    text = "Some words `inline code` and $x^2$ plus [[Wiki Link]] see https://example.org/page ok"
    words = WordIndexBuilder.tokenize(text, character_regex="a-zA-Z", min_word_length=2)
    assert words == ["Some", "words", "and", "plus", "see", "ok"]


def test_documents_are_merged_with_base():
    base = WordIndex({"h": ["hello"]})
    index = WordIndexBuilder.from_documents(
        ["helium hello", "gamma"],
        character_regex="a-z",
        min_word_length=3,
        base=base,
    )
    assert index.lookup("h") == ("hello", "helium")
    assert index.lookup("g") == ("gamma",)
    assert base.lookup("h") == ("hello",)


def test_documents_respect_reject_list():
    index = WordIndexBuilder.from_documents(
        ["alpha beta"],
        character_regex="a-z",
        min_word_length=2,
        reject_list=RejectList(["beta"]),
    )
    assert index.words() == ["alpha"]


def test_empty_index():
    assert len(EMPTY_INDEX) == 0
    assert EMPTY_INDEX.keys() == []


def test_unclosed_markers_only_affect_their_own_line():
    text = "It costs $5 today.\nwonderful weather here\nlovely garden\nand $10 later"
    words = WordIndexBuilder.tokenize(text, character_regex="a-zA-Z", min_word_length=2)
    assert words == ["It", "costs", "today", "wonderful", "weather", "here", "lovely", "garden", "and", "later"]


def test_code_and_links_do_not_span_lines():
    text = "see `this\nnext` line [open\nclosed] end"
    words = WordIndexBuilder.tokenize(text, character_regex="a-zA-Z", min_word_length=2)
    assert words == ["see", "this", "next", "line", "open", "closed", "end"]
