"""
Tests for core_intelligence.engine.highlighting.
"""

from core_intelligence.engine.highlighting import (
    build_preview,
    extract_highlights,
    highlight_terms,
    query_terms,
    tokenize,
)


class TestTokenize:
    def test_lowercases_and_drops_punctuation(self) -> None:
        assert tokenize("Hello, World!") == ["hello", "world"]

    def test_keeps_a_and_i_only_among_single_characters(self) -> None:
        assert tokenize("a b I x") == ["a", "i"]

    def test_empty(self) -> None:
        assert tokenize("") == []


class TestQueryTerms:
    def test_strips_operators_and_dedupes(self) -> None:
        assert query_terms("budget & (budget | Q3)!") == ["budget", "q3"]

    def test_whitespace_query_has_no_terms(self) -> None:
        assert query_terms("   ") == []

    def test_operators_only(self) -> None:
        assert query_terms("&|!():*") == []


class TestHighlightTerms:
    def test_wraps_case_insensitive_matches(self) -> None:
        assert highlight_terms("Budget and budget", ["budget"]) == "**Budget** and **budget**"

    def test_longest_term_wins(self) -> None:
        result = highlight_terms("Decisions and decision", ["decision", "decisions"])
        assert result == "**Decisions** and **decision**"

    def test_custom_markers(self) -> None:
        assert highlight_terms("the plan", ["plan"], "<b>", "</b>") == "the <b>plan</b>"

    def test_no_terms_returns_text(self) -> None:
        assert highlight_terms("unchanged", []) == "unchanged"


class TestExtractHighlights:
    def test_best_sentences_first(self) -> None:
        text = "The budget is set. Nothing here. Budget and timeline agreed."
        result = extract_highlights(text, ["budget", "timeline"])
        assert result == ["Budget and timeline agreed", "The budget is set"]

    def test_caps_snippets(self) -> None:
        text = ". ".join(["budget item"] * 10)
        assert len(extract_highlights(text, ["budget"], max_snippets=3)) == 3

    def test_no_match(self) -> None:
        assert extract_highlights("Nothing relevant.", ["budget"]) == []


class TestBuildPreview:
    def test_short_text_is_not_truncated(self) -> None:
        preview = build_preview("We agreed on the budget.", ["budget"])
        assert preview == "We agreed on the **budget**."

    def test_long_text_window_around_match(self) -> None:
        text = "x " * 200 + "budget" + " y" * 200
        preview = build_preview(text, ["budget"], max_chars=200)
        assert preview.startswith("...")
        assert preview.endswith("...")
        assert "**budget**" in preview

    def test_no_match_starts_at_beginning(self) -> None:
        text = "alpha " * 100
        preview = build_preview(text, ["budget"], max_chars=50)
        assert preview.startswith("alpha")
        assert preview.endswith("...")

    def test_empty_text(self) -> None:
        assert build_preview("", ["budget"]) == ""
