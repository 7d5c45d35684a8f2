"""
Unit tests for keyword matcher module.

Tests term containment, phrase matching and full expression evaluation.
"""

from alertbot.domain.entities import MatchResult
from alertbot.filters.expression_parser import parse_expression
from alertbot.filters.keyword_matcher import (
    contains_and_item,
    contains_keyword,
    contains_phrase,
    evaluate_expression,
    find_matches,
    highlight_keywords,
    match_keywords,
)


def _evaluate(text: str, keywords: str, ignore_keywords: str = "") -> MatchResult:
    ignore = parse_expression(ignore_keywords) if ignore_keywords else None
    return evaluate_expression(text, parse_expression(keywords), ignore)


class TestContainsKeyword:
    """Tests for single term containment."""

    def test_whole_word(self) -> None:
        assert contains_keyword("we need python devs", "python") is True
        assert contains_keyword("pythonic code", "python") is False
        assert contains_keyword("cpython internals", "python") is False

    def test_start_and_end_of_text(self) -> None:
        assert contains_keyword("python", "python") is True
        assert contains_keyword("python devs", "python") is True
        assert contains_keyword("we love python", "python") is True

    def test_case_insensitive(self) -> None:
        assert contains_keyword("We need Python devs", "python") is True
        assert contains_keyword("we need python devs", "PYTHON") is True

    def test_wildcard(self) -> None:
        assert contains_keyword("administrator needed", "admin*") is True
        assert contains_keyword("admin needed", "admin*") is True
        assert contains_keyword("readmin", "admin*") is False
        assert contains_keyword("sysadmin wanted", "admin*") is False

    def test_wildcard_non_latin(self) -> None:
        assert contains_keyword("администратор нужен", "админ*") is True
        assert contains_keyword("Администратор нужен", "админ*") is True
        assert contains_keyword("сисадмин нужен", "админ*") is False

    def test_wildcard_with_digits(self) -> None:
        assert contains_keyword("python3 only", "python*") is True

    def test_bare_wildcard_never_matches(self) -> None:
        assert contains_keyword("anything at all", "*") is False

    def test_plus_literals(self) -> None:
        assert contains_keyword("looking for c++ developer", "c++") is True
        assert contains_keyword("looking for c developer", "c++") is False

    def test_multi_word_term(self) -> None:
        assert contains_keyword("senior  python developer", "python developer") is True

    def test_empty_inputs(self) -> None:
        assert contains_keyword("", "python") is False
        assert contains_keyword("python", "") is False


class TestContainsPhrase:
    """Tests for ordered adjacent word matching."""

    def test_adjacent_in_order(self) -> None:
        text = "senior python developer wanted"
        assert contains_phrase(text, ["python", "developer"]) is True
        assert contains_phrase(text, ["developer", "python"]) is False
        assert contains_phrase(text, ["senior", "developer"]) is False

    def test_multiple_whitespace(self) -> None:
        assert contains_phrase("senior   developer", ["senior", "developer"]) is True

    def test_wildcard_word(self) -> None:
        assert contains_phrase("senior developer", ["senior", "dev*"]) is True
        assert contains_phrase("ищем разработчика python", ["ищем", "разработчик*"]) is True

    def test_bare_star_stands_for_one_word(self) -> None:
        assert contains_phrase("senior backend engineer", ["senior", "*", "engineer"]) is True
        assert contains_phrase("senior engineer", ["senior", "*", "engineer"]) is False

    def test_empty_inputs(self) -> None:
        assert contains_phrase("", ["a", "b"]) is False
        assert contains_phrase("a b", []) is False


class TestContainsAndItem:
    """Tests for +-joined items."""

    def test_all_present(self) -> None:
        assert contains_and_item("java and kotlin", "java+kotlin") is True

    def test_partially_present(self) -> None:
        assert contains_and_item("java only", "java+kotlin") is False

    def test_cpp_member(self) -> None:
        assert contains_and_item("c++ and qt developer", "c++ + qt") is True


class TestFindMatches:
    """Tests for optional/wildcard/phrase collection."""

    def test_bucket_order(self) -> None:
        expr = parse_expression("senior dev*, admin*, python")
        text = "python administrator and senior developer"
        assert find_matches(text, expr) == ["python", "admin*", "senior dev*"]


class TestEvaluateExpression:
    """Tests for full expression evaluation."""

    def test_required_term(self) -> None:
        result = _evaluate("we need python devs", "[python]")
        assert result.is_match is True
        assert result.matched_keywords == ["python"]

        result = _evaluate("we need java devs", "[python]")
        assert result.is_match is False
        assert result.matched_keywords == []

    def test_all_required_terms_needed(self) -> None:
        assert _evaluate("python and django", "[python], [django]").is_match is True
        assert _evaluate("python and flask", "[python], [django]").is_match is False

    def test_required_or_group(self) -> None:
        assert _evaluate("kotlin engineer", "[java|kotlin]").is_match is True
        assert _evaluate("scala engineer", "[java|kotlin]").is_match is False

    def test_required_or_with_and_item(self) -> None:
        keywords = "[java+kotlin/python]"
        assert _evaluate("looking for java and kotlin engineer", keywords).is_match is True
        assert _evaluate("looking for java engineer", keywords).is_match is False
        assert _evaluate("looking for python engineer", keywords).is_match is True

    def test_or_group_matches_not_reported(self) -> None:
        result = _evaluate("kotlin engineer", "[java|kotlin]")
        assert result.is_match is True
        assert result.matched_keywords == []

    def test_wildcard_term(self) -> None:
        assert _evaluate("administrator needed", "admin*").is_match is True
        assert _evaluate("readmin", "admin*").is_match is False

    def test_ignore_veto(self) -> None:
        result = _evaluate("python internship available", "python", "internship")
        assert result.is_match is False
        assert result.blocked_by_ignore is True
        assert result.ignored_keywords == ["internship"]
        assert result.matched_keywords == []

    def test_ignore_veto_beats_required(self) -> None:
        result = _evaluate("python javascript", "[python]", "java*")
        assert result.is_match is False
        assert result.blocked_by_ignore is True
        assert result.ignored_keywords == ["java*"]

    def test_ignore_without_hit(self) -> None:
        result = _evaluate("python job", "python", "internship, unpaid")
        assert result.is_match is True
        assert result.blocked_by_ignore is False

    def test_ignore_terms_are_flat(self) -> None:
        # AND groups and brackets in the ignore list act as plain veto terms
        assert _evaluate("python intern wanted", "python", "unpaid+intern").blocked_by_ignore is True
        assert _evaluate("python intern wanted", "python", "[intern]").blocked_by_ignore is True
        assert _evaluate("python junior wanted", "python", "[intern|junior]").blocked_by_ignore is True

    def test_ignore_phrase(self) -> None:
        result = _evaluate("python no experience required", "python", "no experience")
        assert result.blocked_by_ignore is True
        assert result.ignored_keywords == ["no experience"]

    def test_and_group_fully_present(self) -> None:
        result = _evaluate("docker and kubernetes", "docker+kubernetes")
        assert result.is_match is True
        assert result.matched_keywords == ["docker", "kubernetes"]

    def test_and_group_partially_present(self) -> None:
        result = _evaluate("we use docker", "docker+kubernetes")
        assert result.is_match is False
        assert result.matched_keywords == []

    def test_and_group_partial_does_not_veto_optional(self) -> None:
        result = _evaluate("docker python", "docker+kubernetes, python")
        assert result.is_match is True
        assert result.matched_keywords == ["python"]

    def test_and_group_partial_does_not_veto_required(self) -> None:
        result = _evaluate("python docker", "[python], docker+kubernetes")
        assert result.is_match is True
        assert result.matched_keywords == ["python"]

    def test_and_group_absent_is_skipped(self) -> None:
        result = _evaluate("python only", "docker+kubernetes, python")
        assert result.is_match is True
        assert result.matched_keywords == ["python"]

    def test_optional_terms(self) -> None:
        assert _evaluate("ruby developer", "java, python").is_match is False

        result = _evaluate("java developer", "java, python")
        assert result.is_match is True
        assert result.matched_keywords == ["java"]

    def test_required_criteria_need_no_optional_hit(self) -> None:
        result = _evaluate("python developer", "[python], java")
        assert result.is_match is True
        assert result.matched_keywords == ["python"]

    def test_matched_keywords_order_and_dedup(self) -> None:
        result = _evaluate(
            "python and docker and kubernetes remote",
            "[python], docker+kubernetes, remote, python",
        )
        assert result.matched_keywords == ["python", "remote", "docker", "kubernetes"]

    def test_phrase_reported_joined(self) -> None:
        result = _evaluate("hiring senior python engineers", "senior   python")
        assert result.matched_keywords == ["senior python"]

    def test_or_member_with_cpp(self) -> None:
        assert _evaluate("c++ and qt developer", "[c++ + qt/rust]").is_match is True
        assert _evaluate("c++ developer", "[c++ + qt/rust]").is_match is False

    def test_empty_text_and_expressions(self) -> None:
        assert _evaluate("", "python").is_match is False
        assert _evaluate("", "[python]").is_match is False
        assert _evaluate("", "*, [*], a+*").is_match is False
        assert _evaluate("python", "").is_match is False

    def test_results_are_independent(self) -> None:
        include = parse_expression("python")
        first = evaluate_expression("python", include)
        second = evaluate_expression("java", include)
        assert first.is_match is True
        assert second.is_match is False
        assert first is not second


class TestMatchKeywords:
    """Tests for the string-level convenience entry point."""

    def test_normalizes_text(self) -> None:
        result = match_keywords("Looking for a PYTHON developer!", "[python], remote")
        assert result.is_match is True
        assert result.matched_keywords == ["python"]

    def test_with_ignore(self) -> None:
        result = match_keywords("Python internship.", "python", "internship")
        assert result.blocked_by_ignore is True

    def test_cyrillic_message(self) -> None:
        result = match_keywords("Ищем АДМИНИСТРАТОРА, удалённо", "админ*")
        assert result.is_match is True
        assert result.matched_keywords == ["админ*"]


class TestHighlightKeywords:
    """Tests for keyword highlighting."""

    def test_highlight(self) -> None:
        text = "Python dev, remote only"
        result = match_keywords(text, "python, remote")
        assert highlight_keywords(text, result) == "**Python** dev, **remote** only"

    def test_phrase_wins_over_word(self) -> None:
        result = MatchResult(is_match=True, matched_keywords=["python", "senior python"])
        assert highlight_keywords("Senior Python dev", result) == "**Senior Python** dev"

    def test_wildcard_highlights_whole_word(self) -> None:
        result = MatchResult(is_match=True, matched_keywords=["admin*"])
        assert highlight_keywords("Administrator needed", result, "<b>{keyword}</b>") == (
            "<b>Administrator</b> needed"
        )

    def test_no_match_returns_text(self) -> None:
        result = MatchResult(is_match=False)
        assert highlight_keywords("Python dev", result) == "Python dev"
