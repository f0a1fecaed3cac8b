"""Tests for key matchers."""

from aioquery import ALL, All, Exact, Predicate


class TestMatchers:
    """Tests for All, Exact and Predicate."""

    def test_all_matches_everything(self) -> None:
        assert ALL.matches("anything")
        assert All().matches("")

    def test_exact_is_substring_match(self) -> None:
        matcher = Exact("todo")
        assert matcher.matches("todos")
        assert matcher.matches("user:1:todos")
        assert not matcher.matches("users")

    def test_predicate_calls_function(self) -> None:
        matcher = Predicate(lambda key: key.startswith("user:"))
        assert matcher.matches("user:1")
        assert not matcher.matches("post:user:1")

    def test_matchers_are_values(self) -> None:
        assert Exact("a") == Exact("a")
        assert All() == ALL
