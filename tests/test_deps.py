"""Tests for dependency declaration parsing."""

from __future__ import annotations

from ofnode.deps import WILDCARD, parse_declaration, parse_dependencies


class TestParseDeclaration:
    def test_name_and_version(self) -> None:
        assert parse_declaration("koa@2.1.3") == ("koa", "2.1.3")

    def test_missing_version_is_wildcard(self) -> None:
        assert parse_declaration("koa") == ("koa", WILDCARD)

    def test_empty_version_is_wildcard(self) -> None:
        assert parse_declaration("koa@") == ("koa", "*")

    def test_scoped_with_version(self) -> None:
        assert parse_declaration("@foo/bar@1.0.0") == ("@foo/bar", "1.0.0")

    def test_scoped_without_version(self) -> None:
        assert parse_declaration("@foo/bar") == ("@foo/bar", "*")

    def test_range_constraints_kept_verbatim(self) -> None:
        assert parse_declaration("express@^4.16.2") == ("express", "^4.16.2")
        assert parse_declaration("lodash@>=4 <5") == ("lodash", ">=4 <5")

    def test_splits_on_first_at_only(self) -> None:
        assert parse_declaration("a@1@2") == ("a", "1@2")
        assert parse_declaration("@s/p@1@2") == ("@s/p", "1@2")

    def test_bare_at_sign(self) -> None:
        assert parse_declaration("@") == ("@", "*")

    def test_empty_string(self) -> None:
        assert parse_declaration("") == ("", "*")


class TestParseDependencies:
    def test_single(self) -> None:
        assert parse_dependencies(["koa@2.1.3"]) == {"koa": "2.1.3"}

    def test_scope_round_trips(self) -> None:
        assert parse_dependencies(["@foo/bar@1.0.0"]) == {"@foo/bar": "1.0.0"}

    def test_empty_input(self) -> None:
        assert parse_dependencies([]) == {}

    def test_order_independent(self) -> None:
        first = parse_dependencies(["b@1", "a@1"])
        second = parse_dependencies(["a@1", "b@1"])
        assert first == second
        assert list(first) == list(second) == ["a", "b"]

    def test_keys_follow_sorted_declarations(self) -> None:
        result = parse_dependencies(["zeta@1", "@scope/mid@2", "alpha"])
        assert list(result) == ["@scope/mid", "alpha", "zeta"]

    def test_duplicate_last_in_sorted_order_wins(self) -> None:
        result = parse_dependencies(["koa@2.0.0", "koa@1.0.0"])
        assert result == {"koa": "2.0.0"}

    def test_bare_name_sorts_before_versioned_duplicate(self) -> None:
        assert parse_dependencies(["koa@1.0.0", "koa"]) == {"koa": "1.0.0"}

    def test_accepts_any_iterable(self) -> None:
        result = parse_dependencies(d for d in ("b@2", "a"))
        assert result == {"a": "*", "b": "2"}

    def test_does_not_mutate_input(self) -> None:
        declarations = ["b@1", "a@1"]
        parse_dependencies(declarations)
        assert declarations == ["b@1", "a@1"]
