"""Tests for the core parser module."""

import pytest

from declarative_routing.core.parser import (
    DEFAULT_CONSTRAINT,
    RuleToken,
    TokenType,
    compile_rule,
    escape_literal,
    parse_rule,
)
from declarative_routing.exceptions import ConstraintError, RuleSyntaxError


class TestRuleToken:
    def test_frozen_dataclass(self):
        token = RuleToken("users", TokenType.LITERAL)
        with pytest.raises(AttributeError):
            token.value = "changed"

    def test_is_placeholder_for_literal(self):
        assert RuleToken("users/", TokenType.LITERAL).is_placeholder is False

    def test_is_placeholder_for_required(self):
        assert RuleToken("id", TokenType.REQUIRED).is_placeholder is True

    def test_is_placeholder_for_optional(self):
        assert RuleToken("page", TokenType.OPTIONAL).is_placeholder is True


class TestEscapeLiteral:
    def test_escapes_slash(self):
        assert escape_literal("users/edit") == "users\\/edit"

    def test_escapes_dash(self):
        assert escape_literal("blog-post") == "blog\\-post"

    def test_other_characters_pass_through(self):
        assert escape_literal("feed.xml") == "feed.xml"


class TestParseRule:
    def test_literal_only(self):
        assert parse_rule("users/list") == [RuleToken("users/list", TokenType.LITERAL)]

    def test_required_placeholder(self):
        assert parse_rule("users/{id}") == [
            RuleToken("users/", TokenType.LITERAL),
            RuleToken("id", TokenType.REQUIRED),
        ]

    def test_optional_placeholder(self):
        assert parse_rule("posts/{page?}") == [
            RuleToken("posts/", TokenType.LITERAL),
            RuleToken("page", TokenType.OPTIONAL),
        ]

    def test_literal_between_placeholders(self):
        tokens = parse_rule("{year}-{month}/archive")
        assert [t.token_type for t in tokens] == [
            TokenType.REQUIRED,
            TokenType.LITERAL,
            TokenType.REQUIRED,
            TokenType.LITERAL,
        ]
        assert tokens[1].value == "-"

    def test_empty_rule(self):
        assert parse_rule("") == []

    def test_unclosed_brace(self):
        with pytest.raises(RuleSyntaxError, match="Unclosed placeholder"):
            parse_rule("users/{id")

    def test_stray_closing_brace(self):
        with pytest.raises(RuleSyntaxError, match="Unbalanced"):
            parse_rule("users/id}")

    def test_nested_brace(self):
        with pytest.raises(RuleSyntaxError, match="Nested"):
            parse_rule("users/{{id}")

    def test_empty_name(self):
        with pytest.raises(RuleSyntaxError, match="Invalid placeholder"):
            parse_rule("users/{}")

    def test_name_starting_with_digit(self):
        with pytest.raises(RuleSyntaxError, match="Invalid placeholder"):
            parse_rule("users/{1st}")

    def test_name_with_dash(self):
        with pytest.raises(RuleSyntaxError, match="Invalid placeholder"):
            parse_rule("users/{user-id}")

    def test_duplicate_name(self):
        with pytest.raises(RuleSyntaxError, match="Duplicate placeholder 'id'"):
            parse_rule("{id}/{id?}")


class TestCompileRule:
    def test_pattern_is_anchored(self):
        compiled = compile_rule("users")
        assert compiled.pattern.match("users")
        assert compiled.pattern.match("users/list") is None
        assert compiled.pattern.match("all-users") is None

    def test_default_constraint(self):
        compiled = compile_rule("users/{id}")
        assert DEFAULT_CONSTRAINT in compiled.pattern.pattern
        assert compiled.pattern.match("users/abc_1").group("id") == "abc_1"
        assert compiled.pattern.match("users/a.b") is None

    def test_custom_constraint(self):
        compiled = compile_rule("users/{id}", {"id": r"\d+"})
        assert compiled.pattern.match("users/42")
        assert compiled.pattern.match("users/abc") is None

    def test_default_constraint_is_ascii_only(self):
        compiled = compile_rule("users/{name}")
        assert compiled.pattern.match("users/eleve")
        assert compiled.pattern.match("users/élève") is None

    def test_digit_constraint_is_ascii_only(self):
        compiled = compile_rule("users/{id}", {"id": r"\d+"})
        assert compiled.pattern.match("users/13")
        assert compiled.pattern.match("users/1٣") is None

    def test_unused_constraint_is_ignored(self):
        compiled = compile_rule("users/{id}", {"slug": "[a-z]+"})
        assert compiled.parameters == ("id",)

    def test_parameters_in_rule_order(self):
        assert compile_rule("{a}/{b?}/{c}").parameters == ("a", "b", "c")

    def test_slash_delimited_optional(self):
        compiled = compile_rule("a/{x?}")
        assert compiled.prefixes == {"x": "/"}
        assert compiled.pattern.match("a").group("x") == ""
        assert compiled.pattern.match("a/b").group("x") == "/b"
        assert compiled.pattern.match("a/") is None

    def test_dash_delimited_optional(self):
        compiled = compile_rule("item-{variant?}")
        assert compiled.prefixes == {"variant": "-"}
        assert compiled.pattern.match("item").group("variant") == ""
        assert compiled.pattern.match("item-red").group("variant") == "-red"

    def test_optional_without_delimiter(self):
        compiled = compile_rule("page{number?}", {"number": r"\d+"})
        assert compiled.prefixes == {}
        assert compiled.pattern.match("page").group("number") == ""
        assert compiled.pattern.match("page7").group("number") == "7"

    def test_required_after_slash_has_no_delimiter(self):
        assert compile_rule("users/{id}").prefixes == {}

    def test_leading_optional_placeholder(self):
        compiled = compile_rule("{lang?}")
        assert compiled.pattern.match("").group("lang") == ""
        assert compiled.pattern.match("en").group("lang") == "en"

    def test_dot_is_not_escaped(self):
        compiled = compile_rule("feed.xml")
        assert compiled.pattern.match("feed.xml")
        assert compiled.pattern.match("feedxxml")

    def test_trailing_newline_does_not_match(self):
        assert compile_rule("users").pattern.match("users\n") is None

    def test_invalid_constraint(self):
        with pytest.raises(ConstraintError, match="Invalid constraint for 'id'"):
            compile_rule("users/{id}", {"id": "[0-9"})

    def test_invalid_literal_text(self):
        with pytest.raises(RuleSyntaxError, match="does not compile"):
            compile_rule("users/(")

    def test_malformed_rule(self):
        with pytest.raises(RuleSyntaxError):
            compile_rule("users/{id")

    def test_prefixes_are_read_only(self):
        compiled = compile_rule("a/{x?}")
        with pytest.raises(TypeError):
            compiled.prefixes["y"] = "-"
