"""Rule parser and pattern compiler for declarative routing.

Converts path rules into anchored regular expressions:
- users            -> literal text, only "/" and "-" are escaped
- {id}             -> (?P<id>fragment) (required placeholder)
- {page?}          -> (?P<page>(?:fragment)?) (optional placeholder)
- list/{page?}     -> (?P<page>(?:\\/fragment)?) with "/" stripped from the value
- item-{variant?}  -> (?P<variant>(?:\\-fragment)?) with "-" stripped from the value
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from declarative_routing.exceptions import ConstraintError, RuleSyntaxError

# Fragment used for placeholders without an explicit constraint
DEFAULT_CONSTRAINT = r"\w+"

# \d, \w and friends match ASCII characters only
PATTERN_FLAGS = re.ASCII

# Characters escaped in literal rule text; both may act as value delimiters
DELIMITERS: tuple[str, ...] = ("/", "-")

_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class TokenType(Enum):
    """Type of a token in a path rule."""

    LITERAL = "literal"
    REQUIRED = "required"
    OPTIONAL = "optional"


@dataclass(frozen=True)
class RuleToken:
    """A parsed piece of a path rule."""

    value: str
    token_type: TokenType

    @property
    def is_placeholder(self) -> bool:
        """Check if this token captures a parameter."""
        return self.token_type is not TokenType.LITERAL


@dataclass(frozen=True)
class CompiledRule:
    """An anchored matcher together with its delimiter table.

    Attributes:
        pattern: Compiled pattern matching the whole path.
        prefixes: Placeholder name -> delimiter stripped from captured values.
        parameters: Placeholder names in rule order.
    """

    pattern: re.Pattern[str]
    prefixes: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    parameters: tuple[str, ...] = ()


def escape_literal(text: str) -> str:
    """Escape path delimiters so the regex engine treats them literally.

    Other characters pass through verbatim.

    Examples:
        "users/edit" -> "users\\/edit"
        "blog-post"  -> "blog\\-post"
    """
    for delimiter in DELIMITERS:
        text = text.replace(delimiter, "\\" + delimiter)
    return text


def _placeholder_token(inner: str, rule: str) -> RuleToken:
    optional = inner.endswith("?")
    name = inner[:-1] if optional else inner

    if not _NAME_PATTERN.match(name):
        raise RuleSyntaxError(
            f"Invalid placeholder '{{{inner}}}' in rule '{rule}'. "
            f"Names must be identifiers, optionally followed by '?'."
        )

    return RuleToken(name, TokenType.OPTIONAL if optional else TokenType.REQUIRED)


def parse_rule(rule: str) -> list[RuleToken]:
    """Split a path rule into literal and placeholder tokens.

    Adjacent literal characters are merged into a single token.

    Args:
        rule: Path rule such as "users/{id}/edit" or "posts/{page?}".

    Returns:
        List of RuleToken objects in rule order.

    Raises:
        RuleSyntaxError: If braces are unbalanced, a placeholder name is
            invalid, or the same name appears twice.

    Examples:
        "users/{id}" -> [RuleToken("users/", LITERAL), RuleToken("id", REQUIRED)]
        "{slug?}"    -> [RuleToken("slug", OPTIONAL)]
    """
    tokens: list[RuleToken] = []
    seen: set[str] = set()
    literal: list[str] = []
    index = 0

    while index < len(rule):
        char = rule[index]

        if char == "}":
            raise RuleSyntaxError(f"Unbalanced '}}' at position {index} in rule '{rule}'")

        if char != "{":
            literal.append(char)
            index += 1
            continue

        end = rule.find("}", index + 1)
        if end == -1:
            raise RuleSyntaxError(f"Unclosed placeholder at position {index} in rule '{rule}'")

        inner = rule[index + 1 : end]
        if "{" in inner:
            raise RuleSyntaxError(f"Nested '{{' at position {index} in rule '{rule}'")

        token = _placeholder_token(inner, rule)
        if token.value in seen:
            raise RuleSyntaxError(f"Duplicate placeholder '{token.value}' in rule '{rule}'")
        seen.add(token.value)

        if literal:
            tokens.append(RuleToken("".join(literal), TokenType.LITERAL))
            literal = []
        tokens.append(token)
        index = end + 1

    if literal:
        tokens.append(RuleToken("".join(literal), TokenType.LITERAL))

    return tokens


def _validate_fragment(fragment: str, name: str, rule: str) -> None:
    try:
        re.compile(fragment, PATTERN_FLAGS)
    except re.error as exc:
        raise ConstraintError(
            f"Invalid constraint for '{name}' in rule '{rule}': {exc}"
        ) from exc


def compile_rule(rule: str, constraints: Mapping[str, str] | None = None) -> CompiledRule:
    """Compile a path rule and its constraints into an anchored matcher.

    Constraint fragments are trusted and inserted without escaping.
    Constraint names with no placeholder in the rule are ignored.

    Args:
        rule: Path rule with "{name}" and "{name?}" placeholders.
        constraints: Placeholder name -> regex fragment. Placeholders
            without an entry use DEFAULT_CONSTRAINT.

    Returns:
        CompiledRule holding the pattern, delimiter table and parameter names.

    Raises:
        RuleSyntaxError: If the rule is malformed or its literal text does
            not form a valid pattern.
        ConstraintError: If a constraint fragment is not a valid regex.

    Examples:
        compile_rule("a/{x?}").pattern.pattern -> "\\Aa(?P<x>(?:\\/\\w+)?)\\Z"
        compile_rule("a/{x?}").prefixes         -> {"x": "/"}
    """
    constraints = constraints or {}
    parts: list[str] = []
    prefixes: dict[str, str] = {}
    parameters: list[str] = []

    for token in parse_rule(rule):
        if token.token_type is TokenType.LITERAL:
            parts.append(escape_literal(token.value))
            continue

        name = token.value
        parameters.append(name)
        fragment = constraints.get(name, DEFAULT_CONSTRAINT)
        _validate_fragment(fragment, name, rule)

        match token.token_type:
            case TokenType.OPTIONAL if parts and parts[-1][-2:] in ("\\/", "\\-"):
                delimiter = parts[-1][-1]
                parts[-1] = parts[-1][:-2]
                parts.append(f"(?P<{name}>(?:\\{delimiter}{fragment})?)")
                prefixes[name] = delimiter
            case TokenType.OPTIONAL:
                parts.append(f"(?P<{name}>(?:{fragment})?)")
            case TokenType.REQUIRED:
                parts.append(f"(?P<{name}>{fragment})")

    source = "\\A" + "".join(parts) + "\\Z"
    try:
        pattern = re.compile(source, PATTERN_FLAGS)
    except re.error as exc:
        raise RuleSyntaxError(f"Rule '{rule}' does not compile to a valid pattern: {exc}") from exc

    return CompiledRule(
        pattern=pattern,
        prefixes=MappingProxyType(prefixes),
        parameters=tuple(parameters),
    )
