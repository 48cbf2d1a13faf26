"""Annotation vocabulary shared by the rules and the annotation parser.

The keyword lists follow the RBS::Inline annotation tokenizer.
"""
import re
from typing import FrozenSet, Optional, Pattern, Tuple

# Keywords that introduce an annotation without a `name:` separator.
RBS_INLINE_KEYWORDS: Tuple[str, ...] = (
    "inherits",
    "override",
    "use",
    "module-self",
    "generic",
    "skip",
    "module",
    "class",
)

# Standalone markers. Followed by `:` they only name a parameter when a type follows.
NO_ARGUMENT_KEYWORDS: FrozenSet[str] = frozenset({"override", "skip"})

# `%a{...}` style RBS annotations may follow `@rbs` without a colon.
RBS_INLINE_REGEXP_KEYWORDS: Tuple[Pattern[str], ...] = (
    re.compile(r"%a\{(\w|-)+\}"),
    re.compile(r"%a\((\w|-)+\)"),
    re.compile(r"%a\[(\w|-)+\]"),
)

# Tokens that open a doc-style method type: `# @rbs (Integer) -> void`.
METHOD_TYPE_OPENERS: Tuple[str, ...] = ("(", "[", "{", "?", "^", "->")

SIGNATURE_PATTERN = r"\(.*\)\s*(\??\s*\{.*?\}\s*)?->\s*.*"

_KEYWORD_ALTERNATION = "|".join(re.escape(keyword) for keyword in RBS_INLINE_KEYWORDS)

# `# @rbs <token>` with the prefix captured for offset arithmetic.
RBS_PREFIX_RE = re.compile(r"\A(?P<prefix>#\s+@rbs\s+)(?P<keyword>\S+)")
KEYWORD_COLON_RE = re.compile(r"\A#\s+@rbs\s+(?P<keyword>" + _KEYWORD_ALTERNATION + r"):")
EMBEDDED_RBS_RE = re.compile(r"\A#(?P<indent>\s+)@rbs!(?:\s+|\Z)")
VARIABLE_COMMENT_RE = re.compile(r"\A#\s+@rbs\s+(?:self\.)?@@?[a-zA-Z_]")
METHOD_DEFINITION_RE = re.compile(
    r"\A(?:(?:private|protected|public|private_class_method|module_function)\s+)?def\s"
)

# Shapes that look like an annotation but are not one RBS::Inline accepts.
INVALID_COMMENT_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\A#\s+" + SIGNATURE_PATTERN),
    re.compile(r"\A#\s+:\s*" + SIGNATURE_PATTERN),
    re.compile(r"\A#:\s+@rbs\s+"),
    re.compile(
        r"\A#\s*rbs\s+("
        + _KEYWORD_ALTERNATION
        + r"|\S+:|%a\{.*\}|"
        + SIGNATURE_PATTERN
        + ")"
    ),
)


def is_rbs_annotation_keyword(token: str) -> bool:
    """Return True if token may follow `@rbs` without a `:` separator."""
    if token in RBS_INLINE_KEYWORDS:
        return True
    return any(regexp.search(token) for regexp in RBS_INLINE_REGEXP_KEYWORDS)


def keyword_with_colon(text: str) -> Optional["re.Match[str]"]:
    """Match `# @rbs <keyword>:` and return the match, if any."""
    return KEYWORD_COLON_RE.match(text)
