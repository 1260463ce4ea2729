"""Rule-driven inline markdown engine with Discord's markdown flavour.

A grammar is an ordered table of :class:`Rule` objects.  At each cursor
position the rules are tried lowest ``order`` first (ties keep declaration
order); the first rule whose ``match`` succeeds turns its capture into a raw
node dict and the cursor moves past the captured text.  Nothing ever fails to
parse: a position no rule claims is consumed as plain text.

Only inline parsing exists.  Chat messages are a single run of inline
content, so paragraphs, lists and headings are never recognised.

An unclosed opener (``~~``, ``||``, ``<``) is rescanned from every later
position, so worst-case time is quadratic in the input length.  That is well
under a second at Discord's 4000-character message limit; callers feeding
much longer text should cap it first.

Usage::

    from speakable.markdown import BASE_RULES, parser_for

    parse = parser_for(BASE_RULES)
    parse("**hi** <@123456789012345678>")
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import emoji

from speakable.nodes import Node, from_raw

# Container rules stop matching past this nesting depth
MAX_NESTING = 32

RawNode = dict[str, Any]


@dataclass
class ParseState:
    """Mutable per-parse state shared by all rules."""

    # Text consumed by the previous capture ("" at the start of input)
    prev: str = ""
    depth: int = 0
    in_quote: bool = False


InlineParser = Callable[[str, ParseState], list[RawNode]]


@dataclass(frozen=True)
class Rule:
    """One grammar rule.

    Attributes:
        order: Precedence; lower orders are tried first.
        match: ``(source, state) -> re.Match | None``.  ``source`` is the
            unconsumed remainder of the input.
        parse: ``(match, parse_inline, state) -> raw node dict``.
    """

    order: float
    match: Callable[[str, ParseState], re.Match[str] | None]
    parse: Callable[[re.Match[str], InlineParser, ParseState], RawNode]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def nested(parse_inline: InlineParser, source: str, state: ParseState, *, quote: bool = False) -> list[RawNode]:
    """Parse *source* as the content of a container node."""
    saved_quote = state.in_quote
    state.depth += 1
    state.in_quote = state.in_quote or quote
    try:
        return parse_inline(source, state)
    finally:
        state.depth -= 1
        state.in_quote = saved_quote


def parser_for(rules: Mapping[str, Rule], *, inline: bool = True) -> Callable[[str], tuple[Node, ...]]:
    """Build a parse function ``source -> tuple[Node, ...]`` over *rules*.

    Args:
        rules: Rule table keyed by rule name.  Declaration order breaks ties
            between rules of equal ``order``.
        inline: Must be True; block-level parsing is not supported.

    Raises:
        ValueError: If ``inline`` is False.
    """
    if not inline:
        raise ValueError("only inline parsing is supported")

    ordered = [
        rule
        for _, _, rule in sorted(
            ((rule.order, index, rule) for index, rule in enumerate(rules.values())),
            key=lambda item: item[:2],
        )
    ]

    def parse_inline(source: str, state: ParseState) -> list[RawNode]:
        result: list[RawNode] = []
        while source:
            for rule in ordered:
                m = rule.match(source, state)
                # Zero-length captures would never advance the cursor
                if m is None or m.end() == 0:
                    continue
                raw = rule.parse(m, parse_inline, state)
                consumed = m.end()
                break
            else:
                raw = {"type": "text", "content": source[0]}
                consumed = 1

            state.prev = source[:consumed]
            source = source[consumed:]

            if raw.get("type") == "text" and result and result[-1].get("type") == "text":
                result[-1] = {"type": "text", "content": result[-1]["content"] + raw["content"]}
            else:
                result.append(raw)
        return result

    def parse(source: str) -> tuple[Node, ...]:
        return from_raw(parse_inline(source, ParseState()))

    return parse


# ---------------------------------------------------------------------------
# Match helpers
# ---------------------------------------------------------------------------


def match_regex(pattern: re.Pattern[str]) -> Callable[[str, ParseState], re.Match[str] | None]:
    """Match *pattern* at the start of the remaining source."""

    def match(source: str, state: ParseState) -> re.Match[str] | None:
        return pattern.match(source)

    return match


def match_container(pattern: re.Pattern[str]) -> Callable[[str, ParseState], re.Match[str] | None]:
    """Like :func:`match_regex`, but refuses to nest past ``MAX_NESTING``."""

    def match(source: str, state: ParseState) -> re.Match[str] | None:
        if state.depth >= MAX_NESTING:
            return None
        return pattern.match(source)

    return match


def _container(kind: str, group: int = 1) -> Callable[[re.Match[str], InlineParser, ParseState], RawNode]:
    def parse(m: re.Match[str], parse_inline: InlineParser, state: ParseState) -> RawNode:
        return {"type": kind, "content": nested(parse_inline, m.group(group), state)}

    return parse


# ---------------------------------------------------------------------------
# Discord base rules
# ---------------------------------------------------------------------------

_RE_CODE_BLOCK = re.compile(r"```(?:([a-z0-9_+\-.#]+?)\n)?\n*([^\n][\s\S]*?)\n*```", re.IGNORECASE)
_RE_BLOCK_QUOTE = re.compile(r" *>>> +([\s\S]*)| *> +[^\n]*(?:\n *> +[^\n]*)*\n?")
_RE_QUOTE_PREFIX = re.compile(r"^ *> ?", re.MULTILINE)
_RE_NEWLINE = re.compile(r"\n")
_RE_ESCAPE = re.compile(r"\\([^0-9A-Za-z\s])")
_RE_AUTOLINK = re.compile(r"<([^: >]+:/[^ >]+)>")
_RE_URL = re.compile(r"(https?://[^\s<]+[^<.,:;\"')\]\s])")
_RE_LINK = re.compile(
    r"\[((?:\[[^\]]*\]|[^\[\]]|\](?=[^\[]*\]))*)\]"
    r"\(\s*<?((?:\([^)]*\)|[^\s\\]|\\.)*?)>?(?:\s+['\"]([\s\S]*?)['\"])?\s*\)"
)
_RE_USER = re.compile(r"<@!?([0-9]{17,20})>")
_RE_CHANNEL = re.compile(r"<#([0-9]{17,20})>")
_RE_ROLE = re.compile(r"<@&([0-9]{17,20})>")
_RE_EVERYONE = re.compile(r"@everyone")
_RE_HERE = re.compile(r"@here")
_RE_EMOJI = re.compile(r"<(a)?:(\w+):([0-9]{17,20})>")
_RE_TIMESTAMP = re.compile(r"<t:(-?\d{1,17})(?::([DFRTdft]))?>")
_RE_STRONG = re.compile(r"\*\*((?:\\[\s\S]|[^\\])+?)\*\*(?!\*)")
_RE_UNDERLINE = re.compile(r"__((?:\\[\s\S]|[^\\])+?)__(?!_)")
_RE_EM = re.compile(
    r"\b_((?:__|\\[\s\S]|[^\\_])+?)_\b"
    r"|\*(?=\S)((?:\*\*|\\[\s\S]|\s+(?:\\[\s\S]|[^\s*\\]|\*\*)|[^\s*\\])+?)\*(?!\*)"
)
_RE_STRIKETHROUGH = re.compile(r"~~([\s\S]+?)~~(?!_)")
_RE_SPOILER = re.compile(r"\|\|([\s\S]+?)\|\|")
# Longest sequences first so ZWJ and skin-tone forms win over their prefixes
_RE_TWEMOJI = re.compile("|".join(re.escape(e) for e in sorted(emoji.EMOJI_DATA, key=len, reverse=True)))
_RE_INLINE_CODE = re.compile(r"(`+)([\s\S]*?[^`])\1(?!`)")
_RE_INLINE_CODE_PADDING = re.compile(r"^ (?= *`)|(` *) $")
_RE_BR = re.compile(r" {2,}\n")
# Stops before anything another rule could claim
_RE_TEXT = re.compile(r"[\s\S]+?(?=[^0-9A-Za-z\s\u00c0-\uffff-]|\n|\w+:\S|\Z)")


def _match_block_quote(source: str, state: ParseState) -> re.Match[str] | None:
    # Only at the start of a line, and never inside another quote
    if state.in_quote or state.depth >= MAX_NESTING:
        return None
    if state.prev and not state.prev.endswith("\n"):
        return None
    return _RE_BLOCK_QUOTE.match(source)


def _parse_block_quote(m: re.Match[str], parse_inline: InlineParser, state: ParseState) -> RawNode:
    if m.group(1) is not None:
        body = m.group(1)
    else:
        body = _RE_QUOTE_PREFIX.sub("", m.group(0))
    return {"type": "blockQuote", "content": nested(parse_inline, body, state, quote=True)}


def _parse_inline_code(m: re.Match[str], parse_inline: InlineParser, state: ParseState) -> RawNode:
    return {"type": "inlineCode", "content": _RE_INLINE_CODE_PADDING.sub(r"\1", m.group(2))}


def _parse_em(m: re.Match[str], parse_inline: InlineParser, state: ParseState) -> RawNode:
    body = m.group(1) if m.group(1) is not None else m.group(2)
    return {"type": "em", "content": nested(parse_inline, body, state)}


def _parse_link(m: re.Match[str], parse_inline: InlineParser, state: ParseState) -> RawNode:
    return {
        "type": "link",
        "content": nested(parse_inline, m.group(1), state),
        "target": m.group(2),
    }


BASE_RULES: dict[str, Rule] = {
    "codeBlock": Rule(
        order=0,
        match=match_regex(_RE_CODE_BLOCK),
        parse=lambda m, p, s: {"type": "codeBlock", "lang": m.group(1), "content": m.group(2)},
    ),
    "blockQuote": Rule(order=1, match=_match_block_quote, parse=_parse_block_quote),
    "newline": Rule(order=2, match=match_regex(_RE_NEWLINE), parse=lambda m, p, s: {"type": "newline"}),
    "escape": Rule(
        order=3,
        match=match_regex(_RE_ESCAPE),
        parse=lambda m, p, s: {"type": "escape", "content": m.group(1)},
    ),
    "autolink": Rule(
        order=4,
        match=match_regex(_RE_AUTOLINK),
        parse=lambda m, p, s: {"type": "autolink", "target": m.group(1)},
    ),
    "url": Rule(
        order=5,
        match=match_regex(_RE_URL),
        parse=lambda m, p, s: {"type": "url", "target": m.group(1)},
    ),
    "link": Rule(order=6, match=match_container(_RE_LINK), parse=_parse_link),
    "user": Rule(
        order=7,
        match=match_regex(_RE_USER),
        parse=lambda m, p, s: {"type": "user", "id": m.group(1)},
    ),
    "channel": Rule(
        order=8,
        match=match_regex(_RE_CHANNEL),
        parse=lambda m, p, s: {"type": "channel", "id": m.group(1)},
    ),
    "role": Rule(
        order=9,
        match=match_regex(_RE_ROLE),
        parse=lambda m, p, s: {"type": "role", "id": m.group(1)},
    ),
    "everyone": Rule(order=10, match=match_regex(_RE_EVERYONE), parse=lambda m, p, s: {"type": "everyone"}),
    "here": Rule(order=11, match=match_regex(_RE_HERE), parse=lambda m, p, s: {"type": "here"}),
    "emoji": Rule(
        order=12,
        match=match_regex(_RE_EMOJI),
        parse=lambda m, p, s: {
            "type": "emoji",
            "animated": m.group(1) is not None,
            "name": m.group(2),
            "id": m.group(3),
        },
    ),
    "timestamp": Rule(
        order=13,
        match=match_regex(_RE_TIMESTAMP),
        parse=lambda m, p, s: {"type": "timestamp", "timestamp": m.group(1), "format": m.group(2)},
    ),
    "strong": Rule(order=14, match=match_container(_RE_STRONG), parse=_container("strong")),
    "underline": Rule(order=14, match=match_container(_RE_UNDERLINE), parse=_container("underline")),
    "em": Rule(order=15, match=match_container(_RE_EM), parse=_parse_em),
    "strikethrough": Rule(order=15, match=match_container(_RE_STRIKETHROUGH), parse=_container("strikethrough")),
    "spoiler": Rule(order=15, match=match_container(_RE_SPOILER), parse=_container("spoiler")),
    "twemoji": Rule(
        order=16,
        match=match_regex(_RE_TWEMOJI),
        parse=lambda m, p, s: {"type": "twemoji", "name": m.group(0)},
    ),
    "inlineCode": Rule(order=17, match=match_regex(_RE_INLINE_CODE), parse=_parse_inline_code),
    "br": Rule(order=18, match=match_regex(_RE_BR), parse=lambda m, p, s: {"type": "br"}),
    "text": Rule(
        order=19,
        match=match_regex(_RE_TEXT),
        parse=lambda m, p, s: {"type": "text", "content": m.group(0)},
    ),
}
