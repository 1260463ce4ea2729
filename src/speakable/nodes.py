"""AST node variants for Discord chat markup.

Every construct the grammar recognises is a frozen dataclass below.  The
class itself is the discriminator: a node only carries the fields that make
sense for its variant, so the renderer never has to guess.

Grammar rules produce loosely typed dicts (``{"type": "strong", "content":
[...]}``) and :func:`from_raw` turns them into typed nodes.  Conversion never
fails: malformed content degrades to an empty tuple, non-string text fields
to ``""`` and unknown discriminators to :class:`Unknown`.

Usage::

    from speakable.nodes import from_raw, Strong, Text

    from_raw({"type": "strong", "content": [{"type": "text", "content": "hi"}]})
    # → (Strong(content=(Text(content='hi'),)),)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

# Registry: raw "type" string → node class
_VARIANTS: dict[str, type[Node]] = {}


def _variant(name: str):
    """Register a node class under its raw ``type`` discriminator."""

    def register(cls: type[Node]) -> type[Node]:
        cls.type = name
        _VARIANTS[name] = cls
        return cls

    return register


# Field converters, keyed by dataclass field metadata
def _nodes() -> Any:
    return field(default=(), metadata={"raw": "nodes"})


def _text() -> Any:
    return field(default="", metadata={"raw": "text"})


def _optional() -> Any:
    return field(default=None, metadata={"raw": "optional"})


def _flag() -> Any:
    return field(default=False, metadata={"raw": "flag"})


@dataclass(frozen=True)
class Node:
    """Abstract base for every AST node."""

    type: ClassVar[str] = ""


# ── Generic inline ───────────────────────────────────────────────────────────


@_variant("text")
@dataclass(frozen=True)
class Text(Node):
    content: str = _text()


@_variant("escape")
@dataclass(frozen=True)
class Escape(Node):
    content: str = _text()


@_variant("inlineCode")
@dataclass(frozen=True)
class InlineCode(Node):
    content: str = _text()


@_variant("codeBlock")
@dataclass(frozen=True)
class CodeBlock(Node):
    content: str = _text()
    lang: str | None = _optional()


@_variant("url")
@dataclass(frozen=True)
class Url(Node):
    target: str = _text()


@_variant("autolink")
@dataclass(frozen=True)
class Autolink(Node):
    target: str = _text()


@_variant("link")
@dataclass(frozen=True)
class Link(Node):
    content: tuple[Node, ...] = _nodes()
    target: str = _text()


@_variant("blockQuote")
@dataclass(frozen=True)
class BlockQuote(Node):
    content: tuple[Node, ...] = _nodes()


@_variant("em")
@dataclass(frozen=True)
class Em(Node):
    content: tuple[Node, ...] = _nodes()


@_variant("strong")
@dataclass(frozen=True)
class Strong(Node):
    content: tuple[Node, ...] = _nodes()


@_variant("underline")
@dataclass(frozen=True)
class Underline(Node):
    content: tuple[Node, ...] = _nodes()


@_variant("strikethrough")
@dataclass(frozen=True)
class Strikethrough(Node):
    content: tuple[Node, ...] = _nodes()


@_variant("spoiler")
@dataclass(frozen=True)
class Spoiler(Node):
    content: tuple[Node, ...] = _nodes()


@_variant("newline")
@dataclass(frozen=True)
class Newline(Node):
    pass


@_variant("br")
@dataclass(frozen=True)
class Br(Node):
    pass


# ── Entity references (17–20 digit snowflakes) ───────────────────────────────


@_variant("user")
@dataclass(frozen=True)
class User(Node):
    id: str = _text()


@_variant("channel")
@dataclass(frozen=True)
class Channel(Node):
    id: str = _text()


@_variant("role")
@dataclass(frozen=True)
class Role(Node):
    id: str = _text()


# ── Literal tokens ───────────────────────────────────────────────────────────


@_variant("everyone")
@dataclass(frozen=True)
class Everyone(Node):
    pass


@_variant("here")
@dataclass(frozen=True)
class Here(Node):
    pass


@_variant("emoji")
@dataclass(frozen=True)
class Emoji(Node):
    """Custom guild emoji (``<:name:id>`` / ``<a:name:id>``)."""

    name: str = _text()
    id: str = _text()
    animated: bool = _flag()


@_variant("twemoji")
@dataclass(frozen=True)
class Twemoji(Node):
    """Standard Unicode emoji (``🎉``), stored as the emoji itself."""

    name: str = _text()


# ── Temporal ─────────────────────────────────────────────────────────────────


@_variant("timestamp")
@dataclass(frozen=True)
class Timestamp(Node):
    # Raw epoch-seconds string, validated at render time
    timestamp: str = _text()
    format: str | None = _optional()


# ── Platform composite links ─────────────────────────────────────────────────


@_variant("command")
@dataclass(frozen=True)
class Command(Node):
    name: str = _text()
    id: str = _text()


@_variant("channelOrMessageLink")
@dataclass(frozen=True)
class ChannelOrMessageLink(Node):
    guild_id_or_me: str = _text()
    channel_id: str | None = _optional()
    message_id: str | None = _optional()


@_variant("attachmentLink")
@dataclass(frozen=True)
class AttachmentLink(Node):
    filename: str = _text()


@_variant("mediaPostLink")
@dataclass(frozen=True)
class MediaPostLink(Node):
    guild_id: str = _text()
    channel_id: str = _text()
    thread_id: str = _text()
    message_id: str = _text()


@dataclass(frozen=True)
class Unknown(Node):
    """A node whose discriminator no variant claims."""

    raw_type: str = ""


CONTAINERS: tuple[type[Node], ...] = (
    Link,
    BlockQuote,
    Em,
    Strong,
    Underline,
    Strikethrough,
)

# Raw dict keys are camelCase, dataclass fields snake_case
_RAW_KEYS: dict[str, str] = {
    "guild_id_or_me": "guildIdOrMe",
    "channel_id": "channelId",
    "message_id": "messageId",
    "guild_id": "guildId",
    "thread_id": "threadId",
}


# ---------------------------------------------------------------------------
# Raw → typed conversion
# ---------------------------------------------------------------------------


def string_or_empty(value: object) -> str:
    """Return *value* if it is a string, else ``""``."""
    return value if isinstance(value, str) else ""


def _is_single(raw: object) -> bool:
    if isinstance(raw, Node):
        return True
    return isinstance(raw, Mapping) and isinstance(raw.get("type"), str)


def from_raw(raw: object) -> tuple[Node, ...]:
    """Convert raw parser output into a tuple of typed nodes.

    Accepts a single node (typed or raw dict) or a list/tuple of them.  A
    sequence containing anything that is not a node is malformed as a whole
    and yields ``()``.
    """
    if isinstance(raw, (list, tuple)):
        if not all(_is_single(item) for item in raw):
            return ()
        return tuple(_single(item) for item in raw)
    if _is_single(raw):
        return (_single(raw),)
    return ()


def _single(raw: Node | Mapping[str, Any]) -> Node:
    if isinstance(raw, Node):
        return raw

    cls = _VARIANTS.get(raw["type"])
    if cls is None:
        return Unknown(raw_type=raw["type"])

    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        value = raw.get(_RAW_KEYS.get(f.name, f.name))
        kind = f.metadata.get("raw")
        if kind == "nodes":
            kwargs[f.name] = from_raw(value)
        elif kind == "text":
            kwargs[f.name] = string_or_empty(value)
        elif kind == "optional":
            kwargs[f.name] = value if isinstance(value, str) else None
        elif kind == "flag":
            kwargs[f.name] = bool(value)
    return cls(**kwargs)
