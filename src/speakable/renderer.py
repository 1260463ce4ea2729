"""Render a chat-markup AST as speakable plain text.

Every node variant maps to a text fragment.  Formatting is dropped (only the
words are kept), things that cannot be read aloud become short placeholders,
and mentions are resolved to names through the guild context.  Rendering
never raises: a missing entity, a malformed node or an unknown variant all
degrade to a placeholder or to the empty string.

Names pulled from the guild are re-parsed with the restricted name grammar
(emoji and plain text only) and rendered again with no context before being
spoken, so mention or link markup inside a name is never acted on.

Usage::

    from speakable.renderer import render_speakable_text

    render_speakable_text("**hi** <@123456789012345678>", guild)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from speakable.config import SpeakableConfig
from speakable.context import ResolutionContext
from speakable.grammar import parse, parse_name
from speakable.nodes import (
    CONTAINERS,
    AttachmentLink,
    Autolink,
    Br,
    Channel,
    ChannelOrMessageLink,
    CodeBlock,
    Command,
    Emoji,
    Escape,
    Everyone,
    Here,
    InlineCode,
    MediaPostLink,
    Newline,
    Node,
    Role,
    Spoiler,
    Text,
    Timestamp,
    Twemoji,
    Url,
    User,
    from_raw,
    string_or_empty,
)
from speakable.phrases import JA, Phrases, phrases_for
from speakable.segments import DateSegmenter, get_segmenter

log = logging.getLogger("speakable.renderer")

# Largest |milliseconds| a JavaScript Date (and so a Discord client) accepts
MAX_EPOCH_MS = 8_640_000_000_000_000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

Clock = Callable[[], datetime]
_Handler = Callable[[Any, Any, int], str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_epoch_seconds(raw: str) -> datetime | None:
    """Turn a raw ``<t:...>`` value into an aware UTC datetime, or None."""
    try:
        seconds = int(raw)
    except ValueError:
        return None
    if abs(seconds * 1000) > MAX_EPOCH_MS:
        return None
    try:
        return _EPOCH + timedelta(seconds=seconds)
    except OverflowError:
        return None


class Renderer:
    """Maps AST nodes to speakable text.

    Args:
        phrases: Placeholder catalog.
        segmenter: Timestamp segmenter; the shared default when omitted.
        clock: Returns "now" for timestamp diffing.
        max_depth: Containers nested deeper than this render as empty.
    """

    def __init__(
        self,
        phrases: Phrases = JA,
        segmenter: DateSegmenter | None = None,
        *,
        clock: Clock | None = None,
        max_depth: int = 32,
    ) -> None:
        self.phrases = phrases
        self.segmenter = segmenter or get_segmenter()
        self.clock = clock or _utcnow
        self.max_depth = max_depth

        self._handlers: dict[type[Node], _Handler] = {
            Text: self._literal,
            Escape: self._literal,
            InlineCode: self._literal,
            Url: self._url,
            Autolink: self._url,
            Spoiler: self._spoiler,
            Newline: self._newline,
            Br: self._newline,
            CodeBlock: self._code_block,
            User: self._user,
            Channel: self._channel,
            Role: self._role,
            Emoji: self._emoji,
            Twemoji: self._emoji,
            Command: self._command,
            Everyone: self._everyone,
            Here: self._here,
            Timestamp: self._timestamp,
            AttachmentLink: self._attachment_link,
            MediaPostLink: self._media_post_link,
            ChannelOrMessageLink: self._channel_or_message_link,
        }
        for container in CONTAINERS:
            self._handlers[container] = self._container

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, ast: Node | Sequence[Node] | Any, context: ResolutionContext | None = None) -> str:
        """Render a node, a sequence of nodes, or raw parser output."""
        return self._render(ast, context, 0)

    def sanitize_name(self, name: str) -> str:
        """Render a display name through the emoji-and-text grammar."""
        return self._render(parse_name(name), None, 0)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _render(self, ast: Any, context: ResolutionContext | None, depth: int) -> str:
        nodes = from_raw(ast)
        return "".join(self._node(node, context, depth) for node in nodes)

    def _node(self, node: Node, context: ResolutionContext | None, depth: int) -> str:
        handler = self._handlers.get(type(node))
        if handler is None:
            log.debug("No spoken form for node", extra={"node_type": type(node).__name__})
            return ""
        return handler(node, context, depth)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _container(self, node: Any, context: ResolutionContext | None, depth: int) -> str:
        if depth >= self.max_depth:
            log.debug("Nesting too deep, dropping content", extra={"depth": depth})
            return ""
        return self._render(node.content, context, depth + 1)

    def _literal(self, node: Text | Escape | InlineCode, context: ResolutionContext | None, depth: int) -> str:
        return string_or_empty(node.content)

    def _url(self, node: Url | Autolink, context: ResolutionContext | None, depth: int) -> str:
        return self.phrases.url_omitted

    def _spoiler(self, node: Spoiler, context: ResolutionContext | None, depth: int) -> str:
        return self.phrases.spoiler

    def _newline(self, node: Newline | Br, context: ResolutionContext | None, depth: int) -> str:
        return "\n"

    def _code_block(self, node: CodeBlock, context: ResolutionContext | None, depth: int) -> str:
        if node.lang:
            return self.phrases.code_in.format(lang=node.lang)
        return self.phrases.code

    def _user(self, node: User, context: ResolutionContext | None, depth: int) -> str:
        name = context.find_member(node.id) if context is not None else None
        if name is None:
            log.debug("Unresolved user mention", extra={"target_id": node.id})
            return self.phrases.unknown_user
        return self.sanitize_name(name)

    def _channel(self, node: Channel, context: ResolutionContext | None, depth: int) -> str:
        name = context.find_channel(node.id) if context is not None else None
        if name is None:
            log.debug("Unresolved channel mention", extra={"target_id": node.id})
            return self.phrases.unknown_channel
        return self.sanitize_name(name)

    def _role(self, node: Role, context: ResolutionContext | None, depth: int) -> str:
        name = context.find_role(node.id) if context is not None else None
        if name is None:
            log.debug("Unresolved role mention", extra={"target_id": node.id})
            return self.phrases.unknown_role
        return self.sanitize_name(name)

    def _emoji(self, node: Emoji | Twemoji, context: ResolutionContext | None, depth: int) -> str:
        # Read by name only; there is no phonetic reading table
        return string_or_empty(node.name)

    def _command(self, node: Command, context: ResolutionContext | None, depth: int) -> str:
        return self.phrases.command.format(name=string_or_empty(node.name))

    def _everyone(self, node: Everyone, context: ResolutionContext | None, depth: int) -> str:
        return self.phrases.everyone

    def _here(self, node: Here, context: ResolutionContext | None, depth: int) -> str:
        return self.phrases.here

    def _timestamp(self, node: Timestamp, context: ResolutionContext | None, depth: int) -> str:
        instant = parse_epoch_seconds(node.timestamp)
        if instant is None:
            log.debug("Invalid timestamp", extra={"timestamp": node.timestamp})
            return self.phrases.unknown_date

        try:
            target = self.segmenter.segments(instant)
        except (OverflowError, ValueError):
            # Representable in UTC but not once shifted into the local zone
            log.debug("Timestamp out of range", extra={"timestamp": node.timestamp})
            return self.phrases.unknown_date
        now = self.segmenter.segments(self.clock())

        # Only speak from the first segment that differs from now
        for index, (then_part, now_part) in enumerate(zip(target, now)):
            if then_part != now_part:
                return "".join(target[index:])
        return self.phrases.now

    def _attachment_link(self, node: AttachmentLink, context: ResolutionContext | None, depth: int) -> str:
        return string_or_empty(node.filename)

    def _media_post_link(self, node: MediaPostLink, context: ResolutionContext | None, depth: int) -> str:
        return self.phrases.media_post

    def _channel_or_message_link(
        self,
        node: ChannelOrMessageLink,
        context: ResolutionContext | None,
        depth: int,
    ) -> str:
        if not node.channel_id:
            return self.phrases.url_omitted

        is_message = bool(node.message_id)
        if context is None or context.guild_id != node.guild_id_or_me:
            return self.phrases.external_message if is_message else self.phrases.external_channel

        name = context.find_channel(node.channel_id)
        if name is None:
            log.debug("Unresolved channel link", extra={"target_id": node.channel_id})
            return self.phrases.unknown_message if is_message else self.phrases.unknown_channel

        name = self.sanitize_name(name)
        return self.phrases.channel_message.format(name=name) if is_message else name


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


@lru_cache(maxsize=8)
def renderer_for(config: SpeakableConfig) -> Renderer:
    """Return the shared :class:`Renderer` for *config*."""
    return Renderer(
        phrases=phrases_for(config.locale),
        segmenter=get_segmenter(config.locale, config.timezone),
        max_depth=config.max_depth,
    )


def render_speakable_text(
    content: str,
    context: ResolutionContext | None = None,
    *,
    config: SpeakableConfig | None = None,
    renderer: Renderer | None = None,
) -> str:
    """Convert raw message content into speakable text.

    Args:
        content: Message content as sent by Discord.
        context: Guild to resolve mentions against; None resolves nothing.
        config: Settings used to pick the shared renderer.
        renderer: Explicit renderer (takes precedence over ``config``).

    Returns:
        Plain text, possibly empty.
    """
    if not content:
        return ""
    if renderer is None:
        renderer = renderer_for(config or SpeakableConfig())
    return renderer.render(parse(content), context)
