"""Discord-specific grammar: platform matchers composed with the base rules.

Matchers added on top of :data:`speakable.markdown.BASE_RULES`:

- ``command``              ``</name:id>`` slash-command references
- ``channelOrMessageLink`` ``https://discord.com/channels/{guild|@me}/{channel}/{message}``
- ``attachmentLink``       CDN attachment URLs (filename kept, query dropped)
- ``mediaPostLink``        ``.../channels/{g}/{c}/threads/{t}/{m}`` forum/media posts

The three URL matchers sit just before the generic ``url`` rule so that
platform links win over plain URL handling.  ``command`` shares the
``strong`` tier.

Usage::

    from speakable.grammar import parse, parse_name

    parse("see https://discord.com/channels/1/2/3")
    parse_name("general 🎉")     # text + twemoji only
"""

from __future__ import annotations

import re

from speakable.markdown import (
    BASE_RULES,
    InlineParser,
    ParseState,
    RawNode,
    Rule,
    match_regex,
    parser_for,
)

_DISCORD_HOST = r"(?:(?:canary\.|ptb\.)?discord(?:app)?\.com|staging\.discord\.co)"

_RE_COMMAND = re.compile(r"</([\w-]+(?: [\w-]+)?(?: [\w-]+)?):(\d{17,20})>")

_RE_CHANNEL_OR_MESSAGE_LINK = re.compile(
    rf"https://{_DISCORD_HOST}/channels/(\d+|@me)"
    r"(?:/(\d+|[a-zA-Z-]+))?"
    r"(?:/(\d+|[a-zA-Z-]+))?"
)

_RE_ATTACHMENT_LINK = re.compile(
    r"https://(?:(?:media|images)\.discordapp\.net|cdn\.discordapp\.com)"
    r"/(?:attachments|ephemeral-attachments)/\d+/\d+/([\w.-]*[\w-])(?:\?[\w?&=-]*)?"
)

_RE_MEDIA_POST_LINK = re.compile(
    rf"https://{_DISCORD_HOST}/channels/(\d+)/(\d+)/threads/(\d+)/(\d+)"
)

_RE_NON_DIGIT = re.compile(r"\D")

_URL_LINK_ORDER = BASE_RULES["url"].order - 0.5


def _match_channel_or_message_link(source: str, state: ParseState) -> re.Match[str] | None:
    m = _RE_CHANNEL_OR_MESSAGE_LINK.match(source)
    if m is None:
        return None
    # Named routes (e.g. /channels/123/customize-community) are not links to a channel
    for segment in (m.group(2), m.group(3)):
        if segment and _RE_NON_DIGIT.search(segment):
            return None
    return m


def _parse_channel_or_message_link(m: re.Match[str], parse_inline: InlineParser, state: ParseState) -> RawNode:
    return {
        "type": "channelOrMessageLink",
        "guildIdOrMe": m.group(1),
        "channelId": m.group(2),
        "messageId": m.group(3),
    }


def _parse_media_post_link(m: re.Match[str], parse_inline: InlineParser, state: ParseState) -> RawNode:
    return {
        "type": "mediaPostLink",
        "guildId": m.group(1),
        "channelId": m.group(2),
        "threadId": m.group(3),
        "messageId": m.group(4),
    }


PLATFORM_RULES: dict[str, Rule] = {
    "command": Rule(
        order=BASE_RULES["strong"].order,
        match=match_regex(_RE_COMMAND),
        parse=lambda m, p, s: {"type": "command", "name": m.group(1), "id": m.group(2)},
    ),
    "channelOrMessageLink": Rule(
        order=_URL_LINK_ORDER,
        match=_match_channel_or_message_link,
        parse=_parse_channel_or_message_link,
    ),
    "attachmentLink": Rule(
        order=_URL_LINK_ORDER,
        match=match_regex(_RE_ATTACHMENT_LINK),
        parse=lambda m, p, s: {"type": "attachmentLink", "filename": m.group(1)},
    ),
    "mediaPostLink": Rule(
        order=_URL_LINK_ORDER,
        match=match_regex(_RE_MEDIA_POST_LINK),
        parse=_parse_media_post_link,
    ),
}

RULES: dict[str, Rule] = {**BASE_RULES, **PLATFORM_RULES}

# Full message grammar
parse = parser_for(RULES, inline=True)

# Display names: emoji and plain text only
NAME_RULES: dict[str, Rule] = {
    "twemoji": BASE_RULES["twemoji"],
    "text": BASE_RULES["text"],
}
parse_name = parser_for(NAME_RULES, inline=True)
