"""Resolution contexts: where mention ids become names.

The renderer only needs four things from a guild: its id and three
id → name lookups.  Anything providing them satisfies
:class:`ResolutionContext`; passing ``None`` instead means nothing can be
resolved and every mention falls back to its "unknown" placeholder.

Two implementations ship here:

- :class:`StaticGuild`: plain dicts, for tests, fixtures and the CLI.
- :class:`PycordGuild`: wraps a live py-cord ``discord.Guild``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    import discord


class ResolutionContext(Protocol):
    """Read-only lookups for one guild."""

    @property
    def guild_id(self) -> str: ...

    def find_member(self, member_id: str) -> str | None:
        """Display name of the member, or None."""

    def find_channel(self, channel_id: str) -> str | None:
        """Name of the channel or thread, or None."""

    def find_role(self, role_id: str) -> str | None:
        """Name of the role, or None."""


@dataclass(frozen=True)
class StaticGuild:
    """In-memory guild backed by id → name mappings."""

    id: str
    members: Mapping[str, str] = field(default_factory=dict)
    channels: Mapping[str, str] = field(default_factory=dict)
    roles: Mapping[str, str] = field(default_factory=dict)

    @property
    def guild_id(self) -> str:
        return self.id

    def find_member(self, member_id: str) -> str | None:
        return self.members.get(member_id)

    def find_channel(self, channel_id: str) -> str | None:
        return self.channels.get(channel_id)

    def find_role(self, role_id: str) -> str | None:
        return self.roles.get(role_id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StaticGuild:
        """Build from a JSON-style dict.

        Example::

            {"id": "1", "members": {"2": "alice"}, "channels": {}, "roles": {}}

        Ids may be given as numbers; they are normalised to strings.
        """

        def names(key: str) -> dict[str, str]:
            return {str(k): str(v) for k, v in (data.get(key) or {}).items()}

        return cls(
            id=str(data.get("id", "")),
            members=names("members"),
            channels=names("channels"),
            roles=names("roles"),
        )


def _snowflake(value: str) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class PycordGuild:
    """Adapter over a py-cord ``discord.Guild`` using its member/channel/role caches."""

    def __init__(self, guild: discord.Guild) -> None:
        self._guild = guild

    @property
    def guild_id(self) -> str:
        return str(self._guild.id)

    def find_member(self, member_id: str) -> str | None:
        uid = _snowflake(member_id)
        member = self._guild.get_member(uid) if uid is not None else None
        return member.display_name if member else None

    def find_channel(self, channel_id: str) -> str | None:
        cid = _snowflake(channel_id)
        channel = self._guild.get_channel_or_thread(cid) if cid is not None else None
        return channel.name if channel else None

    def find_role(self, role_id: str) -> str | None:
        rid = _snowflake(role_id)
        role = self._guild.get_role(rid) if rid is not None else None
        return role.name if role else None
