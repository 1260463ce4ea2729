"""Tests for resolution context implementations."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

from speakable.context import PycordGuild, StaticGuild


class TestStaticGuild:
    def test_lookups(self):
        guild = StaticGuild(id="1", members={"2": "alice"}, channels={"3": "general"}, roles={"4": "mods"})
        assert guild.guild_id == "1"
        assert guild.find_member("2") == "alice"
        assert guild.find_channel("3") == "general"
        assert guild.find_role("4") == "mods"

    def test_misses(self):
        guild = StaticGuild(id="1")
        assert guild.find_member("2") is None
        assert guild.find_channel("2") is None
        assert guild.find_role("2") is None

    def test_from_dict_normalises_ids(self):
        guild = StaticGuild.from_dict({"id": 1, "members": {2: "alice"}, "roles": None})
        assert guild.guild_id == "1"
        assert guild.find_member("2") == "alice"
        assert guild.find_role("2") is None


class TestPycordGuild:
    def _guild(self) -> MagicMock:
        guild = MagicMock()
        guild.id = 111
        guild.get_member.return_value = SimpleNamespace(display_name="Bob")
        guild.get_channel_or_thread.return_value = SimpleNamespace(name="general")
        guild.get_role.return_value = None
        return guild

    def test_guild_id_is_string(self):
        assert PycordGuild(self._guild()).guild_id == "111"

    def test_member(self):
        guild = self._guild()
        assert PycordGuild(guild).find_member("222") == "Bob"
        guild.get_member.assert_called_once_with(222)

    def test_channel_includes_threads(self):
        guild = self._guild()
        assert PycordGuild(guild).find_channel("333") == "general"
        guild.get_channel_or_thread.assert_called_once_with(333)

    def test_role_miss(self):
        assert PycordGuild(self._guild()).find_role("444") is None

    def test_non_numeric_id_skips_lookup(self):
        guild = self._guild()
        assert PycordGuild(guild).find_member("abc") is None
        guild.get_member.assert_not_called()
