from __future__ import annotations

import discord
import pytest

from serverstats.aggregates import compute_snapshot, format_channel_name
from serverstats.models import ServerSnapshot

from stubs import StubChannel, StubGuild


def test_compute_snapshot_counts_members_channels_and_roles() -> None:
    guild = StubGuild(humans=10, bots=2, text=3, voice=2, roles=5)

    snapshot = compute_snapshot(guild)

    assert snapshot == ServerSnapshot(
        total_members=12,
        human_members=10,
        bot_members=2,
        text_channels=3,
        voice_channels=2,
        total_channels=5,
        total_roles=5,
    )


def test_news_and_stage_channels_count_while_categories_do_not() -> None:
    guild = StubGuild(text=1, voice=1)
    guild.channels.append(StubChannel("news", discord.ChannelType.news, guild=guild))
    guild.channels.append(StubChannel("stage", discord.ChannelType.stage_voice, guild=guild))
    guild.channels.append(StubChannel("cat", discord.ChannelType.category, guild=guild))
    guild.channels.append(StubChannel("forum", discord.ChannelType.forum, guild=guild))

    snapshot = compute_snapshot(guild)

    assert snapshot.text_channels == 2
    assert snapshot.voice_channels == 2
    assert snapshot.total_channels == snapshot.text_channels + snapshot.voice_channels


def test_total_members_uses_reported_count_and_falls_back_to_cache() -> None:
    guild = StubGuild(humans=3, bots=1)
    guild.member_count = 40
    assert compute_snapshot(guild).total_members == 40

    guild.member_count = None
    assert compute_snapshot(guild).total_members == 4


def test_compute_snapshot_does_not_touch_the_guild() -> None:
    guild = StubGuild(humans=2, text=1)
    names = [c.name for c in guild.channels]

    compute_snapshot(guild)

    assert [c.name for c in guild.channels] == names
    assert guild.created == []


def test_channel_names() -> None:
    snapshot = ServerSnapshot(12, 10, 2, 3, 2, 5, 5)

    assert format_channel_name("all", snapshot) == "📊 Total Members: 12"
    assert format_channel_name("members", snapshot) == "👥 members: 10"
    assert format_channel_name("bots", snapshot) == "🤖 Bots: 2"
    assert format_channel_name("channels", snapshot) == "📝 Channels: 💬 3 | 🔊 2"
    assert format_channel_name("roles", snapshot) == "🎭 Roles: 5"
    with pytest.raises(ValueError):
        format_channel_name("boosts", snapshot)
