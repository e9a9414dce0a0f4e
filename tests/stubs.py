from __future__ import annotations

import asyncio
import itertools
from types import SimpleNamespace

import discord

from serverstats.storage import StatsStore

_ids = itertools.count(1000)


def http_error(message: str = "boom") -> discord.HTTPException:
    return discord.HTTPException(SimpleNamespace(status=500, reason="Internal Server Error"), message)


class StubRole:
    def __init__(self, *, id: int, name: str) -> None:
        self.id = id
        self.name = name


class StubChannel:
    def __init__(self, name: str, ctype: discord.ChannelType, *, guild: "StubGuild | None" = None,
                 category_id: int | None = None, cid: int | None = None) -> None:
        self.id = cid if cid is not None else next(_ids)
        self.name = name
        self.type = ctype
        self.guild = guild
        self.category_id = category_id
        self.overwrites: dict = {}
        self.fail_edit = False
        self.fail_delete = False
        self.edit_error: Exception | None = None
        self.edit_delay = 0
        self.edits: list[str] = []

    async def edit(self, *, name: str, reason: str | None = None) -> None:
        await asyncio.sleep(0)
        for _ in range(self.edit_delay):
            await asyncio.sleep(0)
        if self.edit_error is not None:
            raise self.edit_error
        if self.fail_edit:
            raise http_error("rename rejected")
        self.edits.append(name)
        self.name = name

    async def delete(self, *, reason: str | None = None) -> None:
        await asyncio.sleep(0)
        if self.fail_delete:
            raise http_error("delete rejected")
        if self.guild is not None:
            self.guild.channels.remove(self)
            self.guild.deleted.append(self.id)


class StubGuild:
    def __init__(self, gid: int = 1, *, humans: int = 0, bots: int = 0, text: int = 0, voice: int = 0,
                 roles: int = 1, name: str = "Test Guild") -> None:
        self.id = gid
        self.name = name
        self.members = [SimpleNamespace(bot=False) for _ in range(humans)]
        self.members += [SimpleNamespace(bot=True) for _ in range(bots)]
        self.member_count: int | None = humans + bots
        self.roles = [StubRole(id=gid, name="@everyone")]
        self.roles += [StubRole(id=next(_ids), name=f"role-{i}") for i in range(roles - 1)]
        self.default_role = self.roles[0]
        self.channels: list[StubChannel] = []
        for i in range(text):
            self.channels.append(StubChannel(f"text-{i}", discord.ChannelType.text, guild=self))
        for i in range(voice):
            self.channels.append(StubChannel(f"voice-{i}", discord.ChannelType.voice, guild=self))
        self.created: list[StubChannel] = []
        self.deleted: list[int] = []
        self.fail_create_after: int | None = None
        self.create_error: Exception | None = None

    def get_channel(self, channel_id: int):
        for channel in self.channels:
            if channel.id == channel_id:
                return channel
        return None

    def _create(self, name: str, ctype: discord.ChannelType, category_id: int | None) -> StubChannel:
        if self.fail_create_after is not None and len(self.created) >= self.fail_create_after:
            raise self.create_error or http_error("create rejected")
        channel = StubChannel(name, ctype, guild=self, category_id=category_id)
        self.channels.append(channel)
        self.created.append(channel)
        return channel

    async def create_category(self, *, name: str, reason: str | None = None) -> StubChannel:
        await asyncio.sleep(0)
        return self._create(name, discord.ChannelType.category, None)

    async def create_voice_channel(self, *, name: str, category: StubChannel, overwrites: dict,
                                   reason: str | None = None) -> StubChannel:
        await asyncio.sleep(0)
        channel = self._create(name, discord.ChannelType.voice, category.id)
        channel.overwrites = overwrites
        return channel


class CountingStore(StatsStore):
    def __init__(self, path) -> None:
        super().__init__(str(path))
        self.saves = 0
        self.resets = 0

    def save(self, state=None) -> None:
        self.saves += 1
        super().save(state)

    def reset(self) -> None:
        self.resets += 1
        super().reset()
