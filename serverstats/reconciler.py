import asyncio
import enum
import logging
from collections import defaultdict
from typing import Callable, Dict, Optional

import discord

from .aggregates import compute_snapshot, format_channel_name
from .audit import audit_log
from .errors import ChannelCreationFailed
from .models import SLOTS, ServerSnapshot, StatsChannelConfig
from .storage import StatsStore


class SetupResult(enum.Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    CREATION_FAILED = "creation_failed"


class TeardownResult(enum.Enum):
    REMOVED = "removed"
    NOT_FOUND = "not_found"


class StatsReconciler:
    """
    Creates, refreshes and removes the stats display channels of a guild and
    keeps the stats store in step with them.

    Every operation for a guild runs under that guild's lock, so a setup can
    never interleave with a refresh or teardown of the same guild.
    """

    def __init__(self, store: StatsStore, category_name: str = "📊 SERVER STATS"):
        self.store = store
        self.category_name = category_name
        self._guild_locks: Dict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    # ---------------------------
    # Setup
    # ---------------------------

    async def setup(self, guild: discord.Guild) -> SetupResult:
        async with self._guild_lock(guild.id):
            state = self.store.state
            existing = state.config_for(guild.id)
            if existing is not None:
                if guild.get_channel(existing.category_id) is not None:
                    return SetupResult.ALREADY_EXISTS
                logging.info(
                    f"[{guild.name}] Stats category {existing.category_id} is gone. Discarding stale config."
                )
                state.drop(guild.id)

            if state.snapshot_for(guild.id) is None:
                state.record_for(guild.id).snapshot = compute_snapshot(guild)
                self.store.save()
            snapshot = self._update_snapshot(guild)

            try:
                config = await self._create_stats_channels(guild, snapshot)
            except ChannelCreationFailed as e:
                logging.error(
                    f"[{guild.name}] Error setting up stats channels: {e}. "
                    f"Left behind without config: {e.leaked_ids or 'nothing'}"
                )
                audit_log(
                    f"Stats setup failed in guild '{guild.name}' ({guild.id}): {e}. "
                    f"Partially created channel ids (not cleaned up): {e.leaked_ids}"
                )
                return SetupResult.CREATION_FAILED

            state.record_for(guild.id).config = config
            self.store.save()

        logging.info(f"[{guild.name}] Created stats category and {len(SLOTS)} channels.")
        audit_log(
            f"Created stats channels in guild '{guild.name}' ({guild.id}), category {config.category_id}."
        )
        return SetupResult.CREATED

    async def _create_stats_channels(
        self, guild: discord.Guild, snapshot: ServerSnapshot
    ) -> StatsChannelConfig:
        """Create the category then one locked voice channel per slot, in order."""
        try:
            category = await guild.create_category(
                name=self.category_name, reason="Create server stats category"
            )
        except Exception as e:
            raise ChannelCreationFailed(e) from e

        overwrites = {guild.default_role: discord.PermissionOverwrite(connect=False)}
        channel_ids: Dict[str, int] = {}
        for slot in SLOTS:
            try:
                channel = await guild.create_voice_channel(
                    name=format_channel_name(slot, snapshot),
                    category=category,
                    overwrites=overwrites,
                    reason="Create server stats channel",
                )
            except Exception as e:
                raise ChannelCreationFailed(
                    e, category_id=category.id, channel_ids=list(channel_ids.values())
                ) from e
            channel_ids[slot] = channel.id

        return StatsChannelConfig(category_id=category.id, channels=channel_ids)

    # ---------------------------
    # Refresh
    # ---------------------------

    async def refresh(self, guild: Optional[discord.Guild]):
        """Bring the display channel names up to date. Never raises."""
        if guild is None:
            return
        try:
            async with self._guild_lock(guild.id):
                await self._refresh_unlocked(guild)
        except Exception as e:
            logging.error(
                f"Error updating server stats in guild '{guild.name}' ({guild.id}): {e}",
                exc_info=True,
            )

    async def _refresh_unlocked(self, guild: discord.Guild):
        state = self.store.state
        config = state.config_for(guild.id)
        if config is None:
            return

        if guild.get_channel(config.category_id) is None:
            state.drop(guild.id)
            self.store.save()
            logging.warning(
                f"[{guild.name}] Stats category was deleted. Dropped stats config."
            )
            audit_log(
                f"Stats category {config.category_id} missing in guild '{guild.name}' ({guild.id}). Config removed."
            )
            return

        snapshot = self._update_snapshot(guild)
        # Every rename finishes before the guild lock is released.
        results = await asyncio.gather(
            *(
                self._rename_channel(guild, channel_id, format_channel_name(slot, snapshot))
                for slot, channel_id in config.channels.items()
            ),
            return_exceptions=True,
        )
        for slot, result in zip(config.channels, results):
            if isinstance(result, Exception):
                logging.error(f"[{guild.name}] Error refreshing '{slot}' stats channel: {result}")

    async def _rename_channel(self, guild: discord.Guild, channel_id: int, name: str):
        channel = guild.get_channel(channel_id)
        if channel is None or channel.name == name:
            return
        try:
            await channel.edit(name=name, reason="Server stats refresh")
            logging.info(f"[{guild.name}] Renamed stats channel to '{name}'.")
        except Exception as e:
            logging.error(
                f"[{guild.name}] Failed renaming stats channel {channel_id} to '{name}': {e}"
            )

    def _update_snapshot(self, guild: discord.Guild) -> ServerSnapshot:
        snapshot = compute_snapshot(guild)
        self.store.state.record_for(guild.id).snapshot = snapshot
        self.store.save()
        return snapshot

    # ---------------------------
    # Teardown
    # ---------------------------

    async def teardown(self, guild: discord.Guild) -> TeardownResult:
        async with self._guild_lock(guild.id):
            state = self.store.state
            config = state.config_for(guild.id)
            if config is None:
                return TeardownResult.NOT_FOUND

            category = guild.get_channel(config.category_id)
            if category is not None:
                targets = [ch for ch in guild.channels if ch.category_id == category.id]
                targets.append(category)
                results = await asyncio.gather(
                    *(ch.delete(reason="Remove server stats channels") for ch in targets),
                    return_exceptions=True,
                )
                for channel, result in zip(targets, results):
                    if isinstance(result, Exception):
                        logging.error(
                            f"[{guild.name}] Failed deleting stats channel {channel.id}: {result}"
                        )

            state.drop(guild.id)
            # Wipes the whole file, other guilds included; they are written
            # back from memory on the next save.
            self.store.reset()

        logging.info(f"[{guild.name}] Removed stats channels.")
        audit_log(f"Removed stats channels in guild '{guild.name}' ({guild.id}).")
        return TeardownResult.REMOVED

    # ---------------------------
    # Startup
    # ---------------------------

    async def resume(self, get_guild: Callable[[int], Optional[discord.Guild]]):
        """Load persisted state, forget unreachable guilds and refresh the rest."""
        state = self.store.load()
        reachable = []
        for guild_id in state.configured_guild_ids():
            guild = get_guild(guild_id)
            if guild is None:
                logging.info(f"Guild {guild_id} is no longer reachable. Dropping its stats config.")
                state.drop(guild_id)
            else:
                reachable.append(guild)

        for guild in reachable:
            await self.refresh(guild)
        self.store.save()

    def _guild_lock(self, guild_id: int) -> asyncio.Lock:
        return self._guild_locks[guild_id]
