from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Fixed display slots, in creation order.
SLOTS = ("all", "members", "bots", "channels", "roles")


@dataclass(frozen=True)
class ServerSnapshot:
    """Counts computed for a guild during the last refresh."""

    total_members: int
    human_members: int
    bot_members: int
    text_channels: int
    voice_channels: int
    total_channels: int
    total_roles: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalMembers": self.total_members,
            "humanMembers": self.human_members,
            "botMembers": self.bot_members,
            "textChannels": self.text_channels,
            "voiceChannels": self.voice_channels,
            "totalChannels": self.total_channels,
            "totalRoles": self.total_roles,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerSnapshot":
        text = int(data["textChannels"])
        voice = int(data["voiceChannels"])
        return cls(
            total_members=int(data["totalMembers"]),
            human_members=int(data["humanMembers"]),
            bot_members=int(data["botMembers"]),
            text_channels=text,
            voice_channels=voice,
            total_channels=text + voice,
            total_roles=int(data["totalRoles"]),
        )


@dataclass(frozen=True)
class StatsChannelConfig:
    """The category and per-slot display channels created for a guild."""

    category_id: int
    channels: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, str]:
        data = {"categoryId": str(self.category_id)}
        for slot in SLOTS:
            if slot in self.channels:
                data[slot] = str(self.channels[slot])
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatsChannelConfig":
        channels = {slot: int(data[slot]) for slot in SLOTS if data.get(slot)}
        return cls(category_id=int(data["categoryId"]), channels=channels)


@dataclass
class GuildRecord:
    """
    Config and snapshot for one guild, kept together so they are always
    added and dropped as a unit. A snapshot may exist before the config does.
    """

    config: Optional[StatsChannelConfig] = None
    snapshot: Optional[ServerSnapshot] = None


@dataclass
class PersistedState:
    records: Dict[int, GuildRecord] = field(default_factory=dict)

    def config_for(self, guild_id: int) -> Optional[StatsChannelConfig]:
        record = self.records.get(guild_id)
        return record.config if record else None

    def snapshot_for(self, guild_id: int) -> Optional[ServerSnapshot]:
        record = self.records.get(guild_id)
        return record.snapshot if record else None

    def record_for(self, guild_id: int) -> GuildRecord:
        return self.records.setdefault(guild_id, GuildRecord())

    def drop(self, guild_id: int):
        self.records.pop(guild_id, None)

    def configured_guild_ids(self) -> List[int]:
        return [gid for gid, rec in self.records.items() if rec.config is not None]

    def to_document(self) -> Dict[str, Dict[str, Any]]:
        return {
            "statsChannels": {
                str(gid): rec.config.to_dict()
                for gid, rec in self.records.items()
                if rec.config is not None
            },
            "serverStats": {
                str(gid): rec.snapshot.to_dict()
                for gid, rec in self.records.items()
                if rec.snapshot is not None
            },
        }
