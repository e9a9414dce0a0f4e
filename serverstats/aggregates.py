import discord

from .models import ServerSnapshot

TEXT_CHANNEL_TYPES = (discord.ChannelType.text, discord.ChannelType.news)
VOICE_CHANNEL_TYPES = (discord.ChannelType.voice, discord.ChannelType.stage_voice)


def compute_snapshot(guild: discord.Guild) -> ServerSnapshot:
    """
    Count members, channels and roles from the guild's cached collections.
    Reads only; nothing on the guild is touched.
    """
    text_channels = sum(1 for ch in guild.channels if ch.type in TEXT_CHANNEL_TYPES)
    voice_channels = sum(1 for ch in guild.channels if ch.type in VOICE_CHANNEL_TYPES)

    members = list(guild.members)
    total_members = guild.member_count
    if total_members is None:
        total_members = len(members)

    return ServerSnapshot(
        total_members=total_members,
        human_members=sum(1 for m in members if not m.bot),
        bot_members=sum(1 for m in members if m.bot),
        text_channels=text_channels,
        voice_channels=voice_channels,
        total_channels=text_channels + voice_channels,
        total_roles=len(guild.roles),
    )


def format_channel_name(slot: str, snapshot: ServerSnapshot) -> str:
    """Display name for one of the fixed stats slots."""
    if slot == "all":
        return f"📊 Total Members: {snapshot.total_members}"
    if slot == "members":
        return f"👥 members: {snapshot.human_members}"
    if slot == "bots":
        return f"🤖 Bots: {snapshot.bot_members}"
    if slot == "channels":
        return f"📝 Channels: 💬 {snapshot.text_channels} | 🔊 {snapshot.voice_channels}"
    if slot == "roles":
        return f"🎭 Roles: {snapshot.total_roles}"
    raise ValueError(f"Unknown stats slot: {slot}")
