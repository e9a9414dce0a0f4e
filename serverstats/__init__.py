"""Auto-updating server statistics channels for discord.py bots."""
