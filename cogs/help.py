import discord
import logging
from discord.ext import commands

from serverstats.audit import audit_log
from serverstats.config import load_config

COMMANDS = [
    ("help", "Show help menu"),
    ("stats-setup", "Create statistics channels"),
    ("stats-remove", "Remove statistics channels"),
    ("stats-refresh", "Manually refresh statistics"),
]

NOTES = [
    "Statistics are updated automatically when changes occur",
    "Administrator permissions are required to use commands",
    "Voice channels are for display purposes only",
]


def build_help_embed(prefix: str, footer: str) -> discord.Embed:
    embed = discord.Embed(
        title="📊 Server Statistics - Help Guide",
        description="Hello! I am a bot dedicated to displaying server statistics automatically",
        color=discord.Color.from_str("#0099ff"),
        timestamp=discord.utils.utcnow(),
    )
    embed.add_field(
        name="🛠️ Available Commands",
        value="\n".join(f"`{prefix}{name}` - {desc}" for name, desc in COMMANDS),
        inline=False,
    )
    embed.add_field(
        name="📝 Important Notes",
        value="\n".join(f"• {note}" for note in NOTES),
        inline=False,
    )
    embed.set_footer(text=footer)
    return embed


class Help(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot
        config = load_config()
        self.prefix = config["command_prefix"]
        self.footer = config["help_footer"]

    @commands.Cog.listener()
    async def on_ready(self):
        logging.info("\033[96mHelp\033[0m cog synced successfully.")
        audit_log("Help cog synced successfully.")

    @commands.command(name="help", help="Show help menu")
    async def help(self, ctx: commands.Context):
        embed = build_help_embed(self.prefix, self.footer)
        try:
            await ctx.reply(embed=embed, mention_author=False)
        except discord.HTTPException as e:
            logging.warning(f"Failed to send help embed: {e}")
        audit_log(f"{ctx.author} (ID: {ctx.author.id}) requested the help menu.")


async def setup(bot: commands.Bot):
    await bot.add_cog(Help(bot))
