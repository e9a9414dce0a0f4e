import discord
import logging
from discord.ext import commands
from typing import Optional

from serverstats.audit import audit_log
from serverstats.config import load_config
from serverstats.reconciler import SetupResult, StatsReconciler, TeardownResult
from serverstats.storage import StatsStore


class ServerStats(commands.Cog):
    """
    Maintains locked voice channels that display member, bot, channel and role
    counts. Every guild event that can change a count triggers a refresh.
    """

    def __init__(
        self, bot: commands.Bot, reconciler: Optional[StatsReconciler] = None
    ):
        self.bot = bot
        if reconciler is None:
            config = load_config()
            reconciler = StatsReconciler(
                StatsStore(config["stats_file"]),
                category_name=config["stats_category_name"],
            )
        self.reconciler = reconciler
        self._resumed = False

    # ---------------------------
    # Lifecycle
    # ---------------------------

    @commands.Cog.listener()
    async def on_ready(self):
        logging.info("\033[96mServerStats\033[0m cog synced successfully.")
        audit_log("ServerStats cog synced successfully.")

        # on_ready fires again after reconnects; state is only loaded once.
        if self._resumed:
            return
        self._resumed = True
        try:
            await self.reconciler.resume(self.bot.get_guild)
        except Exception as e:
            logging.error(f"Error restoring server stats at startup: {e}", exc_info=True)
            audit_log(f"Error restoring server stats at startup: {e}")

    # ---------------------------
    # Event listeners
    # ---------------------------

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member):
        await self.reconciler.refresh(member.guild)

    @commands.Cog.listener()
    async def on_member_remove(self, member: discord.Member):
        await self.reconciler.refresh(member.guild)

    @commands.Cog.listener()
    async def on_guild_channel_create(self, channel: discord.abc.GuildChannel):
        await self.reconciler.refresh(getattr(channel, "guild", None))

    @commands.Cog.listener()
    async def on_guild_channel_delete(self, channel: discord.abc.GuildChannel):
        await self.reconciler.refresh(getattr(channel, "guild", None))

    @commands.Cog.listener()
    async def on_guild_role_create(self, role: discord.Role):
        await self.reconciler.refresh(role.guild)

    @commands.Cog.listener()
    async def on_guild_role_delete(self, role: discord.Role):
        await self.reconciler.refresh(role.guild)

    # ---------------------------
    # Commands
    # ---------------------------

    @commands.command(name="stats-setup", help="Create statistics channels")
    @commands.guild_only()
    @commands.has_permissions(administrator=True)
    async def stats_setup(self, ctx: commands.Context):
        await ctx.reply("⏳ Setting up statistics channels...", mention_author=False)
        result = await self.reconciler.setup(ctx.guild)

        if result is SetupResult.CREATED:
            await ctx.reply(
                "✅ Statistics channels created successfully! They will update automatically when changes occur.",
                mention_author=False,
            )
            audit_log(
                f"{ctx.author} (ID: {ctx.author.id}) set up stats channels in guild '{ctx.guild.name}' ({ctx.guild.id})."
            )
        else:
            await ctx.reply(
                "❌ Channels already exist or an error occurred during creation!",
                mention_author=False,
            )

    @commands.command(name="stats-remove", help="Remove statistics channels")
    @commands.guild_only()
    @commands.has_permissions(administrator=True)
    async def stats_remove(self, ctx: commands.Context):
        result = await self.reconciler.teardown(ctx.guild)

        if result is TeardownResult.REMOVED:
            await ctx.reply(
                "✅ Statistics channels removed successfully!", mention_author=False
            )
            audit_log(
                f"{ctx.author} (ID: {ctx.author.id}) removed stats channels in guild '{ctx.guild.name}' ({ctx.guild.id})."
            )
        else:
            await ctx.reply("❌ No statistics channels found!", mention_author=False)

    @commands.command(name="stats-refresh", help="Manually refresh statistics")
    @commands.guild_only()
    @commands.has_permissions(administrator=True)
    async def stats_refresh(self, ctx: commands.Context):
        await ctx.reply("⏳ Refreshing statistics...", mention_author=False)
        await self.reconciler.refresh(ctx.guild)
        await ctx.reply("✅ Statistics refreshed successfully!", mention_author=False)

    async def cog_command_error(
        self, ctx: commands.Context, error: commands.CommandError
    ):
        if isinstance(error, commands.MissingPermissions):
            await ctx.reply(
                "❌ Sorry, this command is only available to administrators!",
                mention_author=False,
            )
        elif isinstance(error, commands.NoPrivateMessage):
            await ctx.reply(
                "This command must be used in a server.", mention_author=False
            )
        else:
            logging.error(
                f"Unexpected error in {ctx.command}: {error}",
                exc_info=error,
            )
            audit_log(f"Unexpected error in {ctx.command}: {error}")
            await ctx.reply(
                "❌ Channels already exist or an error occurred during creation!"
                if ctx.command and ctx.command.name == "stats-setup"
                else "❌ Something went wrong. Please try again later.",
                mention_author=False,
            )


async def setup(bot: commands.Bot):
    await bot.add_cog(ServerStats(bot))
