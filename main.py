import discord
from discord.ext import commands
import os
import sys
import asyncio
import logging
from dotenv import load_dotenv

from serverstats.audit import audit_log
from serverstats.config import load_config

# Load environment variables from .env file
load_dotenv()


# Define ANSI escape sequences for colours
class CustomFormatter(logging.Formatter):
    LEVEL_COLOURS = {
        logging.DEBUG: "\033[0;36m",  # Cyan
        logging.INFO: "\033[0;32m",  # Green
        logging.WARNING: "\033[0;33m",  # Yellow
        logging.ERROR: "\033[0;31m",  # Red
        logging.CRITICAL: "\033[1;41m",  # Red background w/ bold text
    }
    RESET_COLOUR = "\033[0m"

    def format(self, record):
        level_name = (
            self.LEVEL_COLOURS.get(record.levelno, self.RESET_COLOUR)
            + record.levelname
            + self.RESET_COLOUR
        )
        record.levelname = level_name
        return super().format(record)


# Configure logging
formatter = CustomFormatter(
    "%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
)
handler = logging.StreamHandler()
handler.setFormatter(formatter)
logging.basicConfig(level=logging.INFO, handlers=[handler])

config = load_config()

# Retrieve the bot token from the .env file
BOT_TOKEN = os.environ.get("TOKEN")
if BOT_TOKEN is None:
    logging.error("Bot token not found in .env file. Please set TOKEN!")
    sys.exit(1)

intents = discord.Intents.default()
intents.guilds = True
intents.members = True
intents.presences = True
intents.messages = True
intents.message_content = True

# The Help cog provides the help command
bot = commands.Bot(
    command_prefix=config["command_prefix"], intents=intents, help_command=None
)


@bot.event
async def on_ready():
    logging.info(f"Successfully logged in as \033[96m{bot.user}\033[0m")
    audit_log(f"Bot logged in as {bot.user} (ID: {bot.user.id}).")


# Load all cogs
async def load_cogs():
    """Loads all .py files in the 'cogs' folder as extensions."""
    for filename in sorted(os.listdir("./cogs")):
        if filename.endswith(".py") and not filename.startswith("_"):
            await bot.load_extension(f"cogs.{filename[:-3]}")
            audit_log(f"Loaded cog: {filename[:-3]}")


async def main():
    async with bot:
        await load_cogs()
        await bot.start(BOT_TOKEN)


if __name__ == "__main__":
    asyncio.run(main())
