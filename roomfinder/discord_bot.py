"""Discord chat adapter.

Connects to Discord with discord.py and answers commands sent by mentioning
the bot (see ``roomfinder.commands``). Only messages from humans with the
bot as their single mention are handled.
"""

from __future__ import annotations

import asyncio
import logging

import discord

from .commands import Reply, execute, get_command, resolve_intent
from .sync import DirectorySync

logger = logging.getLogger(__name__)

EMBED_COLOR = 0x5865F2


def to_embed(reply: Reply) -> discord.Embed:
    embed = discord.Embed(title=reply.title, description=reply.description, color=EMBED_COLOR)
    for name, value in reply.fields:
        embed.add_field(name=name, value=value or "-", inline=False)
    if reply.footer:
        embed.set_footer(text=reply.footer)
    return embed


class RoomBot(discord.Client):
    """Discord client answering room availability commands."""

    def __init__(self, sync: DirectorySync) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)
        self.sync = sync

    async def on_ready(self) -> None:
        logger.info("Discord bot ready: %s", self.user)

    def is_addressed(self, message: discord.Message) -> bool:
        return (
            not message.author.bot
            and len(message.mentions) == 1
            and self.user is not None
            and message.mentions[0].id == self.user.id
        )

    async def on_message(self, message: discord.Message) -> None:
        if not self.is_addressed(message):
            return
        command = get_command(message.content)
        if command is None:
            return

        # Resync downloads the feed, keep it off the event loop.
        reply = await asyncio.to_thread(execute, resolve_intent(command), self.sync)
        try:
            if reply.has_embed:
                await message.channel.send(content=reply.content, embed=to_embed(reply))
            else:
                await message.channel.send(content=reply.content)
        except discord.HTTPException as exc:
            logger.error("Error while sending message: %s", exc)


def run_bot(sync: DirectorySync, token: str) -> None:
    """Run the bot until interrupted. Logging is left as configured."""
    RoomBot(sync).run(token.strip(), log_handler=None)
