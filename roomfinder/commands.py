"""Chat commands understood by the bot and the replies they produce.

A command is sent by mentioning the bot, either before or after the command
word, e.g. ``@bot salles`` or ``salles @bot``. Replies are built as
platform-neutral ``Reply`` objects; the chat adapter turns them into
messages.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from .availability import all_rooms, free_rooms, group_by_building
from .feed_client import IngestError
from .sync import DirectorySync

logger = logging.getLogger(__name__)

HELP_DESCRIPTION = "**Envoyer une commande:**\n> @bot <commande>\n**Commandes supportées:**"

COMMAND_HELP: Tuple[Tuple[str, str], ...] = (
    ("`salle`, `cherche` ou rien", "Trouver une salle libre maintenant"),
    ("`salles`", "Voir toutes les salles connues, par bâtiment"),
    ("`maj`, `sync`", "Recharger le calendrier"),
    ("`aide`, `help`", "Afficher cette aide"),
)


class IntentKind(enum.Enum):
    FIND = "find"
    ROOMS = "rooms"
    RESYNC = "resync"
    HELP = "help"


@dataclass(frozen=True)
class Intent:
    kind: IntentKind
    # Set when help is shown because the typed command is unknown.
    unknown_command: Optional[str] = None


@dataclass
class Reply:
    """A chat message: plain content plus an optional embed."""

    content: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    fields: List[Tuple[str, str]] = field(default_factory=list)
    footer: Optional[str] = None

    @property
    def has_embed(self) -> bool:
        return bool(self.title or self.description or self.fields or self.footer)


def get_command(message: str) -> Optional[str]:
    """Extract the command word from a message that mentions the bot.

    ``"<@id> salles"`` and ``"salles <@id>"`` both give ``"salles"``; a bare
    mention gives ``""``. Messages with more than two words give ``None``.
    The message is assumed to contain the mention; it is not checked.
    """
    parts = message.split()
    if not parts or len(parts) > 2:
        return None
    first = parts[0]
    second = parts[1] if len(parts) == 2 else None
    # Mentions are rendered as ``<@id>``.
    if first.startswith("<"):
        return second if second is not None else ""
    return first


def resolve_intent(command: str) -> Intent:
    if command in ("", "salle", "cherche"):
        return Intent(IntentKind.FIND)
    if command == "salles":
        return Intent(IntentKind.ROOMS)
    if command in ("sync", "maj"):
        return Intent(IntentKind.RESYNC)
    if command in ("help", "aide"):
        return Intent(IntentKind.HELP)
    return Intent(IntentKind.HELP, unknown_command=command)


def format_last_update(at: Optional[datetime]) -> str:
    if at is None:
        return "Jamais mis à jour"
    return at.astimezone(timezone.utc).strftime("Dernière mise à jour le %d/%m/%Y à %H:%M UTC")


def find_reply(sync: DirectorySync, now: datetime) -> Reply:
    directory = sync.current()
    if not len(directory):
        return Reply(content="Je ne connais aucune salle pour l'instant.")
    rooms = sorted(free_rooms(directory, now))
    if not rooms:
        return Reply(content="Aucune salle libre pour le moment.")
    return Reply(content="Salles libres: " + ", ".join(str(room) for room in rooms))


def rooms_reply(sync: DirectorySync) -> Reply:
    directory = sync.current()
    buildings = group_by_building(sorted(all_rooms(directory)))
    return Reply(
        content="Voici ma base de données actuelle:",
        fields=[
            (f"Bâtiment {building}", ", ".join(str(room) for room in rooms))
            for building, rooms in buildings.items()
        ],
        footer=format_last_update(sync.last_synced_at),
    )


def resync_reply(sync: DirectorySync) -> Reply:
    try:
        directory = sync.resync()
    except IngestError as exc:
        return Reply(
            content=f"Impossible de recharger le calendrier ({exc}). Les anciennes données sont conservées.",
            footer=format_last_update(sync.last_synced_at),
        )
    return Reply(
        content=f"Calendrier rechargé: {len(directory)} salles, {directory.booking_count} réservations.",
        footer=format_last_update(sync.last_synced_at),
    )


def help_reply(unknown_command: Optional[str] = None) -> Reply:
    content = None
    if unknown_command is not None:
        content = f"Je ne connais pas la commande `{unknown_command}`, jette un œil à celles que je supporte ⬇️"
    return Reply(
        content=content,
        title="Aide",
        description=HELP_DESCRIPTION,
        fields=list(COMMAND_HELP),
    )


def execute(intent: Intent, sync: DirectorySync, now: Optional[datetime] = None) -> Reply:
    """Run ``intent`` against ``sync`` and build the reply.

    ``RESYNC`` downloads the feed and may block; async callers should run
    this in a worker thread.
    """
    logger.debug("Executing %s", intent)
    if intent.kind is IntentKind.FIND:
        return find_reply(sync, now or datetime.now(timezone.utc))
    if intent.kind is IntentKind.ROOMS:
        return rooms_reply(sync)
    if intent.kind is IntentKind.RESYNC:
        return resync_reply(sync)
    return help_reply(intent.unknown_command)
