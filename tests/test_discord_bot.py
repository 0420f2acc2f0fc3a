"""Tests for the Discord adapter's message filter and embed rendering.

Messages and the bot user are stood in by simple namespaces; nothing here
connects to Discord.
"""

from types import SimpleNamespace

import pytest

from roomfinder.commands import Reply
from roomfinder.discord_bot import EMBED_COLOR, RoomBot, to_embed

BOT = SimpleNamespace(id=1)
ALICE = SimpleNamespace(id=2, bot=False)
OTHER_BOT = SimpleNamespace(id=3, bot=True)


def _message(author=ALICE, mentions=(BOT,), content="<@1> salles"):
    return SimpleNamespace(author=author, mentions=list(mentions), content=content)


def _is_addressed(message, user=BOT) -> bool:
    return RoomBot.is_addressed(SimpleNamespace(user=user), message)


class TestIsAddressed:
    def test_single_mention_of_bot(self):
        assert _is_addressed(_message())

    def test_bot_author_ignored(self):
        assert not _is_addressed(_message(author=OTHER_BOT))

    def test_two_mentions_ignored(self):
        assert not _is_addressed(_message(mentions=(BOT, ALICE)))

    def test_mention_of_someone_else_ignored(self):
        assert not _is_addressed(_message(mentions=(ALICE,)))

    def test_no_mention_ignored(self):
        assert not _is_addressed(_message(mentions=()))

    def test_not_logged_in(self):
        assert not _is_addressed(_message(), user=None)


class TestToEmbed:
    def test_fields_and_footer(self):
        reply = Reply(
            title="Aide",
            description="desc",
            fields=[("Bâtiment A", "A101, A102"), ("Bâtiment B", "B202")],
            footer="Dernière mise à jour",
        )
        embed = to_embed(reply)
        assert embed.title == "Aide"
        assert embed.description == "desc"
        assert embed.color.value == EMBED_COLOR
        assert [(f.name, f.value, f.inline) for f in embed.fields] == [
            ("Bâtiment A", "A101, A102", False),
            ("Bâtiment B", "B202", False),
        ]
        assert embed.footer.text == "Dernière mise à jour"

    def test_empty_field_value_rendered_as_dash(self):
        embed = to_embed(Reply(fields=[("Bâtiment C", "")]))
        assert embed.fields[0].value == "-"

    @pytest.mark.parametrize("footer", [None, ""])
    def test_no_footer(self, footer):
        embed = to_embed(Reply(title="Aide", footer=footer))
        assert not embed.footer.text
