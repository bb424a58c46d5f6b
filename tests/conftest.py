import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from finbot.bot import MessageProcessor
from finbot.channel import InboundMessage
from finbot.config import Settings
from finbot.database import MemoryStore
from finbot.schemas.ledger import SELF_AUTHOR, Entry, EntryKind
from finbot.state import AppState

# Monday
FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

OWNER_CHAT = "5511900000000@c.us"
FRIEND = "5511988887777"
STRANGER = "5511911112222"


class FakeChannel:
    def __init__(self):
        self.replies = []

    async def reply(self, message, text):
        self.replies.append(text)


class Clock:
    def __init__(self, now=FIXED_NOW):
        self.now = now

    def __call__(self):
        return self.now


def make_message(text, is_self=True, sender=OWNER_CHAT, chat=None, fetch_attachment=None):
    return InboundMessage(
        text=text,
        sender_id=sender,
        chat_id=chat or sender,
        is_self=is_self,
        has_attachment=fetch_attachment is not None,
        fetch_attachment=fetch_attachment,
    )


def make_entry(value, category, when=FIXED_NOW, kind=EntryKind.TEXT, author=SELF_AUTHOR):
    return Entry(value=Decimal(str(value)), category=category, timestamp=when, kind=kind, author=author)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        storage_backend="memory",
        data_dir=tmp_path / "data",
        receipts_dir=tmp_path / "receipts",
        timezone="UTC",
    )


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def state(settings, store, clock):
    return AppState.load(settings, store=store, clock=clock)


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def processor(state, channel):
    return MessageProcessor(state, channel)


@pytest.fixture
def send(state, processor, channel):
    """Send one message with the owner chat already bound; returns the reply or None"""
    state.gate.bind(OWNER_CHAT)

    def _send(text, **kwargs):
        before = len(channel.replies)
        asyncio.run(processor.handle_message(make_message(text, **kwargs)))
        replies = channel.replies[before:]
        assert len(replies) <= 1
        return replies[0] if replies else None

    return _send
