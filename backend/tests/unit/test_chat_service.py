import asyncio

import pytest

from hackmate.domain.chat.exceptions import (
    CannotMessageSelf,
    ConversationMismatch,
    ConversationNotFound,
    EmptyMessage,
    MessageTooLong,
    NotMatched,
    NotParticipant,
)
from hackmate.domain.chat.repo import MemoryChatRepository
from hackmate.domain.chat.service import ChatService
from hackmate.domain.common.errors import ErrorKind
from hackmate.domain.matches.repo import MemoryMatchRepository
from hackmate.domain.matches.service import MatchService
from hackmate.infra.postgres import StoreUnavailable


@pytest.fixture
def matches():
    return MatchService(repository=MemoryMatchRepository())


@pytest.fixture
def chat(matches):
    return ChatService(repository=MemoryChatRepository(), match_service=matches)


@pytest.mark.asyncio
async def test_unmatched_users_cannot_message(users, chat, memory_db):
    with pytest.raises(NotMatched) as excinfo:
        await chat.send_message("alice", "bob", "hi")
    assert excinfo.value.kind is ErrorKind.FORBIDDEN
    assert memory_db.conversations == {}
    assert memory_db.messages == {}


@pytest.mark.asyncio
async def test_cannot_message_self(users, chat):
    with pytest.raises(CannotMessageSelf):
        await chat.send_message("alice", "alice", "note to self")


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   ", "\n\t"])
async def test_blank_content_rejected(users, matches, chat, content):
    await matches.get_or_create("alice", "bob")
    with pytest.raises(EmptyMessage) as excinfo:
        await chat.send_message("alice", "bob", content)
    assert excinfo.value.kind is ErrorKind.INVALID_REQUEST


@pytest.mark.asyncio
async def test_content_over_limit_rejected(users, matches, chat):
    await matches.get_or_create("alice", "bob")
    with pytest.raises(MessageTooLong):
        await chat.send_message("alice", "bob", "y" * 4001)
    sent = await chat.send_message("alice", "bob", "y" * 4000)
    assert len(sent.message.content) == 4000


@pytest.mark.asyncio
async def test_first_message_creates_the_conversation(users, matches, chat, memory_db):
    await matches.get_or_create("alice", "bob")

    first = await chat.send_message("alice", "bob", "  Hey Bob!  ", conversation_id="new")
    assert first.conversation_created is True
    assert first.message.content == "Hey Bob!"
    assert first.message.read is False

    reply = await chat.send_message("bob", "alice", "Hi Alice", conversation_id=first.conversation_id)
    assert reply.conversation_created is False
    assert reply.conversation_id == first.conversation_id
    assert list(memory_db.conversations) == [("alice", "bob")]


@pytest.mark.asyncio
async def test_concurrent_first_messages_share_one_conversation(users, matches, chat, memory_db):
    await matches.get_or_create("alice", "bob")

    results = await asyncio.gather(
        *(
            chat.send_message(sender, recipient, f"msg {i}")
            for i, (sender, recipient) in enumerate([("alice", "bob"), ("bob", "alice")] * 4)
        )
    )

    assert len({r.conversation_id for r in results}) == 1
    assert sum(1 for r in results if r.conversation_created) == 1
    assert len(memory_db.conversations) == 1
    assert len(memory_db.messages[results[0].conversation_id]) == 8


@pytest.mark.asyncio
async def test_messages_listed_in_send_order(users, matches, chat):
    await matches.get_or_create("alice", "bob")
    sent = []
    for sender, recipient in [("alice", "bob"), ("bob", "alice"), ("alice", "bob")]:
        sent.append(await chat.send_message(sender, recipient, f"from {sender}"))
    conversation_id = sent[0].conversation_id

    listed = await chat.list_messages(conversation_id, "bob")
    assert [m.id for m in listed] == [s.message.id for s in sent]
    assert [m.seq for m in listed] == sorted(m.seq for m in listed)
    assert listed == await chat.list_messages(conversation_id, "alice")


@pytest.mark.asyncio
async def test_mark_read_only_touches_incoming_and_is_idempotent(users, matches, chat):
    await matches.get_or_create("alice", "bob")
    first = await chat.send_message("alice", "bob", "one")
    await chat.send_message("alice", "bob", "two")
    await chat.send_message("bob", "alice", "three")
    conversation_id = first.conversation_id

    assert await chat.mark_read(conversation_id, "bob") == 2
    assert await chat.mark_read(conversation_id, "bob") == 0

    listed = await chat.list_messages(conversation_id, "bob")
    assert [m.read for m in listed] == [True, True, False]


@pytest.mark.asyncio
async def test_outsider_cannot_read_or_mark(users, matches, chat):
    await matches.get_or_create("alice", "bob")
    sent = await chat.send_message("alice", "bob", "private")

    with pytest.raises(NotParticipant):
        await chat.list_messages(sent.conversation_id, "carol")
    with pytest.raises(NotParticipant):
        await chat.mark_read(sent.conversation_id, "carol")


@pytest.mark.asyncio
async def test_unknown_conversation(users, chat):
    with pytest.raises(ConversationNotFound) as excinfo:
        await chat.list_messages("does-not-exist", "alice")
    assert excinfo.value.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_conversation_id_must_belong_to_the_pair(users, matches, chat, memory_db):
    await matches.get_or_create("alice", "bob")
    await matches.get_or_create("alice", "carol")
    with_bob = await chat.send_message("alice", "bob", "hi bob")

    with pytest.raises(ConversationMismatch):
        await chat.send_message("alice", "carol", "hi carol", conversation_id=with_bob.conversation_id)
    with pytest.raises(ConversationMismatch):
        await chat.send_message("carol", "alice", "hi", conversation_id="made-up")
    assert len(memory_db.conversations) == 1


@pytest.mark.asyncio
async def test_list_conversations_most_recent_first(users, matches, chat):
    await matches.get_or_create("alice", "bob")
    await matches.get_or_create("alice", "carol")

    with_bob = await chat.send_message("alice", "bob", "first")
    with_carol = await chat.send_message("carol", "alice", "second")

    items = await chat.list_conversations("alice")
    assert [i.id for i in items] == [with_carol.conversation_id, with_bob.conversation_id]
    assert items[0].other_user.display_name == "Carol Silva"
    assert items[0].last_message.content == "second"
    assert items[0].unread_count == 1
    assert items[1].unread_count == 0

    await chat.send_message("bob", "alice", "bump")
    items = await chat.list_conversations("alice")
    assert [i.id for i in items] == [with_bob.conversation_id, with_carol.conversation_id]
    assert items[0].last_message.content == "bump"
    assert items[0].updated_at >= items[0].created_at

    assert await chat.list_conversations("nobody") == []


@pytest.mark.asyncio
async def test_failed_first_message_leaves_no_conversation(users, matches, memory_db):
    class FailingRepository(MemoryChatRepository):
        def _message_row(self, conversation_id, sender_id, content):
            raise StoreUnavailable()

    chat = ChatService(repository=FailingRepository(), match_service=matches)
    await matches.get_or_create("alice", "bob")

    with pytest.raises(StoreUnavailable):
        await chat.send_message("alice", "bob", "hi!")

    assert memory_db.conversations == {}
    assert memory_db.messages == {}
    assert await chat.list_conversations("alice") == []
    assert await chat.list_conversations("bob") == []


@pytest.mark.asyncio
async def test_unread_count_after_mark_read_and_new_message(users, matches, chat):
    await matches.get_or_create("alice", "bob")
    first = await chat.send_message("alice", "bob", "hi!")
    await chat.send_message("alice", "bob", "are you around?")
    conversation_id = first.conversation_id

    [item] = await chat.list_conversations("bob")
    assert item.unread_count == 2

    await chat.mark_read(conversation_id, "bob")
    [item] = await chat.list_conversations("bob")
    assert item.unread_count == 0

    await chat.mark_read(conversation_id, "bob")
    [item] = await chat.list_conversations("bob")
    assert item.unread_count == 0

    await chat.send_message("alice", "bob", "one more thing")
    [item] = await chat.list_conversations("bob")
    assert item.unread_count == 1

    # bob's own reply does not count against him
    await chat.send_message("bob", "alice", "here")
    [item] = await chat.list_conversations("bob")
    assert item.unread_count == 1
