import pytest

from hackmate.domain.notifications import INVITATION_ACCEPTED, INVITATION_RECEIVED, NotificationDispatcher
from hackmate.domain.notifications.mailer import mask_email
from hackmate.domain.notifications.templates import UnknownTemplate, render
from hackmate.settings import settings


def test_invitation_received_escapes_user_text():
    rendered = render(
        INVITATION_RECEIVED,
        "Bob",
        {"sender_name": "Alice <script>", "message": "<b>join us</b>"},
    )
    assert rendered.subject.startswith("Alice <script>")
    assert "Alice &lt;script&gt;" in rendered.html
    assert "&lt;b&gt;join us&lt;/b&gt;" in rendered.html
    assert f"{settings.app_url.rstrip('/')}/connections" in rendered.html


def test_invitation_accepted_without_name_falls_back():
    rendered = render(INVITATION_ACCEPTED, "Alice", {})
    assert "accepted" in rendered.subject
    assert "Your teammate" in rendered.html


def test_unknown_template():
    with pytest.raises(UnknownTemplate):
        render("password_reset", "Alice", {})


def test_mask_email_is_stable_and_case_insensitive():
    assert mask_email("Bob@Example.com") == mask_email("bob@example.com")
    assert "bob" not in mask_email("bob@example.com")


@pytest.mark.asyncio
async def test_delivers_to_recipient_email(users, mailer):
    dispatcher = NotificationDispatcher(mailer=mailer, enabled=True)
    task = dispatcher.notify("bob", INVITATION_RECEIVED, {"sender_name": "Alice Chen"})
    assert task is not None
    await dispatcher.drain()
    assert mailer.sent[0]["to"] == "bob@example.com"
    assert "Hi Bob Okafor" in mailer.sent[0]["html"]
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_disabled_dispatcher_sends_nothing(users, mailer):
    dispatcher = NotificationDispatcher(mailer=mailer, enabled=False)
    assert dispatcher.notify("bob", INVITATION_RECEIVED, {}) is None
    await dispatcher.drain()
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_recipient_without_email_is_skipped(memory_db, mailer):
    memory_db.add_user("dave", display_name="Dave")
    dispatcher = NotificationDispatcher(mailer=mailer, enabled=True)
    dispatcher.notify("dave", INVITATION_ACCEPTED, {"receiver_name": "Alice"})
    dispatcher.notify("ghost", INVITATION_ACCEPTED, {"receiver_name": "Alice"})
    await dispatcher.drain()
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_mailer_failure_is_contained(users, mailer):
    mailer.fail = True
    dispatcher = NotificationDispatcher(mailer=mailer, enabled=True)
    task = dispatcher.notify("bob", INVITATION_RECEIVED, {"sender_name": "Alice"})
    await dispatcher.drain()
    assert task.done() and task.exception() is None
