"""
Notification dispatcher and inbox tests.
"""

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from sayit.errors import NotFound
from sayit.models import EntityRef, Notification, Recipient
from sayit.models.notification import MAX_EXPIRY_DAYS, clamp_expiry
from sayit.services import notifications


@pytest.fixture
def citizen(factory):
    return factory.standard_user()


@pytest.fixture
def inbox(citizen):
    return Recipient('standard_user', citizen.id)


def send(recipient, title='Notice', **kwargs):
    return notifications.dispatch(notifications.SystemMessage(recipient, title, 'Body', **kwargs))


class TestExpiry:
    """Notification lifetime is capped."""

    def test_requested_expiry_beyond_ceiling_is_clamped(self, inbox):
        before = datetime.utcnow()
        notification = send(inbox, expiry_days=365)

        assert notification.expires_at <= before + timedelta(days=MAX_EXPIRY_DAYS, seconds=5)
        assert notification.expires_at >= before + timedelta(days=MAX_EXPIRY_DAYS - 1)

    def test_short_expiry_kept(self, inbox):
        before = datetime.utcnow()
        notification = send(inbox, expiry_days=7)

        assert notification.expires_at < before + timedelta(days=8)

    def test_clamp_expiry_helper(self):
        now = datetime(2024, 1, 1)
        assert clamp_expiry(now + timedelta(days=400), now) == now + timedelta(days=90)
        assert clamp_expiry(now + timedelta(days=10), now) == now + timedelta(days=10)
        assert clamp_expiry(None, now) == now + timedelta(days=90)


class TestTemplates:
    """Rendering of each event kind."""

    def test_every_event_has_a_template(self):
        for event_type in (notifications.SubmissionConfirmed, notifications.StatusChanged,
                           notifications.ResponseReceived, notifications.UserResponseRecorded,
                           notifications.SystemMessage):
            assert event_type in notifications.TEMPLATES

    def test_unknown_new_status_falls_back_to_generic(self, world, factory):
        complaint = factory.complaint(world.citizen, world.category)
        draft = notifications.render(notifications.StatusChanged(complaint, 'pending', 'archived'))

        assert draft.title == 'Complaint Status Updated'
        assert draft.message == (f'The status of your complaint "{complaint.title}" '
                                 'has changed from pending to archived.')
        assert draft.priority == 'normal'

    def test_system_message_defaults(self, inbox):
        message = notifications.SystemMessage(inbox, 'Maintenance', 'Down at noon')
        draft = notifications.render(message)

        assert draft.priority == 'normal'
        assert draft.expiry_days == 30
        assert draft.actions == []
        assert draft.related is None


class TestDispatch:
    """Writing notifications."""

    def test_system_message_written_for_recipient(self, inbox):
        related = EntityRef.complaint(42)
        notification = send(inbox, priority='high', related=related)

        assert notification.id is not None
        assert notification.recipient == inbox
        assert notification.related == related
        assert notification.read is False
        assert notification.to_dict()['related'] == {'kind': 'Complaint', 'id': 42}

    def test_write_failure_returns_none(self, inbox):
        with patch.object(db.session, 'commit', side_effect=SQLAlchemyError('disk full')):
            assert send(inbox) is None
        assert Notification.query.count() == 0

    def test_recipient_kind_validated(self):
        with pytest.raises(ValueError):
            Recipient('staff', 1)

    def test_broadcast_counts_sent(self, factory):
        recipients = [Recipient('standard_user', factory.standard_user().id) for _ in range(3)]
        assert notifications.broadcast(recipients, 'Hello', 'Everyone') == 3
        assert Notification.query.count() == 3


class TestInbox:
    """Reading, marking and deleting."""

    def test_recent_is_newest_first_and_skips_expired(self, inbox):
        first = send(inbox, title='First')
        second = send(inbox, title='Second')
        expired = send(inbox, title='Expired')
        expired.expires_at = datetime.utcnow() - timedelta(minutes=1)
        db.session.commit()

        items = notifications.find_recent(inbox).all()

        assert [n.id for n in items] == [second.id, first.id]

    def test_unread_count_and_mark_read(self, inbox):
        notification = send(inbox)
        send(inbox)
        assert notifications.count_unread(inbox) == 2

        notifications.mark_read(inbox, notification.id)

        assert notification.read is True
        assert notification.read_at is not None
        assert notifications.count_unread(inbox) == 1
        assert len(notifications.find_unread(inbox)) == 1

    def test_mark_all_read(self, inbox):
        for _ in range(3):
            send(inbox)

        assert notifications.mark_all_read(inbox) == 3
        assert notifications.count_unread(inbox) == 0

    def test_cannot_touch_someone_elses_notification(self, inbox, factory):
        other = Recipient('standard_user', factory.standard_user().id)
        notification = send(other)

        with pytest.raises(NotFound):
            notifications.mark_read(inbox, notification.id)
        with pytest.raises(NotFound):
            notifications.delete(inbox, notification.id)

    def test_delete(self, inbox):
        notification = send(inbox)
        notifications.delete(inbox, notification.id)
        assert Notification.query.count() == 0


class TestPurge:
    """Retention clean-up."""

    def test_purge_old_read_only_removes_old_read(self, inbox):
        old_read = send(inbox)
        old_unread = send(inbox)
        recent_read = send(inbox)
        long_ago = datetime.utcnow() - timedelta(days=45)
        old_read.created_at = old_unread.created_at = long_ago
        old_read.read = recent_read.read = True
        db.session.commit()

        assert notifications.purge_old_read(days_old=30) == 1
        remaining = {n.id for n in Notification.query.all()}
        assert remaining == {old_unread.id, recent_read.id}

    def test_purge_old_read_scoped_to_recipient(self, inbox, factory):
        other = Recipient('standard_user', factory.standard_user().id)
        mine, theirs = send(inbox), send(other)
        for notification in (mine, theirs):
            notification.read = True
            notification.created_at = datetime.utcnow() - timedelta(days=60)
        db.session.commit()

        assert notifications.purge_old_read(recipient=inbox, days_old=30) == 1
        assert Notification.query.one().id == theirs.id

    def test_purge_expired(self, inbox):
        send(inbox)
        expired = send(inbox)
        expired.expires_at = datetime.utcnow() - timedelta(days=1)
        db.session.commit()

        assert notifications.purge_expired() == 1
        assert Notification.query.count() == 1
