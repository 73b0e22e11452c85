import pytest

from models.notification_model import Notification
from services import notification_service
from services.errors import AuthorizationError, NotFoundError, ValidationError
from services.identity_service import actor_for_user


def _seed(db, user, n=3):
    for i in range(n):
        notification_service.create_notification(db, user.id, f"Title {i}", f"Body {i}", type="promo")
    db.commit()


def test_list_newest_first_with_limit_and_unread_filter(db, buyer):
    _seed(db, buyer, 4)
    actor = actor_for_user(buyer)
    all_notes = notification_service.list_notifications(db, actor)
    assert len(all_notes) == 4
    assert all_notes[0].created_at >= all_notes[-1].created_at

    assert len(notification_service.list_notifications(db, actor, limit=2)) == 2

    notification_service.mark_read(db, actor, all_notes[0].id)
    assert len(notification_service.list_notifications(db, actor, unread_only=True)) == 3
    assert notification_service.unread_count(db, actor) == 3


def test_only_owner_may_mark_or_delete(db, buyer, seller):
    _seed(db, buyer, 1)
    note = db.query(Notification).filter_by(user_id=buyer.id).one()
    note_id = note.id

    with pytest.raises(AuthorizationError):
        notification_service.mark_read(db, actor_for_user(seller), note.id)
    with pytest.raises(AuthorizationError):
        notification_service.delete_notification(db, actor_for_user(seller), note.id)

    db.refresh(note)
    assert note.is_read is False

    notification_service.delete_notification(db, actor_for_user(buyer), note_id)
    assert db.query(Notification).count() == 0
    with pytest.raises(NotFoundError):
        notification_service.mark_read(db, actor_for_user(buyer), note_id)


def test_mark_all_read_touches_only_own_notifications(db, buyer, seller):
    _seed(db, buyer, 2)
    _seed(db, seller, 1)
    assert notification_service.mark_all_read(db, actor_for_user(buyer)) == 2
    assert notification_service.unread_count(db, actor_for_user(buyer)) == 0
    assert notification_service.unread_count(db, actor_for_user(seller)) == 1


def test_notification_type_is_validated(db, buyer):
    with pytest.raises(ValidationError):
        notification_service.create_notification(db, buyer.id, "t", "m", type="spam")


def test_status_change_helper_ignores_no_op(db, order):
    assert notification_service.notify_status_change(db, order, "pending", "pending") is None
    n = notification_service.notify_status_change(db, order, "pending", "confirmed")
    assert n.message == f"Your order #{order.id[:8]} status changed to: confirmed"
    assert n.link == f"/orders/{order.id}/tracking"
