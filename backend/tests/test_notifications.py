import pytest
from datetime import datetime, timedelta

from natureestate.db.models import Notification


@pytest.fixture
def add_notification(test_db_session):
    start = datetime(2025, 2, 1, 8, 0, 0)

    def _add_notification(user, minutes=0, **overrides):
        values = {
            "type": "system",
            "title": "Welcome",
            "message": "Thanks for joining",
            "priority": "normal",
            "is_read": False,
            "created_at": start + timedelta(minutes=minutes),
        }
        values.update(overrides)
        notification = Notification(user_id=user.id, **values)
        test_db_session.add(notification)
        test_db_session.commit()
        return notification
    return _add_notification


class TestListNotifications:

    def test_counts(self, client, buyer, add_notification, auth_headers):
        add_notification(buyer, minutes=0, is_read=True)
        add_notification(buyer, minutes=1, type="inquiry")
        add_notification(buyer, minutes=2, type="marketing", priority="low")

        result = client.get("/notifications", headers=auth_headers(buyer)).json()

        assert result["total_count"] == 3
        assert result["unread_count"] == 2
        assert [item["type"] for item in result["notifications"]] == ["marketing", "inquiry", "system"]

    def test_filters(self, client, buyer, add_notification, auth_headers):
        add_notification(buyer, minutes=0, is_read=True)
        add_notification(buyer, minutes=1, type="inquiry")
        add_notification(buyer, minutes=2, type="inquiry", priority="high")
        headers = auth_headers(buyer)

        unread = client.get("/notifications", params={"is_read": "false"}, headers=headers).json()
        assert unread["total_count"] == 2

        inquiries = client.get(
            "/notifications", params={"type": "inquiry", "priority": "high"}, headers=headers
        ).json()
        assert inquiries["total_count"] == 1
        # Unread count ignores the filters
        assert inquiries["unread_count"] == 2

        oldest_first = client.get("/notifications", params={"sort_order": "asc", "limit": 1}, headers=headers).json()
        assert oldest_first["notifications"][0]["is_read"] is True

    def test_unknown_type(self, client, buyer, auth_headers):
        response = client.get("/notifications", params={"type": "sms"}, headers=auth_headers(buyer))
        assert response.status_code == 400

    def test_only_own_notifications(self, client, buyer, seller, add_notification, auth_headers):
        add_notification(seller)
        result = client.get("/notifications", headers=auth_headers(buyer)).json()
        assert result == {"notifications": [], "total_count": 0, "unread_count": 0}

    def test_inquiry_creates_notification(self, client, seller, make_property, auth_headers):
        listing = make_property(seller, title="Mountain cabin")
        client.post(f"/properties/{listing.id}/inquiries", json={
            "sender_name": "Visitor",
            "sender_email": "visitor@example.com",
            "message": "Hello",
            "priority": "high",
        })

        result = client.get("/notifications", headers=auth_headers(seller)).json()

        assert result["unread_count"] == 1
        notification = result["notifications"][0]
        assert notification["type"] == "inquiry"
        assert notification["priority"] == "high"
        assert notification["related_property_id"] == listing.id
        assert "Mountain cabin" in notification["message"]
        assert notification["is_email_sent"] is False


class TestMarkRead:

    def test_mark_one(self, client, buyer, add_notification, auth_headers):
        notification = add_notification(buyer)

        response = client.put(f"/notifications/{notification.id}/read", headers=auth_headers(buyer))

        assert response.status_code == 200
        assert response.json()["is_read"] is True

    def test_other_users_notification(self, client, buyer, seller, add_notification, auth_headers):
        notification = add_notification(seller)
        response = client.put(f"/notifications/{notification.id}/read", headers=auth_headers(buyer))
        assert response.status_code == 404

    def test_mark_all(self, client, test_db_session, buyer, seller, add_notification, auth_headers):
        add_notification(buyer)
        add_notification(buyer, minutes=1)
        add_notification(buyer, minutes=2, is_read=True)
        add_notification(seller)

        response = client.put("/notifications/mark-all-read", headers=auth_headers(buyer))

        assert response.status_code == 200
        assert response.json()["message"] == "2 notifications marked as read"
        unread = test_db_session.query(Notification).filter_by(is_read=False).all()
        assert [row.user_id for row in unread] == [seller.id]

    def test_requires_auth(self, client):
        assert client.put("/notifications/mark-all-read").status_code == 401
