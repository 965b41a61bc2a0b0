import pytest

from natureestate.db.models import PropertyInquiry


def _inquiry_payload(**overrides):
    payload = {
        "sender_name": "Bea Buyer",
        "sender_email": "buyer@example.com",
        "message": "Is the well water potable?",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def listing(seller, make_property):
    return make_property(seller, title="Riverside farmhouse")


@pytest.fixture
def send_inquiry(client, listing, buyer, auth_headers):
    """Post an inquiry from the buyer about the listing; returns the JSON body"""
    headers = auth_headers(buyer)

    def _send_inquiry(**overrides):
        response = client.post(
            f"/properties/{listing.id}/inquiries", json=_inquiry_payload(**overrides), headers=headers
        )
        assert response.status_code == 201
        return response.json()
    return _send_inquiry


class TestListInquiries:
    """GET /inquiries"""

    def test_sender_and_recipient_both_see_it(self, client, send_inquiry, seller, buyer, make_user, auth_headers):
        inquiry = send_inquiry()

        for user in (seller, buyer):
            result = client.get("/inquiries", headers=auth_headers(user)).json()
            assert result["total_count"] == 1
            assert result["inquiries"][0]["inquiry_id"] == inquiry["inquiry_id"]
            assert result["inquiries"][0]["property_title"] == "Riverside farmhouse"

        outsider = make_user("outsider@example.com")
        result = client.get("/inquiries", headers=auth_headers(outsider)).json()
        assert result == {"inquiries": [], "total_count": 0}

    def test_filters_and_sort(self, client, send_inquiry, seller, auth_headers):
        send_inquiry(priority="low")
        send_inquiry(priority="high", is_interested_in_viewing=True)
        send_inquiry(priority="normal")
        headers = auth_headers(seller)

        high = client.get("/inquiries", params={"priority": "high"}, headers=headers).json()
        assert high["total_count"] == 1
        assert high["inquiries"][0]["is_interested_in_viewing"] is True

        viewing = client.get("/inquiries", params={"is_interested_in_viewing": "false"}, headers=headers).json()
        assert viewing["total_count"] == 2

        ordered = client.get("/inquiries", params={"sort_by": "priority", "sort_order": "asc"}, headers=headers).json()
        assert [item["priority"] for item in ordered["inquiries"]] == ["high", "low", "normal"]

        paged = client.get("/inquiries", params={"limit": 1, "offset": 1}, headers=headers).json()
        assert paged["total_count"] == 3
        assert len(paged["inquiries"]) == 1

    def test_invalid_sort_order(self, client, seller, auth_headers):
        response = client.get("/inquiries", params={"sort_order": "sideways"}, headers=auth_headers(seller))
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "sort_order"

    def test_requires_auth(self, client):
        assert client.get("/inquiries").status_code == 401


class TestInquiryDetail:

    def test_recipient_opening_marks_read(self, client, test_db_session, send_inquiry, seller, auth_headers):
        inquiry = send_inquiry()

        response = client.get(f"/inquiries/{inquiry['inquiry_id']}", headers=auth_headers(seller))

        assert response.status_code == 200
        assert response.json()["status"] == "read"
        assert test_db_session.get(PropertyInquiry, inquiry["inquiry_id"]).status == "read"

    def test_sender_opening_leaves_it_unread(self, client, send_inquiry, buyer, auth_headers):
        inquiry = send_inquiry()
        response = client.get(f"/inquiries/{inquiry['inquiry_id']}", headers=auth_headers(buyer))
        assert response.json()["status"] == "unread"

    def test_non_participant_gets_not_found(self, client, send_inquiry, make_user, auth_headers):
        inquiry = send_inquiry()
        outsider = make_user("outsider@example.com")

        response = client.get(f"/inquiries/{inquiry['inquiry_id']}", headers=auth_headers(outsider))

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Inquiry not found"}


class TestUpdateInquiry:

    def test_recipient_responds(self, client, send_inquiry, seller, auth_headers):
        inquiry = send_inquiry()

        response = client.put(
            f"/inquiries/{inquiry['inquiry_id']}",
            json={"status": "responded", "response_message": "Yes, tested last spring."},
            headers=auth_headers(seller),
        )

        assert response.status_code == 200
        result = response.json()
        assert result["status"] == "responded"
        assert result["response_message"] == "Yes, tested last spring."
        assert result["responded_at"] is not None

    def test_priority_change_leaves_responded_at_empty(self, client, send_inquiry, seller, auth_headers):
        inquiry = send_inquiry()
        response = client.put(
            f"/inquiries/{inquiry['inquiry_id']}", json={"priority": "high"}, headers=auth_headers(seller)
        )
        assert response.json()["priority"] == "high"
        assert response.json()["responded_at"] is None

    def test_sender_cannot_update(self, client, send_inquiry, buyer, auth_headers):
        inquiry = send_inquiry()
        response = client.put(
            f"/inquiries/{inquiry['inquiry_id']}", json={"status": "archived"}, headers=auth_headers(buyer)
        )
        assert response.status_code == 403

    def test_null_status_rejected(self, client, send_inquiry, seller, auth_headers):
        inquiry = send_inquiry()
        response = client.put(
            f"/inquiries/{inquiry['inquiry_id']}", json={"status": None}, headers=auth_headers(seller)
        )
        assert response.status_code == 400

    def test_empty_update(self, client, send_inquiry, seller, auth_headers):
        inquiry = send_inquiry()
        response = client.put(f"/inquiries/{inquiry['inquiry_id']}", json={}, headers=auth_headers(seller))
        assert response.status_code == 400
        assert response.json()["message"] == "No fields to update"

    def test_missing_inquiry(self, client, seller, auth_headers):
        response = client.put("/inquiries/missing", json={"priority": "low"}, headers=auth_headers(seller))
        assert response.status_code == 404


class TestResponses:

    def test_thread(self, client, send_inquiry, seller, buyer, auth_headers):
        inquiry = send_inquiry()
        url = f"/inquiries/{inquiry['inquiry_id']}/responses"

        reply = client.post(url, json={"message": "Happy to show you around."}, headers=auth_headers(seller))
        assert reply.status_code == 201
        assert reply.json()["sender_user_id"] == seller.id
        assert reply.json()["is_read"] is False

        client.post(url, json={"message": "Saturday works."}, headers=auth_headers(buyer))

        thread = client.get(url, headers=auth_headers(buyer)).json()
        assert [item["message"] for item in thread] == ["Happy to show you around.", "Saturday works."]

        detail = client.get(f"/inquiries/{inquiry['inquiry_id']}", headers=auth_headers(buyer)).json()
        assert detail["status"] == "responded"

    def test_non_participant_rejected(self, client, send_inquiry, make_user, auth_headers):
        inquiry = send_inquiry()
        outsider = make_user("outsider@example.com")
        url = f"/inquiries/{inquiry['inquiry_id']}/responses"

        assert client.get(url, headers=auth_headers(outsider)).status_code == 403
        assert client.post(url, json={"message": "hi"}, headers=auth_headers(outsider)).status_code == 403

    def test_empty_message(self, client, send_inquiry, seller, auth_headers):
        inquiry = send_inquiry()
        response = client.post(
            f"/inquiries/{inquiry['inquiry_id']}/responses", json={"message": ""}, headers=auth_headers(seller)
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "message"
