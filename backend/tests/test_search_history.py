from natureestate.db.models import SearchHistory


class TestSearchHistoryEndpoints:
    """/search-history"""

    def test_anonymous_record_with_session_id(self, client, test_db_session):
        response = client.post(
            "/search-history",
            json={"session_id": "browser-42", "country": "Norway", "results_count": 7},
        )

        assert response.status_code == 201
        result = response.json()
        assert result["user_id"] is None
        assert result["session_id"] == "browser-42"
        assert test_db_session.query(SearchHistory).count() == 1

    def test_authenticated_record_and_list(self, client, buyer, auth_headers):
        headers = auth_headers(buyer)
        client.post("/search-history", json={"country": "Chile", "property_type": "cabin"}, headers=headers)
        client.post("/search-history", json={"location_text": "patagonia"}, headers=headers)
        client.post("/search-history", json={"session_id": "someone-else"})

        result = client.get("/search-history", headers=headers).json()

        assert result["total_count"] == 2
        assert {item["user_id"] for item in result["search_history"]} == {buyer.id}

        page = client.get("/search-history", params={"limit": 1, "offset": 1}, headers=headers).json()
        assert page["total_count"] == 2
        assert len(page["search_history"]) == 1

    def test_bad_property_type(self, client):
        response = client.post("/search-history", json={"property_type": "castle"})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "property_type"

    def test_list_requires_auth(self, client):
        assert client.get("/search-history").status_code == 401
