"""
Integration tests for /comments: anyone comments, only the author deletes.
"""
import pytest


@pytest.fixture()
def entry(make_entry):
    return make_entry(user="Alex")


def _comment(client, entry_id, user="Sam", content="hi"):
    return client.post("/comments", json={"entryId": entry_id, "userName": user, "content": content})


class TestAddComment:
    def test_add_returns_201(self, client, entry):
        r = _comment(client, entry["id"])
        assert r.status_code == 201
        data = r.json()["data"]
        assert data["content"] == "hi"
        assert data["user"]["name"] == "Sam"
        assert data["entryId"] == entry["id"]
        assert data["createdAt"]

    def test_listed_oldest_first(self, client, entry):
        for text in ("first", "second", "third"):
            assert _comment(client, entry["id"], content=text).status_code == 201
        data = client.get("/comments", params={"entryId": entry["id"]}).json()["data"]
        assert [c["content"] for c in data] == ["first", "second", "third"]

        nested = client.get(f"/entries/{entry['id']}").json()["data"]["comments"]
        assert [c["content"] for c in nested] == ["first", "second", "third"]

    def test_unknown_entry_is_404(self, client):
        assert _comment(client, "nope").status_code == 404

    def test_blank_content_is_400(self, client, entry):
        assert _comment(client, entry["id"], content="   ").status_code == 400

    def test_missing_fields_is_400(self, client, entry):
        r = client.post("/comments", json={"entryId": entry["id"]})
        assert r.status_code == 400
        assert r.json()["code"] == "VALIDATION_ERROR"


class TestListComments:
    def test_requires_entry_id(self, client):
        r = client.get("/comments")
        assert r.status_code == 400
        assert r.json()["code"] == "MISSING_PARAMETERS"

    def test_unknown_entry_is_empty(self, client):
        r = client.get("/comments", params={"entryId": "nope"})
        assert r.status_code == 200
        assert r.json()["data"] == []


class TestDeleteComment:
    def test_non_author_is_403_and_comment_stays(self, client, entry):
        comment = _comment(client, entry["id"], user="Sam").json()["data"]
        r = client.delete("/comments", params={"id": comment["id"], "userName": "Alex"})
        assert r.status_code == 403
        assert r.json()["code"] == "NOT_OWNER"
        data = client.get("/comments", params={"entryId": entry["id"]}).json()["data"]
        assert [c["id"] for c in data] == [comment["id"]]

    def test_author_deletes(self, client, entry):
        comment = _comment(client, entry["id"], user="Sam").json()["data"]
        r = client.delete("/comments", params={"id": comment["id"], "userName": "Sam"})
        assert r.status_code == 200
        data = client.get("/comments", params={"entryId": entry["id"]}).json()["data"]
        assert data == []

    def test_unknown_comment_is_404(self, client):
        r = client.delete("/comments", params={"id": "nope", "userName": "Sam"})
        assert r.status_code == 404
        assert r.json()["code"] == "COMMENT_NOT_FOUND"

    def test_missing_parameters_is_400(self, client):
        r = client.delete("/comments", params={"id": "x"})
        assert r.status_code == 400
        assert r.json()["details"]["missing"] == ["userName"]
