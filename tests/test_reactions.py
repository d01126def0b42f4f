"""
Integration tests for /reactions: one reaction per (entry, user, emoji).
"""
import pytest


@pytest.fixture()
def entry(make_entry):
    return make_entry(user="Alex")


def _react(client, entry_id, user="Sam", emoji="❤️"):
    return client.post("/reactions", json={"entryId": entry_id, "userName": user, "emoji": emoji})


def _unreact(client, entry_id, user="Sam", emoji="❤️"):
    return client.delete(
        "/reactions", params={"entryId": entry_id, "userName": user, "emoji": emoji}
    )


class TestAddReaction:
    def test_react_returns_201(self, client, entry):
        r = _react(client, entry["id"])
        assert r.status_code == 201
        data = r.json()["data"]
        assert data["emoji"] == "❤️"
        assert data["entryId"] == entry["id"]
        assert data["user"]["name"] == "Sam"

    def test_reaction_appears_on_entry(self, client, entry):
        _react(client, entry["id"])
        reactions = client.get(f"/entries/{entry['id']}").json()["data"]["reactions"]
        assert [(r["emoji"], r["user"]["name"]) for r in reactions] == [("❤️", "Sam")]

    def test_duplicate_is_409(self, client, entry):
        assert _react(client, entry["id"]).status_code == 201
        r = _react(client, entry["id"])
        assert r.status_code == 409
        body = r.json()
        assert body["success"] is False
        assert body["code"] == "REACTION_EXISTS"
        assert len(client.get("/reactions", params={"entryId": entry["id"]}).json()["data"]) == 1

    def test_distinct_emojis_by_same_user_allowed(self, client, entry):
        assert _react(client, entry["id"], emoji="❤️").status_code == 201
        assert _react(client, entry["id"], emoji="🎉").status_code == 201
        data = client.get("/reactions", params={"entryId": entry["id"]}).json()["data"]
        assert sorted(r["emoji"] for r in data) == sorted(["❤️", "🎉"])

    def test_same_emoji_by_different_users_allowed(self, client, entry):
        assert _react(client, entry["id"], user="Sam").status_code == 201
        assert _react(client, entry["id"], user="Alex").status_code == 201

    def test_react_creates_user(self, client, entry):
        _react(client, entry["id"], user="Robin")
        names = [u["name"] for u in client.get("/users").json()["data"]]
        assert "Robin" in names

    def test_unknown_entry_is_404(self, client):
        r = _react(client, "nope")
        assert r.status_code == 404
        assert r.json()["code"] == "ENTRY_NOT_FOUND"

    def test_missing_emoji_is_400(self, client, entry):
        r = client.post("/reactions", json={"entryId": entry["id"], "userName": "Sam"})
        assert r.status_code == 400


class TestRemoveReaction:
    def test_remove_then_react_again(self, client, entry):
        assert _react(client, entry["id"]).status_code == 201
        assert _react(client, entry["id"]).status_code == 409
        r = _unreact(client, entry["id"])
        assert r.status_code == 200
        assert r.json()["success"] is True
        assert _react(client, entry["id"]).status_code == 201

    def test_remove_only_that_emoji(self, client, entry):
        _react(client, entry["id"], emoji="❤️")
        _react(client, entry["id"], emoji="🎉")
        assert _unreact(client, entry["id"], emoji="❤️").status_code == 200
        data = client.get("/reactions", params={"entryId": entry["id"]}).json()["data"]
        assert [r["emoji"] for r in data] == ["🎉"]

    def test_unknown_user_is_404(self, client, entry):
        r = _unreact(client, entry["id"], user="Ghost")
        assert r.status_code == 404
        assert r.json()["code"] == "USER_NOT_FOUND"

    def test_absent_reaction_is_404(self, client, entry):
        r = _unreact(client, entry["id"], user="Alex")
        assert r.status_code == 404
        assert r.json()["code"] == "REACTION_NOT_FOUND"

    def test_missing_parameters_is_400(self, client, entry):
        r = client.delete("/reactions", params={"entryId": entry["id"]})
        assert r.status_code == 400
        body = r.json()
        assert body["code"] == "MISSING_PARAMETERS"
        assert set(body["details"]["missing"]) == {"userName", "emoji"}


class TestListReactions:
    def test_requires_entry_id(self, client):
        assert client.get("/reactions").status_code == 400

    def test_unknown_entry_is_empty(self, client):
        r = client.get("/reactions", params={"entryId": "nope"})
        assert r.status_code == 200
        assert r.json()["data"] == []
