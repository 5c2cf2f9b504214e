from datetime import datetime, timedelta

from trackshare.models import Competition
from trackshare.services import competing, joining


def next_week():
    return (datetime.utcnow() + timedelta(days=7)).isoformat()


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_unauthorized_access(client):
    response = client.get("/api/posts")
    assert response.status_code == 401
    assert response.json() == {"detail": "You must be logged in!", "type": "auth_error"}


def test_posts_flow(client, login, alice, bob):
    login(alice)
    response = client.post("/api/posts", json={"content": "Ran 5k today"})
    assert response.status_code == 200
    post_id = response.json()["post"]["id"]
    assert response.json()["post"]["author"] == "alice"

    login(bob)
    post = client.get("/api/posts").json()[0]
    assert post["id"] == post_id
    assert "author" not in post

    response = client.patch(f"/api/posts/{post_id}", json={"content": "hijacked"})
    assert response.status_code == 403
    assert response.json()["detail"] == f"bob is not the author of post {post_id}!"

    login(alice)
    response = client.post("/api/links/posts", json={"id": post_id})
    assert response.status_code == 200

    login(bob)
    assert client.get("/api/posts", params={"author": "alice"}).json()[0]["author"] == "alice"


def test_linked_post_create(client, login, alice, bob):
    login(alice)
    response = client.post("/api/posts", json={"content": "Public", "isLinked": True})
    post_id = response.json()["post"]["id"]

    response = client.get(f"/api/links/posts/{post_id}")
    assert [link["user"] for link in response.json()] == ["alice"]

    # Linking twice conflicts
    response = client.post("/api/links/posts", json={"id": post_id})
    assert response.status_code == 409


def test_delete_post_removes_comments_and_links(client, login, alice, bob):
    login(alice)
    post_id = client.post("/api/posts", json={"content": "bye", "isLinked": True}).json()["post"]["id"]
    login(bob)
    response = client.post("/api/comments", json={"postId": post_id, "content": "wait", "isLinked": True})
    assert response.status_code == 200
    comment_id = response.json()["comment"]["id"]

    login(alice)
    assert client.delete(f"/api/posts/{post_id}").status_code == 200

    assert client.get("/api/comments", params={"post": post_id}).json() == []
    assert client.get("/api/links").json() == []
    assert client.get(f"/api/links/comments/{comment_id}").json() == []


def test_comment_on_missing_post(client, login, alice):
    login(alice)
    response = client.post("/api/comments", json={"postId": 404, "content": "hello?"})
    assert response.status_code == 404


def test_cannot_link_someone_elses_data(client, login, alice, bob):
    login(alice)
    data_id = client.post("/api/data", json={"date": "2024-03-01", "score": 10}).json()["data"]["id"]

    login(bob)
    response = client.post("/api/links/data", json={"id": data_id})
    assert response.status_code == 403


def test_data_filters(client, login, alice, bob):
    login(alice)
    client.post("/api/data", json={"date": "2024-03-01", "score": 10})
    client.post("/api/data", json={"date": "2024-03-05", "score": 30})
    login(bob)
    client.post("/api/data", json={"date": "2024-03-03", "score": 20})

    response = client.get("/api/data", params={"sort": "score"})
    assert [d["score"] for d in response.json()] == [30, 20, 10]

    response = client.get("/api/data", params={"username": "alice", "dateRange": "2024-03-02_2024-03-31"})
    assert [d["date"] for d in response.json()] == ["2024-03-05"]

    response = client.get("/api/data", params={"dateRange": "March"})
    assert response.status_code == 422


def test_logging_data_fans_out_to_competitions(client, session, login, alice, bob):
    login(alice)
    response = client.post("/api/competitions", json={"name": "Spring5k", "endDate": next_week()})
    assert response.status_code == 200
    assert joining.get_members(session, response.json()["competition"]["id"]) == [alice.id]
    ended = Competition(name="Winter10k", owner_id=alice.id, end_date=datetime.utcnow() - timedelta(days=1))
    session.add(ended)
    session.commit()
    joining.join(session, alice.id, ended.id)

    response = client.post("/api/data", json={"date": "2024-03-01", "score": 42})
    assert response.status_code == 200
    data_id = response.json()["data"]["id"]

    leaderboard = client.get("/api/competitions/Spring5k/leaderboard").json()
    assert [(row["rank"], row["id"], row["score"]) for row in leaderboard] == [(1, data_id, 42)]

    competition = client.get("/api/competitions").json()[0]
    assert competition["data"] == [data_id]
    # The ended competition keeps its final data
    assert competing.get_data_ids(session, ended.id) == []

    # Bob is not a member, so his data stays out
    login(bob)
    client.post("/api/data", json={"date": "2024-03-02", "score": 99})
    assert len(client.get("/api/competitions/Spring5k/leaderboard").json()) == 1


def test_competition_membership(client, login, alice, bob):
    login(alice)
    client.post("/api/competitions", json={"name": "Spring5k", "endDate": next_week()})

    login(bob)
    assert client.post("/api/competitions/Spring5k/users").status_code == 200
    response = client.post("/api/competitions/Spring5k/users")
    assert response.status_code == 409
    assert response.json()["detail"] == "User bob is already a member of competition Spring5k!"

    # Alice has not linked her membership
    assert client.get("/api/competitions/Spring5k/users").json() == ["bob"]
    assert client.get("/api/competitions", params={"username": "bob"}).json()[0]["name"] == "Spring5k"

    assert client.delete("/api/competitions/Spring5k/users").status_code == 200
    assert client.delete("/api/competitions/Spring5k/users").status_code == 403


def test_competition_owner_operations(client, login, alice, bob):
    login(alice)
    client.post("/api/competitions", json={"name": "Spring5k", "endDate": next_week()})
    response = client.post("/api/competitions", json={"name": "Spring5k", "endDate": next_week()})
    assert response.status_code == 409

    past = (datetime.utcnow() - timedelta(days=1)).isoformat()
    response = client.post("/api/competitions", json={"name": "Past", "endDate": past})
    assert response.status_code == 403

    login(bob)
    response = client.patch("/api/competitions/Spring5k", json={"newName": "Mine"})
    assert response.status_code == 403

    login(alice)
    response = client.patch("/api/competitions/Spring5k", json={"newName": "Spring10k", "owner": "bob"})
    assert response.status_code == 200
    assert response.json()["competition"]["name"] == "Spring10k"

    login(bob)
    assert client.delete("/api/competitions/Spring10k").status_code == 200
    assert client.get("/api/competitions").json() == []

    # The name is free again
    response = client.post("/api/competitions", json={"name": "Spring10k", "endDate": next_week()})
    assert response.status_code == 200


def test_friends_flow(client, login, alice, bob):
    login(alice)
    response = client.post("/api/friend/requests/bob")
    assert response.status_code == 200
    assert response.json()["request"]["status"] == "pending"

    response = client.post("/api/friend/requests/alice")
    assert response.status_code == 403

    login(bob)
    requests = client.get("/api/friend/requests").json()
    assert [(r["from"], r["to"]) for r in requests] == [("alice", "bob")]
    assert client.put("/api/friend/accept/alice").status_code == 200
    assert client.get("/api/friends").json() == ["alice"]

    login(alice)
    response = client.post("/api/friend/requests/bob")
    assert response.status_code == 409
    assert response.json()["detail"] == "alice and bob are already friends!"

    assert client.delete("/api/friends/bob").status_code == 200
    assert client.get("/api/friends").json() == []


def test_data_in_ended_competition_cannot_change(client, session, login, alice, bob):
    login(alice)
    client.post("/api/competitions", json={"name": "Spring5k", "endDate": next_week()})
    login(bob)
    client.post("/api/competitions/Spring5k/users")
    client.post("/api/data", json={"date": "2024-03-01", "score": 90})
    login(alice)
    data_id = client.post("/api/data", json={"date": "2024-03-01", "score": 10}).json()["data"]["id"]

    competition = competing.get_by_name(session, "Spring5k")
    competition.end_date = datetime.utcnow() - timedelta(minutes=1)
    session.add(competition)
    session.commit()
    before = client.get("/api/competitions/Spring5k/leaderboard").json()

    response = client.patch(f"/api/data/{data_id}", json={"score": 1000})
    assert response.status_code == 403
    assert response.json()["detail"] == "Competition Spring5k has already ended!"
    assert client.delete(f"/api/data/{data_id}").status_code == 403

    after = client.get("/api/competitions/Spring5k/leaderboard").json()
    assert [(row["rank"], row["score"]) for row in after] == [(1, 90), (2, 10)]
    assert after == before
