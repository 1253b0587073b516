import pytest

from blogcms.models import Role


@pytest.fixture
def setup(client, make_user, login):
    make_user("Admin", "admin@example.com", role=Role.ADMIN)
    make_user("Alice", "alice@example.com")
    make_user("Bob", "bob@example.com")
    headers = {name: login(f"{name}@example.com") for name in ("admin", "alice", "bob")}

    response = client.post("/api/posts", json={"title": "Post", "content": "Body."},
                           headers=headers["alice"])
    assert response.status_code == 201
    return response.json()["id"], headers


def add_comment(client, post_id, headers=None, **payload):
    payload.setdefault("content", "Nice post")
    return client.post(f"/api/posts/{post_id}/comments", json=payload, headers=headers or {})


def test_anonymous_comment(client, setup):
    post_id, _ = setup
    response = add_comment(client, post_id, writer_name="Guest", email="guest@example.com")

    assert response.status_code == 201
    assert response.json()["writer_name"] == "Guest"

    comments = client.get(f"/api/posts/{post_id}/comments").json()
    assert [c["content"] for c in comments] == ["Nice post"]
    assert client.get(f"/api/posts/{post_id}").json()["comments"][0]["email"] == "guest@example.com"


def test_anonymous_comment_without_identity_is_rejected(client, setup):
    post_id, _ = setup
    assert add_comment(client, post_id).status_code == 400


def test_authenticated_comment_uses_account(client, setup):
    post_id, headers = setup
    response = add_comment(client, post_id, headers["bob"], writer_name="Someone else")
    assert response.json()["writer_name"] == "Bob"
    assert response.json()["email"] == "bob@example.com"


def test_comment_on_missing_post(client, setup):
    response = add_comment(client, 999, writer_name="Guest", email="g@example.com")
    assert response.status_code == 404


def test_get_single_comment(client, setup):
    post_id, _ = setup
    comment_id = add_comment(client, post_id, writer_name="G", email="g@example.com").json()["id"]

    assert client.get(f"/api/posts/{post_id}/comments/{comment_id}").json()["id"] == comment_id
    assert client.get(f"/api/posts/{post_id}/comments/999").status_code == 404


def test_post_author_edits_comment(client, setup):
    post_id, headers = setup
    comment_id = add_comment(client, post_id, writer_name="G", email="g@example.com").json()["id"]

    response = client.patch(f"/api/posts/{post_id}/comments/{comment_id}",
                            json={"content": "Edited"}, headers=headers["alice"])

    assert response.status_code == 200
    assert response.json()["content"] == "Edited"
    assert response.json()["writer_name"] == "G"


def test_stranger_cannot_edit_or_delete_comment(client, setup):
    post_id, headers = setup
    comment_id = add_comment(client, post_id, headers["bob"]).json()["id"]
    url = f"/api/posts/{post_id}/comments/{comment_id}"

    # Bob wrote the comment but does not own the post
    assert client.patch(url, json={"content": "Mine"}, headers=headers["bob"]).status_code == 403
    assert client.delete(url, headers=headers["bob"]).status_code == 403
    assert client.delete(url).status_code == 401


def test_admin_deletes_comment(client, setup):
    post_id, headers = setup
    comment_id = add_comment(client, post_id, writer_name="G", email="g@example.com").json()["id"]
    url = f"/api/posts/{post_id}/comments/{comment_id}"

    assert client.delete(url, headers=headers["admin"]).status_code == 204
    assert client.get(url).status_code == 404
    assert client.get(f"/api/posts/{post_id}/comments").json() == []


def test_deleting_post_hides_comments(client, setup):
    post_id, headers = setup
    add_comment(client, post_id, writer_name="G", email="g@example.com")

    assert client.delete(f"/api/posts/{post_id}", headers=headers["alice"]).status_code == 204
    assert client.get(f"/api/posts/{post_id}/comments").status_code == 404
