import pytest

from blogcms.models import Role


@pytest.fixture
def users(make_user, login):
    ids = {
        "admin": make_user("Admin", "admin@example.com", role=Role.ADMIN),
        "alice": make_user("Alice", "alice@example.com"),
        "bob": make_user("Bob", "bob@example.com"),
    }
    headers = {
        name: login(f"{name}@example.com") for name in ids
    }
    return ids, headers


def create(client, headers, title="Title", content="First. Second. Third.", tag_list="go, rust", **extra):
    payload = {"title": title, "content": content, "tag_list": tag_list, **extra}
    response = client.post("/api/posts", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_post_as_author(client, users):
    ids, headers = users
    post = create(client, headers["alice"], tag_list="Go, rust, GO")

    assert post["author"] == {"id": ids["alice"], "name": "Alice"}
    assert [t["name"] for t in post["tags"]] == ["go", "rust"]
    assert post["excerpt"] == "First. Second."
    assert post["is_published"] is True
    assert post["comments"] == []


def test_create_post_requires_authentication(client):
    response = client.post("/api/posts", json={"title": "T", "content": "C"})
    assert response.status_code == 401


def test_admin_can_create_on_behalf_of_author(client, users):
    ids, headers = users
    post = create(client, headers["admin"], author_id=ids["bob"])
    assert post["author"]["name"] == "Bob"


def test_author_id_ignored_for_non_admin(client, users):
    ids, headers = users
    post = create(client, headers["alice"], author_id=ids["bob"])
    assert post["author"]["name"] == "Alice"


def test_admin_unknown_author_is_not_found(client, users):
    _, headers = users
    response = client.post("/api/posts", json={"title": "T", "content": "C", "author_id": 999},
                           headers=headers["admin"])
    assert response.status_code == 404


def test_get_post_and_missing_post(client, users):
    _, headers = users
    post = create(client, headers["alice"])

    assert client.get(f"/api/posts/{post['id']}").json()["title"] == "Title"
    assert client.get("/api/posts/999").status_code == 404


def test_patch_by_author(client, users):
    _, headers = users
    post = create(client, headers["alice"])

    response = client.patch(f"/api/posts/{post['id']}", json={"tag_list": "go, python"},
                            headers=headers["alice"])

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Title"
    assert [t["name"] for t in body["tags"]] == ["go", "python"]
    assert [t["name"] for t in client.get("/api/tags").json()] == ["go", "python"]


def test_patch_by_stranger_is_forbidden_and_changes_nothing(client, users):
    _, headers = users
    post = create(client, headers["alice"])

    response = client.patch(f"/api/posts/{post['id']}", json={"title": "Hijacked"},
                            headers=headers["bob"])

    assert response.status_code == 403
    assert client.get(f"/api/posts/{post['id']}").json()["title"] == "Title"


def test_patch_without_token_is_unauthenticated(client, users):
    _, headers = users
    post = create(client, headers["alice"])
    response = client.patch(f"/api/posts/{post['id']}", json={"title": "X"})
    assert response.status_code == 401


def test_only_admin_reassigns_author(client, users):
    ids, headers = users
    post = create(client, headers["alice"])

    response = client.patch(f"/api/posts/{post['id']}", json={"author_id": ids["bob"]},
                            headers=headers["alice"])
    assert response.status_code == 403

    response = client.patch(f"/api/posts/{post['id']}", json={"author_id": ids["bob"]},
                            headers=headers["admin"])
    assert response.status_code == 200
    assert response.json()["author"]["name"] == "Bob"


def test_delete_by_stranger_is_forbidden(client, users):
    _, headers = users
    post = create(client, headers["alice"])

    assert client.delete(f"/api/posts/{post['id']}", headers=headers["bob"]).status_code == 403
    assert client.get(f"/api/posts/{post['id']}").status_code == 200


def test_admin_deletes_post_and_unused_tags(client, users):
    _, headers = users
    post = create(client, headers["alice"], tag_list="solo")
    create(client, headers["bob"], tag_list="shared")
    shared = create(client, headers["alice"], tag_list="shared")

    assert client.delete(f"/api/posts/{post['id']}", headers=headers["admin"]).status_code == 204
    assert client.delete(f"/api/posts/{shared['id']}", headers=headers["alice"]).status_code == 204

    assert client.get(f"/api/posts/{post['id']}").status_code == 404
    assert [t["name"] for t in client.get("/api/tags").json()] == ["shared"]


def test_list_posts_filters(client, users):
    ids, headers = users
    create(client, headers["alice"], title="Both", tag_list="go, rust")
    create(client, headers["alice"], title="Only go", tag_list="go")
    create(client, headers["bob"], title="Rust by Bob", tag_list="rust")

    tags = {t["name"]: t["id"] for t in client.get("/api/tags").json()}

    body = client.get("/api/posts", params={"tagId": [tags["go"], tags["rust"]]}).json()
    assert [p["title"] for p in body["posts"]] == ["Both"]
    assert body["total"] == 1

    body = client.get("/api/posts", params={"authorId": ids["bob"]}).json()
    assert [p["title"] for p in body["posts"]] == ["Rust by Bob"]

    body = client.get("/api/posts", params={"authorNames": ["Alice"], "order": "ASC"}).json()
    assert [p["title"] for p in body["posts"]] == ["Both", "Only go"]

    body = client.get("/api/posts", params={"search": "ONLY"}).json()
    assert [p["title"] for p in body["posts"]] == ["Only go"]


def test_list_posts_unknown_author_id(client):
    assert client.get("/api/posts", params={"authorId": 42}).status_code == 404


def test_list_posts_pagination(client, users):
    _, headers = users
    for i in range(25):
        create(client, headers["alice"], title=f"Post {i}", tag_list="")

    body = client.get("/api/posts", params={"page": 2, "size": 10}).json()
    assert len(body["posts"]) == 5
    assert body["total"] == 25
    assert body["total_pages"] == 3
    assert body["has_more"] is False

    body = client.get("/api/posts", params={"start": 11, "limit": 10}).json()
    assert body["page"] == 1
    assert len(body["posts"]) == 10
    assert body["has_more"] is True


def test_list_posts_date_range(client, users):
    _, headers = users
    create(client, headers["alice"])

    assert client.get("/api/posts", params={"fromDate": "2000-01-01", "toDate": "2000-12-31"}).json()["total"] == 0
    assert client.get("/api/posts", params={"fromDate": "2000-01-01"}).json()["total"] == 1


def test_filter_options(client, users):
    _, headers = users
    create(client, headers["alice"], tag_list="go")
    create(client, headers["bob"], tag_list="rust")

    body = client.get("/api/posts/filters").json()
    assert body["authors"] == ["Alice", "Bob"]
    assert [t["name"] for t in body["tags"]] == ["go", "rust"]


def test_list_posts_accepts_tag_ids_parameter(client, users):
    _, headers = users
    create(client, headers["alice"], title="Both", tag_list="go, rust")
    create(client, headers["alice"], title="Only go", tag_list="go")

    tags = {t["name"]: t["id"] for t in client.get("/api/tags").json()}

    body = client.get("/api/posts", params={"tagIds": [tags["go"], tags["rust"]]}).json()
    assert [p["title"] for p in body["posts"]] == ["Both"]

    body = client.get("/api/posts", params={"tagId": tags["go"], "tagIds": tags["rust"]}).json()
    assert [p["title"] for p in body["posts"]] == ["Both"]


def test_long_tag_names_are_kept(client, users):
    _, headers = users
    long_name = "y" * 80
    post = create(client, headers["alice"], tag_list=f"go, {long_name}")
    assert [t["name"] for t in post["tags"]] == ["go", long_name]
