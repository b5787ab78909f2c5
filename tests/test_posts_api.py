def _create_post(client, headers, content="Hello", **extra):
    response = client.post("/api/posts", json={"content": content, **extra}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def test_feed_like_flags_per_viewer(client, make_college, make_user, auth_headers):
    college = make_college()
    student = make_user(college, role="student")
    alumnus = make_user(college, role="alumni")

    post = _create_post(client, auth_headers(student.id), "Hello")
    like = client.post(f"/api/posts/{post['id']}/like", headers=auth_headers(alumnus.id))
    assert like.status_code == 200
    assert like.json() == {"isLiked": True}

    student_feed = client.get("/api/posts", headers=auth_headers(student.id)).json()
    alumnus_feed = client.get("/api/posts", headers=auth_headers(alumnus.id)).json()

    assert student_feed[0]["likesCount"] == 1
    assert student_feed[0]["isLikedByUser"] is False
    assert alumnus_feed[0]["isLikedByUser"] is True
    assert student_feed[0]["author"]["id"] == student.id


def test_like_toggle_twice_unlikes(client, make_college, make_user, auth_headers):
    college = make_college()
    user = make_user(college)
    post = _create_post(client, auth_headers(user.id))

    first = client.post(f"/api/posts/{post['id']}/like", headers=auth_headers(user.id))
    second = client.post(f"/api/posts/{post['id']}/like", headers=auth_headers(user.id))

    assert first.json()["isLiked"] is True
    assert second.json()["isLiked"] is False
    feed = client.get("/api/posts", headers=auth_headers(user.id)).json()
    assert feed[0]["likesCount"] == 0


def test_like_missing_post_is_404(client, make_college, make_user, auth_headers):
    user = make_user(make_college())

    response = client.post("/api/posts/999/like", headers=auth_headers(user.id))

    assert response.status_code == 404


def test_feed_requires_college(client, make_user, auth_headers):
    user = make_user()

    response = client.get("/api/posts", headers=auth_headers(user.id))

    assert response.status_code == 400
    assert response.json()["detail"] == "User not associated with a college"


def test_feed_requires_authentication(client):
    response = client.get("/api/posts")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_feed_category_filter(client, make_college, make_user, auth_headers):
    user = make_user(make_college())
    headers = auth_headers(user.id)
    _create_post(client, headers, "hiring", category="jobs")
    _create_post(client, headers, "tips", category="advice")

    jobs = client.get("/api/posts", params={"category": "jobs"}, headers=headers).json()
    everything = client.get("/api/posts", params={"category": "all"}, headers=headers).json()
    invalid = client.get("/api/posts", params={"category": "gossip"}, headers=headers)

    assert [item["content"] for item in jobs] == ["hiring"]
    assert len(everything) == 2
    assert invalid.status_code == 400
    assert invalid.json()["detail"] == "Invalid category"


def test_feed_paging_params_are_validated(client, make_college, make_user, auth_headers):
    user = make_user(make_college())

    response = client.get("/api/posts", params={"limit": 0}, headers=auth_headers(user.id))

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid data"


def test_create_post_validation(client, make_college, make_user, auth_headers):
    headers = auth_headers(make_user(make_college()).id)

    blank = client.post("/api/posts", json={"content": "   "}, headers=headers)
    bad_category = client.post("/api/posts", json={"content": "x", "category": "gossip"}, headers=headers)
    bad_image = client.post("/api/posts", json={"content": "x", "imageUrl": "ftp://host/a.png"}, headers=headers)

    assert blank.status_code == 400
    assert blank.json()["detail"] == "Invalid data"
    assert blank.json()["errors"]
    assert bad_category.status_code == 400
    assert bad_image.status_code == 400


def test_update_and_delete_are_author_only(client, make_college, make_user, auth_headers):
    college = make_college()
    author = make_user(college)
    other = make_user(college)
    post = _create_post(client, auth_headers(author.id), "original")

    hijack = client.put(f"/api/posts/{post['id']}", json={"content": "changed"}, headers=auth_headers(other.id))
    remove = client.delete(f"/api/posts/{post['id']}", headers=auth_headers(other.id))
    assert hijack.status_code == 404
    assert hijack.json()["detail"] == "Post not found or unauthorized"
    assert remove.status_code == 404

    edit = client.put(
        f"/api/posts/{post['id']}",
        json={"content": "edited", "category": "memories"},
        headers=auth_headers(author.id),
    )
    assert edit.status_code == 200
    assert edit.json()["content"] == "edited"
    assert edit.json()["category"] == "memories"

    deleted = client.delete(f"/api/posts/{post['id']}", headers=auth_headers(author.id))
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Post deleted successfully"}
    assert client.get(f"/api/posts/{post['id']}/comments").status_code == 404


def test_comments_round_trip(client, make_college, make_user, auth_headers):
    college = make_college()
    author = make_user(college, first_name="Asha")
    reader = make_user(college, first_name="Ravi")
    post = _create_post(client, auth_headers(author.id))

    client.post(f"/api/posts/{post['id']}/comments", json={"content": "first"}, headers=auth_headers(reader.id))
    response = client.post(
        f"/api/posts/{post['id']}/comments",
        json={"content": "second"},
        headers=auth_headers(author.id),
    )

    assert response.status_code == 200
    comments = client.get(f"/api/posts/{post['id']}/comments").json()
    assert [item["content"] for item in comments] == ["first", "second"]
    assert comments[0]["author"]["firstName"] == "Ravi"
    feed = client.get("/api/posts", headers=auth_headers(reader.id)).json()
    assert feed[0]["commentsCount"] == 2


def test_empty_comment_is_rejected(client, make_college, make_user, auth_headers):
    user = make_user(make_college())
    post = _create_post(client, auth_headers(user.id))

    response = client.post(f"/api/posts/{post['id']}/comments", json={"content": ""}, headers=auth_headers(user.id))

    assert response.status_code == 400


def test_update_post_rejects_unknown_fields_and_trims_text(client, make_college, make_user, auth_headers):
    author = make_user(make_college())
    post = _create_post(client, auth_headers(author.id), "original")
    url = f"/api/posts/{post['id']}"

    unknown = client.put(url, json={"content": "x", "authorId": "someone-else"}, headers=auth_headers(author.id))
    edit = client.put(url, json={"title": "  Reunion  ", "location": "   "}, headers=auth_headers(author.id))

    assert unknown.status_code == 400
    assert edit.status_code == 200
    assert edit.json()["title"] == "Reunion"
    assert edit.json()["location"] is None
    assert edit.json()["content"] == "original"
