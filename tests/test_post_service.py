from models import Post, PostComment, PostLike
from post_service import (
    add_comment,
    delete_post,
    list_college_posts,
    list_post_comments,
    toggle_post_like,
    update_post,
)


def _post(db, author, content="Hello", category="general"):
    post = Post(author_id=author.id, college_id=author.college_id, content=content, category=category)
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def test_toggle_like_twice_restores_state(db, make_college, make_user):
    college = make_college()
    author = make_user(college)
    fan = make_user(college)
    post = _post(db, author)

    assert toggle_post_like(db, post.id, fan.id) is True
    assert db.query(PostLike).filter(PostLike.post_id == post.id).count() == 1
    assert toggle_post_like(db, post.id, fan.id) is False
    assert db.query(PostLike).filter(PostLike.post_id == post.id).count() == 0


def test_likes_count_is_distinct_users(db, make_college, make_user):
    college = make_college()
    author = make_user(college)
    fans = [make_user(college) for _ in range(3)]
    post = _post(db, author)
    for fan in fans:
        toggle_post_like(db, post.id, fan.id)
    add_comment(db, post.id, fans[0].id, "one")
    add_comment(db, post.id, fans[1].id, "two")

    feed = list_college_posts(db, college.id, viewer_id=fans[0].id)

    assert len(feed) == 1
    assert feed[0].likes_count == 3
    assert feed[0].comments_count == 2
    assert feed[0].is_liked_by_user is True


def test_feed_without_viewer_leaves_like_flag_unset(db, make_college, make_user):
    college = make_college()
    author = make_user(college)
    _post(db, author)

    feed = list_college_posts(db, college.id)

    assert feed[0].is_liked_by_user is None


def test_feed_is_scoped_to_college_and_category(db, make_college, make_user):
    college = make_college("North")
    other = make_college("South")
    author = make_user(college)
    outsider = make_user(other)
    _post(db, author, "job post", category="jobs")
    _post(db, author, "memory post", category="memories")
    _post(db, outsider, "elsewhere", category="jobs")

    assert {item.content for item in list_college_posts(db, college.id)} == {"job post", "memory post"}
    jobs = list_college_posts(db, college.id, category="jobs")
    assert [item.content for item in jobs] == ["job post"]


def test_feed_pagination_is_newest_first(db, make_college, make_user):
    college = make_college()
    author = make_user(college)
    posts = [_post(db, author, f"post {idx}") for idx in range(5)]

    first_page = list_college_posts(db, college.id, limit=2, offset=0)
    second_page = list_college_posts(db, college.id, limit=2, offset=2)

    assert [item.id for item in first_page] == [posts[4].id, posts[3].id]
    assert [item.id for item in second_page] == [posts[2].id, posts[1].id]


def test_delete_post_removes_likes_and_comments(db, make_college, make_user):
    college = make_college()
    author = make_user(college)
    fan = make_user(college)
    post = _post(db, author)
    toggle_post_like(db, post.id, fan.id)
    add_comment(db, post.id, fan.id, "nice")

    assert delete_post(db, post.id, author.id) is True
    assert db.query(Post).count() == 0
    assert db.query(PostLike).count() == 0
    assert db.query(PostComment).count() == 0


def test_non_author_cannot_update_or_delete(db, make_college, make_user):
    college = make_college()
    author = make_user(college)
    intruder = make_user(college)
    post = _post(db, author)

    assert update_post(db, post.id, intruder.id, {"content": "hijacked"}) is None
    assert delete_post(db, post.id, intruder.id) is False
    db.expire_all()
    assert db.query(Post).filter(Post.id == post.id).one().content == "Hello"


def test_update_post_skips_null_content(db, make_college, make_user):
    college = make_college()
    author = make_user(college)
    post = _post(db, author)

    updated = update_post(db, post.id, author.id, {"content": None, "title": "New title"})

    assert updated.content == "Hello"
    assert updated.title == "New title"


def test_comments_are_oldest_first(db, make_college, make_user):
    college = make_college()
    author = make_user(college)
    post = _post(db, author)
    for text in ["first", "second", "third"]:
        add_comment(db, post.id, author.id, text)

    assert [item.content for item in list_post_comments(db, post.id)] == ["first", "second", "third"]
