"""
Blog Service Tests
==================

Ownership, authentication and validation rules layered over the store.
"""

import pytest

import blog_service as svc
from errors import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError, ValidationError


@pytest.fixture
def admin(store):
    return store.get_user(1)


@pytest.fixture
def alice(store):
    return svc.register_user(store, {"username": "alice", "password": "pw"})


@pytest.fixture
def bob(store):
    return svc.register_user(store, {"username": "bob", "password": "pw"})


class TestUsers:

    def test_register_and_authenticate(self, store, alice):
        assert svc.authenticate(store, "alice", "pw").id == alice.id

    def test_wrong_password_is_unauthorized(self, store, alice):
        with pytest.raises(UnauthorizedError):
            svc.authenticate(store, "alice", "nope")

    def test_blank_username_is_rejected(self, store):
        with pytest.raises(ValidationError) as info:
            svc.register_user(store, {"username": "   ", "password": "pw"})
        assert info.value.errors[0]["field"] == "username"

    def test_duplicate_registration_conflicts(self, store, alice):
        with pytest.raises(ConflictError):
            svc.register_user(store, {"username": "alice", "password": "x"})

    def test_only_admin_lists_users(self, store, admin, alice):
        assert [u.username for u in svc.list_users_as(store, admin)] == ["admin", "alice"]
        with pytest.raises(ForbiddenError):
            svc.list_users_as(store, alice)
        with pytest.raises(ForbiddenError):
            svc.list_users_as(store, None)


class TestPosts:

    def test_create_forces_author(self, store, alice):
        post = svc.create_post_as(store, alice, {"title": "Mine", "content": "text", "authorId": 1})
        assert post.author_id == alice.id

    def test_create_requires_principal(self, store):
        with pytest.raises(UnauthorizedError):
            svc.create_post_as(store, None, {"title": "t", "content": "c"})

    def test_create_rejects_blank_fields(self, store, alice):
        with pytest.raises(ValidationError) as info:
            svc.create_post_as(store, alice, {"title": "", "content": " "})
        assert {e["field"] for e in info.value.errors} == {"title", "content"}

    def test_author_can_update_other_user_cannot(self, store, alice, bob):
        post = svc.create_post_as(store, alice, {"title": "Mine", "content": "text"})

        updated = svc.update_post_as(store, alice, post.id, {"title": "Renamed"})
        assert updated.title == "Renamed"
        assert updated.content == "text"

        with pytest.raises(ForbiddenError):
            svc.update_post_as(store, bob, post.id, {"title": "Hijacked"})
        assert store.get_post(post.id).title == "Renamed"

    def test_admin_can_update_and_reassign(self, store, admin, alice, bob):
        post = svc.create_post_as(store, alice, {"title": "Mine", "content": "text"})
        updated = svc.update_post_as(store, admin, post.id, {"authorId": bob.id})
        assert updated.author_id == bob.id

    def test_author_cannot_reassign(self, store, alice, bob):
        post = svc.create_post_as(store, alice, {"title": "Mine", "content": "text"})
        with pytest.raises(ForbiddenError):
            svc.update_post_as(store, alice, post.id, {"authorId": bob.id})

    def test_update_rejects_blanking_title(self, store, alice):
        post = svc.create_post_as(store, alice, {"title": "Mine", "content": "text"})
        with pytest.raises(ValidationError):
            svc.update_post_as(store, alice, post.id, {"title": "  "})

    def test_missing_post_is_not_found(self, store, alice):
        with pytest.raises(NotFoundError):
            svc.update_post_as(store, alice, 404, {"title": "x"})
        with pytest.raises(NotFoundError):
            svc.delete_post_as(store, alice, 404)
        with pytest.raises(NotFoundError):
            svc.require_post(store, 404)

    def test_delete_by_author_and_admin(self, store, admin, alice, bob):
        first = svc.create_post_as(store, alice, {"title": "One", "content": "text"})
        second = svc.create_post_as(store, alice, {"title": "Two", "content": "text"})

        with pytest.raises(ForbiddenError):
            svc.delete_post_as(store, bob, first.id)
        svc.delete_post_as(store, alice, first.id)
        svc.delete_post_as(store, admin, second.id)
        assert store.get_all_posts() == []


class TestComments:

    def test_comment_on_missing_post_is_not_found(self, store, alice):
        with pytest.raises(NotFoundError):
            svc.create_comment_as(store, alice, 99, {"content": "hello"})

    def test_comment_binds_author_and_post(self, store, alice, bob):
        post = svc.create_post_as(store, alice, {"title": "Mine", "content": "text"})
        comment = svc.create_comment_as(store, bob, post.id, {"content": "Nice", "authorId": 1, "postId": 1234})
        assert comment.author_id == bob.id
        assert comment.post_id == post.id
        assert [c.id for c in svc.list_comments(store, post.id)] == [comment.id]

    def test_comment_delete_rules(self, store, admin, alice, bob):
        post = svc.create_post_as(store, alice, {"title": "Mine", "content": "text"})
        first = svc.create_comment_as(store, bob, post.id, {"content": "one"})
        second = svc.create_comment_as(store, bob, post.id, {"content": "two"})

        with pytest.raises(ForbiddenError):
            svc.delete_comment_as(store, alice, first.id)
        svc.delete_comment_as(store, bob, first.id)
        svc.delete_comment_as(store, admin, second.id)
        with pytest.raises(NotFoundError):
            svc.delete_comment_as(store, bob, first.id)
