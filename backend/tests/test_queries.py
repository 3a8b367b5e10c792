from queries import by_author, by_category, by_category_folded, post_matches_query, search
from text_utils import collation_key, is_blank

from conftest import make_post


def test_query_matches_any_text_field():
    post = make_post(1, title="Title", content="Body", tags="one,Two")
    assert post_matches_query(post, "TITLE")
    assert post_matches_query(post, "bod")
    assert post_matches_query(post, "two")
    assert post_matches_query(post, "")
    assert not post_matches_query(post, "three")


def test_missing_tags_never_match():
    assert not post_matches_query(make_post(1, title="a", content="b", tags=None), "None")


def test_search_none_query_matches_all():
    posts = [make_post(1), make_post(2)]
    assert search(posts, None) == posts


def test_author_and_category_lookups():
    posts = [
        make_post(1, category="Food", author_id=1),
        make_post(2, category="food", author_id=2),
        make_post(3, category=None, author_id=None),
    ]
    assert [p.id for p in by_author(posts, 2)] == [2]
    assert [p.id for p in by_category(posts, "Food")] == [1]
    assert [p.id for p in by_category_folded(posts, "food")] == [1, 2]


def test_text_helpers():
    assert is_blank("  \n\t")
    assert is_blank(None)
    assert not is_blank(" x ")
    assert collation_key("Émile")[0] == "emile"
