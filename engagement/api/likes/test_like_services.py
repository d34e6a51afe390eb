# engagement/api/likes/test_like_services.py
import pytest

from engagement.core.exceptions import ContentNotFoundError, StoreUnavailableError, UnknownContentKindError


@pytest.fixture
def article(fake_db, seed_user):
    seed_user('bob', name='Bob')
    seed_user('alice', name='Alice', avatar='a.png')
    fake_db.seed('articles/art1', {'title': '첫 글', 'authorId': 'bob', 'likes': 0, 'stats': {'likeCount': 0}})


def test_toggle_like_twice_restores_counter(like_service, fake_db, article):
    assert like_service.toggle_like('article', 'art1', 'alice') is True
    data = fake_db.data('articles/art1')
    assert data['likes'] == 1
    assert data['stats']['likeCount'] == 1

    assert like_service.toggle_like('article', 'art1', 'alice') is False
    data = fake_db.data('articles/art1')
    assert data['likes'] == 0
    assert data['stats']['likeCount'] == 0


def test_edge_and_counter_written_in_one_commit(like_service, fake_db, article):
    like_service.toggle_like('article', 'art1', 'alice')
    assert fake_db.commits == 1
    assert fake_db.ids('articles/art1/likes') == ['alice']


def test_counter_matches_edge_count(like_service, fake_db, article, seed_user):
    for uid in ('u1', 'u2', 'u3'):
        seed_user(uid)
    for uid in ('u1', 'u2', 'u3', 'u2', 'alice', 'u3', 'u3'):
        like_service.toggle_like('article', 'art1', uid)

    edges = fake_db.ids('articles/art1/likes')
    data = fake_db.data('articles/art1')
    assert sorted(edges) == ['alice', 'u1', 'u3']
    assert data['likes'] == len(edges)
    assert data['stats']['likeCount'] == len(edges)


def test_like_notification_uses_deterministic_id(like_service, fake_db, article):
    like_service.toggle_like('article', 'art1', 'alice')
    assert fake_db.ids('users/bob/notifications') == ['like_article_art1_alice']
    notification = fake_db.data('users/bob/notifications/like_article_art1_alice')
    assert notification['type'] == 'like'
    assert notification['actorName'] == 'Alice'
    assert notification['read'] is False
    assert notification['link'] == '/blog/art1'

    # 취소하면 같은 ID 로 삭제되고, 다시 누르면 하나만 다시 생깁니다.
    like_service.toggle_like('article', 'art1', 'alice')
    assert fake_db.ids('users/bob/notifications') == []
    like_service.toggle_like('article', 'art1', 'alice')
    assert fake_db.ids('users/bob/notifications') == ['like_article_art1_alice']


def test_project_like_notification_prefix(like_service, fake_db, seed_user):
    seed_user('bob')
    fake_db.seed('projects/p1', {'title': '포트폴리오', 'authorId': 'bob', 'likes': 0})
    like_service.toggle_like('project', 'p1', 'alice', actor={'name': 'Alice', 'avatar': ''})
    assert fake_db.ids('users/bob/notifications') == ['like_p1_alice']
    assert fake_db.data('users/bob/notifications/like_p1_alice')['link'] == '/portfolio/p1'


def test_self_like_creates_no_notification(like_service, fake_db, article):
    assert like_service.toggle_like('article', 'art1', 'bob') is True
    assert fake_db.ids('users/bob/notifications') == []
    assert fake_db.data('articles/art1')['likes'] == 1


def test_notification_failure_does_not_fail_like(like_service, fake_db, article):
    fake_db.fail_on.add('set')
    assert like_service.toggle_like('article', 'art1', 'alice') is True
    assert fake_db.data('articles/art1')['likes'] == 1
    assert fake_db.ids('users/bob/notifications') == []


def test_commit_failure_propagates_and_changes_nothing(like_service, fake_db, article):
    fake_db.fail_on.add('commit')
    with pytest.raises(StoreUnavailableError):
        like_service.toggle_like('article', 'art1', 'alice')
    assert fake_db.ids('articles/art1/likes') == []
    assert fake_db.data('articles/art1')['likes'] == 0
    assert fake_db.ids('users/bob/notifications') == []


def test_missing_content_raises(like_service):
    with pytest.raises(ContentNotFoundError):
        like_service.toggle_like('article', 'nope', 'alice')


def test_unknown_kind_raises(like_service):
    with pytest.raises(UnknownContentKindError):
        like_service.toggle_like('video', 'v1', 'alice')


def test_forum_reply_like_uses_parent(like_service, fake_db, seed_user):
    seed_user('carol')
    fake_db.seed('forumThreads/t1', {'title': '질문', 'authorId': 'bob'})
    fake_db.seed('forumThreads/t1/replies/r1', {'text': '답변입니다', 'authorId': 'carol', 'likes': 0})

    assert like_service.toggle_like('forum_reply', 'r1', 'alice', parent_id='t1') is True
    assert fake_db.ids('forumThreads/t1/replies/r1/likes') == ['alice']
    assert fake_db.data('forumThreads/t1/replies/r1')['likes'] == 1
    assert fake_db.ids('users/carol/notifications') == ['like_reply_r1_alice']
    assert fake_db.data('users/carol/notifications/like_reply_r1_alice')['link'] == '/forum/t1'


def test_nested_kind_requires_parent(like_service):
    with pytest.raises(ValueError):
        like_service.toggle_like('forum_reply', 'r1', 'alice')


def test_like_statuses(like_service, fake_db, article):
    fake_db.seed('articles/art2', {'title': '둘째 글', 'authorId': 'bob', 'likes': 0})
    like_service.toggle_like('article', 'art2', 'alice')

    assert like_service.get_like_status('article', 'art1', 'alice') is False
    assert like_service.get_like_status('article', 'art2', 'alice') is True
    assert like_service.get_like_statuses('article', ['art1', 'art2'], 'alice') == {'art1': False, 'art2': True}
    assert like_service.get_like_count('article', 'art2') == 1
