# engagement/api/content/test_content_services.py
import pytest

from engagement.core.exceptions import ContentNotFoundError


@pytest.fixture
def author_with_followers(fake_db, seed_user, follow_service):
    seed_user('bob', name='Bob')
    for uid in ('alice', 'carol', 'dave'):
        seed_user(uid)
        follow_service.toggle_follow('bob', uid)
    fake_db.seed('articles/art1', {'title': '새 글', 'authorId': 'bob', 'likes': 0, 'comments': 0,
                                   'stats': {'likeCount': 0, 'commentCount': 0}})


def _system_notifications(fake_db, uid):
    return [
        fake_db.data(f'users/{uid}/notifications/{nid}')
        for nid in fake_db.ids(f'users/{uid}/notifications')
        if fake_db.data(f'users/{uid}/notifications/{nid}')['type'] == 'system'
    ]


def test_announce_fans_out_to_every_follower(content_service, fake_db, author_with_followers):
    sent = content_service.announce_publication('article', 'art1')

    assert sent == 3
    for uid in ('alice', 'carol', 'dave'):
        notifications = _system_notifications(fake_db, uid)
        assert len(notifications) == 1
        assert notifications[0]['actorName'] == 'Bob'
        assert notifications[0]['link'] == '/blog/art1'
    assert _system_notifications(fake_db, 'bob') == []


def test_announce_without_followers(content_service, fake_db, seed_user):
    seed_user('erin')
    fake_db.seed('projects/p1', {'title': '프로젝트', 'authorId': 'erin'})
    assert content_service.announce_publication('project', 'p1') == 0


def test_announce_detached_returns_immediately(content_service, fake_db, author_with_followers):
    # inline 디스패처라 반환 시점에 이미 전송이 끝나 있습니다.
    assert content_service.announce_publication('article', 'art1', detached=True) == 0
    assert len(_system_notifications(fake_db, 'alice')) == 1


def test_announce_requires_author(content_service, author_with_followers):
    with pytest.raises(PermissionError):
        content_service.announce_publication('article', 'art1', requester_id='alice')


def test_delete_content_cascades(content_service, like_service, comment_service, fake_db, author_with_followers):
    like_service.toggle_like('article', 'art1', 'alice')
    like_service.toggle_like('article', 'art1', 'bob')
    comment_id = comment_service.add_comment('article', 'art1', {
        'author_id': 'carol', 'author_name': 'Carol', 'author_avatar': '', 'text': '댓글',
    })
    like_service.toggle_like('article_comment', comment_id, 'dave', parent_id='art1')
    assert fake_db.ids('users/bob/notifications') != []

    summary = content_service.delete_content('article', 'art1', requester_id='bob')

    assert fake_db.data('articles/art1') is None
    assert fake_db.ids('articles/art1/likes') == []
    assert fake_db.ids('articles/art1/comments') == []
    assert fake_db.ids(f'articles/art1/comments/{comment_id}/likes') == []
    assert 'like_article_art1_alice' not in fake_db.ids('users/bob/notifications')
    assert f'like_comment_{comment_id}_dave' not in fake_db.ids('users/carol/notifications')
    assert summary == {'likes': 3, 'notifications': 2, 'comments': 1}


def test_delete_content_requires_owner(content_service, fake_db, author_with_followers):
    with pytest.raises(PermissionError):
        content_service.delete_content('article', 'art1', requester_id='alice')
    assert fake_db.data('articles/art1') is not None


def test_delete_missing_content(content_service):
    with pytest.raises(ContentNotFoundError):
        content_service.delete_content('article', 'nope')


def test_cascade_failure_is_not_raised(content_service, like_service, fake_db, author_with_followers):
    like_service.toggle_like('article', 'art1', 'alice')
    fake_db.fail_on.add('commit')

    summary = content_service.delete_content('article', 'art1')

    # 문서는 지워졌고, 정리 실패로 좋아요 레코드는 고아로 남습니다.
    assert fake_db.data('articles/art1') is None
    assert fake_db.ids('articles/art1/likes') == ['alice']
    assert summary['likes'] == 0


@pytest.fixture
def answered_thread(fake_db, seed_user, comment_service):
    seed_user('bob')
    seed_user('alice')
    fake_db.seed('forumThreads/t1', {'title': '질문', 'authorId': 'bob', 'replies': 0,
                                     'stats': {'replyCount': 0}})
    reply_id = comment_service.add_comment('forum_thread', 't1', {
        'author_id': 'alice', 'author_name': 'Alice', 'author_avatar': '', 'text': '답변',
    })
    return reply_id


def test_delete_reply_decrements_thread_counters(content_service, comment_service, fake_db, answered_thread):
    comment_service.mark_best_answer('t1', answered_thread, requester_id='bob')

    summary = content_service.delete_content('forum_reply', answered_thread, requester_id='alice', parent_id='t1')

    thread = fake_db.data('forumThreads/t1')
    assert fake_db.ids('forumThreads/t1/replies') == []
    assert thread['replies'] == 0
    assert thread['stats']['replyCount'] == 0
    assert thread['bestAnswerId'] is None
    assert thread['isResolved'] is False
    assert summary['comments'] == 1


def test_delete_liked_comment_removes_like_notification(content_service, comment_service, like_service,
                                                         fake_db, author_with_followers):
    comment_id = comment_service.add_comment('article', 'art1', {
        'author_id': 'carol', 'author_name': 'Carol', 'author_avatar': '', 'text': '댓글',
    })
    like_service.toggle_like('article_comment', comment_id, 'dave', parent_id='art1')
    assert f'like_comment_{comment_id}_dave' in fake_db.ids('users/carol/notifications')

    summary = content_service.delete_content('article_comment', comment_id, requester_id='carol', parent_id='art1')

    assert fake_db.data(f'articles/art1/comments/{comment_id}') is None
    assert fake_db.ids(f'articles/art1/comments/{comment_id}/likes') == []
    assert f'like_comment_{comment_id}_dave' not in fake_db.ids('users/carol/notifications')
    assert fake_db.data('articles/art1')['stats']['commentCount'] == 0
    assert fake_db.data('articles/art1')['comments'] == 0
    assert summary == {'likes': 1, 'notifications': 1, 'comments': 1}


def test_delete_reply_requires_author_or_thread_owner(content_service, fake_db, seed_user, answered_thread):
    seed_user('carol')
    with pytest.raises(PermissionError):
        content_service.delete_content('forum_reply', answered_thread, requester_id='carol', parent_id='t1')
    assert fake_db.data('forumThreads/t1')['stats']['replyCount'] == 1
