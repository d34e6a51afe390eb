# engagement/api/comments/test_comment_routes.py
import pytest


@pytest.fixture
def article(fake_db, seed_user):
    seed_user('bob', name='Bob')
    seed_user('alice', name='Alice', avatar='alice.png')
    fake_db.seed('articles/art1', {'title': '첫 글', 'authorId': 'bob', 'comments': 0, 'stats': {'commentCount': 0}})


def test_create_and_read_thread(client, auth_headers, fake_db, article):
    response = client.post('/api/comments/article/art1', json={'text': '좋은 글'}, headers=auth_headers('alice'))
    assert response.status_code == 201
    root_id = response.get_json()['comment_id']

    stored = fake_db.data(f'articles/art1/comments/{root_id}')
    assert stored['authorName'] == 'Alice'
    assert stored['authorAvatar'] == 'alice.png'

    response = client.post('/api/comments/article/art1', json={'text': '감사합니다', 'parent_id': root_id},
                           headers=auth_headers('bob'))
    assert response.status_code == 201

    thread = client.get('/api/comments/article/art1').get_json()
    assert [root['comment_id'] for root in thread['roots']] == [root_id]
    assert [reply['text'] for reply in thread['roots'][0]['replies']] == ['감사합니다']
    assert thread['orphans'] == []


def test_empty_text_is_rejected(client, auth_headers, article):
    response = client.post('/api/comments/article/art1', json={'text': ''}, headers=auth_headers('alice'))
    assert response.status_code == 400
    assert response.get_json()['error_code'] == 'VALIDATION_ERROR'


def test_reply_to_reply_is_bad_request(client, auth_headers, article):
    root_id = client.post('/api/comments/article/art1', json={'text': 'a'},
                          headers=auth_headers('alice')).get_json()['comment_id']
    reply_id = client.post('/api/comments/article/art1', json={'text': 'b', 'parent_id': root_id},
                           headers=auth_headers('bob')).get_json()['comment_id']
    response = client.post('/api/comments/article/art1', json={'text': 'c', 'parent_id': reply_id},
                           headers=auth_headers('alice'))
    assert response.status_code == 400
    assert response.get_json()['error_code'] == 'INVALID_PARENT'


def test_delete_comment_permissions(client, auth_headers, fake_db, seed_user, article):
    seed_user('carol')
    comment_id = client.post('/api/comments/article/art1', json={'text': 'a'},
                             headers=auth_headers('alice')).get_json()['comment_id']

    response = client.delete(f'/api/comments/article/art1/{comment_id}', headers=auth_headers('carol'))
    assert response.status_code == 403

    response = client.delete(f'/api/comments/article/art1/{comment_id}', headers=auth_headers('alice'))
    assert response.status_code == 204
    assert fake_db.data('articles/art1')['stats']['commentCount'] == 0


def test_best_answer_route(client, auth_headers, fake_db, seed_user):
    seed_user('bob')
    seed_user('alice')
    fake_db.seed('forumThreads/t1', {'title': '질문', 'authorId': 'bob', 'replies': 0, 'stats': {'replyCount': 0}})
    reply_id = client.post('/api/comments/forum_thread/t1', json={'text': '답변'},
                           headers=auth_headers('alice')).get_json()['comment_id']

    response = client.post(f'/api/comments/forum_thread/t1/{reply_id}/best-answer', headers=auth_headers('alice'))
    assert response.status_code == 403

    response = client.post(f'/api/comments/forum_thread/t1/{reply_id}/best-answer', headers=auth_headers('bob'))
    assert response.status_code == 200
    assert fake_db.data('forumThreads/t1')['bestAnswerId'] == reply_id
