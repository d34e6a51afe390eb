# engagement/api/likes/test_like_routes.py
import pytest


@pytest.fixture
def article(fake_db, seed_user):
    seed_user('bob', name='Bob')
    seed_user('alice', name='Alice')
    fake_db.seed('articles/art1', {'title': '첫 글', 'authorId': 'bob', 'likes': 0, 'stats': {'likeCount': 0}})


def test_toggle_like_route(client, auth_headers, fake_db, article):
    response = client.post('/api/likes/article/art1', headers=auth_headers('alice'))
    assert response.status_code == 200
    assert response.get_json()['is_liked'] is True

    response = client.get('/api/likes/article/art1', headers=auth_headers('alice'))
    assert response.get_json() == {'is_liked': True, 'like_count': 1}
    assert fake_db.ids('users/bob/notifications') == ['like_article_art1_alice']


def test_toggle_like_requires_token(client, article):
    assert client.post('/api/likes/article/art1').status_code == 401


def test_unknown_kind_is_bad_request(client, auth_headers):
    response = client.post('/api/likes/video/v1', headers=auth_headers('alice'))
    assert response.status_code == 400
    assert response.get_json()['error_code'] == 'UNKNOWN_CONTENT_KIND'


def test_missing_content_is_not_found(client, auth_headers):
    response = client.post('/api/likes/article/nope', headers=auth_headers('alice'))
    assert response.status_code == 404
    assert response.get_json()['error_code'] == 'CONTENT_NOT_FOUND'


def test_store_failure_is_service_unavailable(client, auth_headers, fake_db, article):
    fake_db.fail_on.add('commit')
    response = client.post('/api/likes/article/art1', headers=auth_headers('alice'))
    assert response.status_code == 503
    assert response.get_json()['error_code'] == 'STORE_UNAVAILABLE'


def test_invalid_body_is_validation_error(client, auth_headers, article):
    response = client.post('/api/likes/article/art1', json={'actor': {'avatar': 'x'}}, headers=auth_headers('alice'))
    assert response.status_code == 400
    assert response.get_json()['error_code'] == 'VALIDATION_ERROR'
