# engagement/api/follows/test_follow_routes.py
def test_follow_routes(client, auth_headers, seed_user):
    seed_user('alice', name='Alice')
    seed_user('bob', name='Bob')

    response = client.post('/api/users/alice/follow', headers=auth_headers('bob'))
    assert response.status_code == 200
    assert response.get_json() == {'is_following': True}

    assert client.get('/api/users/alice/follow', headers=auth_headers('bob')).get_json() == {'is_following': True}

    followers = client.get('/api/users/alice/followers').get_json()['followers']
    assert [f['user_id'] for f in followers] == ['bob']
    assert followers[0]['name'] == 'Bob'

    following = client.get('/api/users/bob/following').get_json()['following']
    assert [f['user_id'] for f in following] == ['alice']

    response = client.post('/api/users/alice/follow', headers=auth_headers('bob'))
    assert response.get_json() == {'is_following': False}


def test_follow_unknown_user(client, auth_headers, seed_user):
    seed_user('bob')
    response = client.post('/api/users/ghost/follow', headers=auth_headers('bob'))
    assert response.status_code == 404
    assert response.get_json()['error_code'] == 'USER_NOT_FOUND'
