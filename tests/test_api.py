from uuid import uuid4

from fastapi.testclient import TestClient

from evaltrack.core.security import create_access_token
from tests.conftest import ALICE_ID, BOB_ID, CAROL_ID, auth_header


def _start(client: TestClient, user_id, **payload) -> dict:
    body = {'subject_kind': 'quiz', 'total_items': 4, **payload}
    response = client.post('/api/v1/attempts', headers=auth_header(user_id), json=body)
    assert response.status_code == 201, response.text
    return response.json()


def _complete(client: TestClient, user_id, attempt_id: str, **payload) -> dict:
    body = {'completed_items': 4, 'passed': True, **payload}
    response = client.post(f'/api/v1/attempts/{attempt_id}/complete', headers=auth_header(user_id), json=body)
    assert response.status_code == 200, response.text
    return response.json()


def test_health_is_public(client: TestClient) -> None:
    response = client.get('/api/v1/health')
    assert response.status_code == 200
    assert response.json()['status'] == 'ok'


def test_requests_without_valid_token_are_rejected(client: TestClient) -> None:
    params = {'subject_kind': 'quiz', 'subject_id': str(uuid4())}

    missing = client.get('/api/v1/attempts', params=params)
    garbage = client.get('/api/v1/attempts', params=params, headers={'Authorization': 'Bearer not-a-jwt'})
    no_uuid = client.get(
        '/api/v1/attempts',
        params=params,
        headers={'Authorization': f'Bearer {create_access_token("someone")}'},
    )

    for response in (missing, garbage, no_uuid):
        assert response.status_code == 401
        assert response.json()['code'] == 'unauthenticated'
        assert response.headers['WWW-Authenticate'] == 'Bearer'


def test_submit_complete_and_summarize(client: TestClient) -> None:
    quiz_id = str(uuid4())
    started = _start(client, ALICE_ID, subject_id=quiz_id, started_at='2026-04-01T10:00:00Z')
    assert started['is_completed'] is False
    assert started['completion_percentage'] == 0.0

    completed = _complete(
        client, ALICE_ID, started['id'], completed_items=3, passed=False, score=7.5, completed_at='2026-04-01T10:05:00Z'
    )
    assert completed['is_completed'] is True
    assert completed['completion_percentage'] == 75.0
    assert completed['score'] == 7.5

    summary = client.get(
        '/api/v1/attempts/summary',
        params={'subject_kind': 'quiz', 'subject_id': quiz_id},
        headers=auth_header(ALICE_ID),
    )
    assert summary.status_code == 200, summary.text
    payload = summary.json()
    assert payload['has_attempted'] is True
    assert payload['attempt_count'] == 1
    assert payload['last_attempt']['id'] == started['id']

    fetched = client.get(f'/api/v1/attempts/{started["id"]}', headers=auth_header(ALICE_ID))
    assert fetched.status_code == 200
    assert fetched.json()['completed_items'] == 3


def test_event_attempts_stay_out_of_standalone_history(client: TestClient) -> None:
    game_id = str(uuid4())
    event_id = str(uuid4())
    _start(client, ALICE_ID, subject_kind='game', subject_id=game_id)
    _start(client, ALICE_ID, subject_kind='game', subject_id=game_id, event_id=event_id)
    _start(client, ALICE_ID, subject_kind='game', subject_id=game_id, event_id=event_id)

    standalone = client.get(
        '/api/v1/attempts',
        params={'subject_kind': 'game', 'subject_id': game_id},
        headers=auth_header(ALICE_ID),
    )
    event = client.get(
        '/api/v1/attempts',
        params={'subject_kind': 'game', 'event_id': event_id},
        headers=auth_header(ALICE_ID),
    )

    assert [item['event_id'] for item in standalone.json()['items']] == [None]
    assert len(event.json()['items']) == 2
    assert all(item['event_id'] == event_id for item in event.json()['items'])


def test_invalid_scope_is_rejected(client: TestClient) -> None:
    unknown_kind = client.get(
        '/api/v1/attempts',
        params={'subject_kind': 'video', 'subject_id': str(uuid4())},
        headers=auth_header(ALICE_ID),
    )
    no_subject = client.get('/api/v1/attempts/last', params={'subject_kind': 'quiz'}, headers=auth_header(ALICE_ID))

    for response in (unknown_kind, no_subject):
        assert response.status_code == 422
        assert response.json()['code'] == 'invalid_scope'


def test_last_attempt_is_null_when_nothing_recorded(client: TestClient) -> None:
    response = client.get(
        '/api/v1/attempts/last',
        params={'subject_kind': 'path', 'subject_id': str(uuid4())},
        headers=auth_header(ALICE_ID),
    )
    assert response.status_code == 200
    assert response.json() is None


def test_other_users_attempts_are_hidden(client: TestClient) -> None:
    attempt = _start(client, BOB_ID, subject_id=str(uuid4()))

    read = client.get(f'/api/v1/attempts/{attempt["id"]}', headers=auth_header(ALICE_ID))
    complete = client.post(
        f'/api/v1/attempts/{attempt["id"]}/complete',
        headers=auth_header(ALICE_ID),
        json={'completed_items': 1, 'passed': True},
    )

    assert read.status_code == 404
    assert complete.status_code == 404
    assert complete.json()['code'] == 'not_found'


def test_completing_twice_conflicts(client: TestClient) -> None:
    attempt = _start(client, ALICE_ID, subject_id=str(uuid4()))
    _complete(client, ALICE_ID, attempt['id'])

    again = client.post(
        f'/api/v1/attempts/{attempt["id"]}/complete',
        headers=auth_header(ALICE_ID),
        json={'completed_items': 4, 'passed': True},
    )
    too_many = _start(client, ALICE_ID, subject_id=str(uuid4()))
    overflow = client.post(
        f'/api/v1/attempts/{too_many["id"]}/complete',
        headers=auth_header(ALICE_ID),
        json={'completed_items': 9, 'passed': True},
    )

    assert again.status_code == 409
    assert again.json()['code'] == 'attempt_already_completed'
    assert overflow.status_code == 422
    assert overflow.json()['code'] == 'invalid_attempt'


def test_event_leaderboard_includes_profiles(client: TestClient) -> None:
    event_id = str(uuid4())
    quiz_id = str(uuid4())
    alice = _start(client, ALICE_ID, subject_id=quiz_id, event_id=event_id, started_at='2026-04-02T09:00:00Z')
    carol = _start(client, CAROL_ID, subject_id=quiz_id, event_id=event_id, started_at='2026-04-02T09:01:00Z')
    _complete(client, ALICE_ID, alice['id'], completed_at='2026-04-02T09:10:00Z')
    _complete(client, CAROL_ID, carol['id'], completed_at='2026-04-02T09:20:00Z')
    _start(client, BOB_ID, subject_id=quiz_id, started_at='2026-04-02T09:30:00Z')

    response = client.get(f'/api/v1/events/{event_id}/leaderboard', headers=auth_header(BOB_ID))

    assert response.status_code == 200, response.text
    items = response.json()['items']
    assert [item['rank'] for item in items] == [1, 2]
    assert [item['attempt']['id'] for item in items] == [carol['id'], alice['id']]
    assert items[0]['user'] == {'user_id': str(CAROL_ID), 'display_name': None, 'avatar_ref': None}
    assert items[1]['user']['display_name'] == 'Alice Andrade'


def test_leaderboard_for_unknown_event_is_empty(client: TestClient) -> None:
    event_id = str(uuid4())
    response = client.get(f'/api/v1/events/{event_id}/leaderboard', headers=auth_header(ALICE_ID))

    assert response.status_code == 200
    assert response.json() == {'event_id': event_id, 'items': []}


def test_upload_reward_is_idempotent_over_http(client: TestClient) -> None:
    content_id = str(uuid4())

    first = client.post(
        '/api/v1/rewards/content-upload', headers=auth_header(ALICE_ID), json={'content_id': content_id}
    )
    second = client.post(
        '/api/v1/rewards/content-upload', headers=auth_header(ALICE_ID), json={'content_id': content_id}
    )

    assert first.status_code == 201, first.text
    assert first.json()['status'] == 'granted'
    assert first.json()['amount'] == 1000
    assert second.status_code == 200
    assert second.json() == {'status': 'already_granted', 'amount': 0, 'grant_id': None}

    status_response = client.get('/api/v1/rewards/me', headers=auth_header(ALICE_ID))
    xp = status_response.json()
    assert xp['experience_points'] == 1000
    assert xp['level']['name'] == 'Student'
    assert xp['next_level']['name'] == 'Explorer'
    assert xp['level_progress'] == 33
    assert xp['xp_to_next_level'] == 1000

    history = client.get('/api/v1/rewards/me/history', headers=auth_header(ALICE_ID))
    assert history.status_code == 200
    assert history.json()['total_gained'] == 1000
    assert [item['content_id'] for item in history.json()['items']] == [content_id]


def test_path_completion_reward_over_http(client: TestClient) -> None:
    path_id = str(uuid4())
    body = {'path_id': path_id}

    early = client.post('/api/v1/rewards/path-completion', headers=auth_header(BOB_ID), json=body)
    assert early.status_code == 200
    assert early.json()['status'] == 'not_eligible'

    attempt = _start(client, BOB_ID, subject_kind='path', subject_id=path_id, total_items=2)
    _complete(client, BOB_ID, attempt['id'], completed_items=2)

    granted = client.post('/api/v1/rewards/path-completion', headers=auth_header(BOB_ID), json=body)
    assert granted.status_code == 201
    assert granted.json()['status'] == 'granted'


def test_new_user_starts_at_first_level(client: TestClient) -> None:
    response = client.get('/api/v1/rewards/me', headers=auth_header(CAROL_ID))

    assert response.status_code == 200
    assert response.json()['experience_points'] == 0
    assert response.json()['level']['name'] == 'Beginner'
    assert response.json()['level_progress'] == 0


def test_history_window_is_bounded(client: TestClient) -> None:
    response = client.get('/api/v1/rewards/me/history', params={'days': 0}, headers=auth_header(ALICE_ID))
    assert response.status_code == 422


def test_subject_kind_errors_use_scope_error_code(client: TestClient) -> None:
    subject_id = str(uuid4())
    responses = [
        client.post(
            '/api/v1/attempts',
            headers=auth_header(ALICE_ID),
            json={'subject_kind': 'video', 'subject_id': subject_id},
        ),
        client.post('/api/v1/attempts', headers=auth_header(ALICE_ID), json={'subject_id': subject_id}),
        client.post('/api/v1/attempts', headers=auth_header(ALICE_ID), json={'subject_kind': 'quiz'}),
        client.post(
            '/api/v1/attempts',
            headers=auth_header(ALICE_ID),
            json={'subject_kind': 'quiz', 'event_id': str(uuid4())},
        ),
        client.get('/api/v1/attempts', params={'subject_id': subject_id}, headers=auth_header(ALICE_ID)),
    ]

    for response in responses:
        assert response.status_code == 422, response.text
        assert response.json()['code'] == 'invalid_scope'


def test_action_rewards_over_http(client: TestClient) -> None:
    body = {'content_id': str(uuid4()), 'action': 'like'}

    first = client.post('/api/v1/rewards/actions', headers=auth_header(BOB_ID), json=body)
    second = client.post('/api/v1/rewards/actions', headers=auth_header(BOB_ID), json=body)
    unknown = client.post(
        '/api/v1/rewards/actions',
        headers=auth_header(BOB_ID),
        json={'content_id': body['content_id'], 'action': 'share'},
    )

    assert first.status_code == 201, first.text
    assert first.json()['amount'] == 10
    assert second.status_code == 200
    assert second.json()['status'] == 'already_granted'
    assert unknown.status_code == 422
    assert unknown.json()['code'] == 'invalid_reward_action'
    assert client.get('/api/v1/rewards/me', headers=auth_header(BOB_ID)).json()['experience_points'] == 10
