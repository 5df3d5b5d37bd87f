from unittest.mock import Mock

import pytest
import requests
from portal.services.backend_client import BackendClient, BackendError


def _response(status=200, body=None, cookies=None, json_error=False):
    resp = Mock()
    resp.status_code = status
    resp.ok = 200 <= status < 400
    if json_error:
        resp.json.side_effect = ValueError('Expecting value')
    else:
        resp.json.return_value = body if body is not None else {}
    resp.cookies.get_dict.return_value = cookies or {}
    return resp


def _client(resp=None, error=None):
    http = Mock(spec=requests.Session)
    for method in (http.get, http.post):
        if error is not None:
            method.side_effect = error
        else:
            method.return_value = resp
    return BackendClient('http://backend.test/', timeout=3, http=http), http


def test_check_session_active():
    client, http = _client(_response(200, {'active': True, 'user': {'id': 1}}))
    result = client.check_session({'basadi.session': 'c'})
    assert result.ok and result.active and result.status == 200
    http.get.assert_called_once_with(
        'http://backend.test/api/check-session', cookies={'basadi.session': 'c'}, timeout=3
    )


def test_check_session_inactive_body():
    client, _ = _client(_response(200, {'active': False}))
    result = client.check_session()
    assert result.ok is True
    assert result.active is False


@pytest.mark.parametrize('status', [401, 440, 500])
def test_check_session_non_ok(status):
    client, _ = _client(_response(status, {'active': False, 'message': 'No active session'}))
    result = client.check_session()
    assert result.ok is False
    assert result.status == status


def test_check_session_errors_propagate():
    client, _ = _client(error=requests.ConnectionError('refused'))
    with pytest.raises(requests.RequestException):
        client.check_session()
    client, _ = _client(_response(200, json_error=True))
    with pytest.raises(ValueError):
        client.check_session()


@pytest.mark.parametrize('body', [None, [], 'active', True])
def test_check_session_non_object_body_raises(body):
    resp = _response(200)
    resp.json.return_value = body
    client, _ = _client(resp)
    with pytest.raises(ValueError):
        client.check_session()


def test_login_employee_payload_and_result():
    user = {'id': 7, 'employeeId': 7, 'role': 'trainer'}
    client, http = _client(_response(200, {'message': 'Login successful', 'user': user, 'sessionId': 'sid'},
                                     cookies={'basadi.session': 'v'}))
    result = client.login('employee', 'tia@basadi.test', employee_id='7')
    assert result.user == user
    assert result.session_id == 'sid'
    assert result.cookies == {'basadi.session': 'v'}
    http.post.assert_called_once_with(
        'http://backend.test/api/login',
        json={'loginType': 'employee', 'email': 'tia@basadi.test', 'employeeId': '7'},
        timeout=3,
    )


def test_login_super_admin_sends_password():
    client, http = _client(_response(200, {'user': {'id': 1, 'loginType': 'super_admin'}}))
    client.login('super_admin', 'root@basadi.test', password='pw')
    assert http.post.call_args.kwargs['json'] == {'loginType': 'super_admin', 'email': 'root@basadi.test', 'password': 'pw'}


def test_login_errors():
    client, _ = _client(_response(404, {'message': 'Employee account not found or email/ID mismatch'}))
    with pytest.raises(BackendError) as exc:
        client.login('employee', 'x@basadi.test', employee_id='1')
    assert exc.value.status == 404
    assert 'not found' in exc.value.message

    client, _ = _client(error=requests.Timeout('slow'))
    with pytest.raises(BackendError) as exc:
        client.login('employee', 'x@basadi.test', employee_id='1')
    assert exc.value.status == 502

    client, _ = _client(_response(200, {'message': 'ok'}))
    with pytest.raises(BackendError):
        client.login('employee', 'x@basadi.test', employee_id='1')

    with pytest.raises(BackendError):
        client.login('robot', 'x@basadi.test')


def test_list_timesheets():
    client, _ = _client(_response(200, {'success': True, 'data': [{'id': 1}], 'count': 1}))
    assert client.list_timesheets() == [{'id': 1}]
    client, _ = _client(_response(403, {'message': 'Access denied'}))
    with pytest.raises(BackendError) as exc:
        client.list_timesheets()
    assert exc.value.status == 403


def test_logout_is_best_effort():
    client, _ = _client(_response(200, {'message': 'Logged out successfully'}))
    assert client.logout({'basadi.session': 'v'}) is True
    client, _ = _client(error=requests.ConnectionError('down'))
    assert client.logout() is False
