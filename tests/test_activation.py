import json

import httpx
import pytest

from conftest import TOKEN, FakeConnect, Recorder
from utopia import UtopiaClient
from utopia.client import activation
from utopia.errors import NotificationSetupError


def make_client(recorder, connect, calls=None, **kwargs):

    def handler(request):
        if calls is not None:
            calls.append(json.loads(request.content)['method'])
        return recorder(request)

    return UtopiaClient(
        TOKEN,
        notifications=True,
        transport=httpx.MockTransport(handler),
        ws_connect=connect,
        **kwargs,
    )


def test_disabled_state_enables_default_port(recorder):
    """ With the server reporting port 0, the client asks for the channel
        on the default port before opening any socket.
    """

    calls = list()
    connect = FakeConnect(calls)
    recorder.replies['getWebSocketState'] = (200, {'result': 0})
    recorder.replies['setWebSocketState'] = (200, {'result': True})

    client = make_client(recorder, connect, calls)
    try:
        assert calls == ['getWebSocketState', 'setWebSocketState', 'connect']
        assert recorder.envelopes[1]['params'] == {'enabled': True, 'port': '20001'}
        assert connect.urls == [f'ws://127.0.0.1:20001/UtopiaWSS?token={TOKEN.upper()}']
        assert client.notifications_available
        assert client.notification_port == 20001
    finally:
        client.close()


def test_custom_fallback_port(recorder):
    connect = FakeConnect()
    recorder.replies['getWebSocketState'] = (200, {'result': 0})
    recorder.replies['setWebSocketState'] = (200, {'result': True})

    with make_client(recorder, connect, ws_port=25001) as client:
        assert recorder.envelopes[1]['params']['port'] == '25001'
        assert connect.urls[0].startswith('ws://127.0.0.1:25001/')
        assert client.notification_port == 25001


def test_active_port_adopted(recorder):
    connect = FakeConnect()
    recorder.replies['getWebSocketState'] = (200, {'result': 23456})

    with make_client(recorder, connect) as client:
        assert recorder.methods == ['getWebSocketState']
        assert connect.urls == [f'ws://127.0.0.1:23456/UtopiaWSS?token={TOKEN.upper()}']
        assert client.notification_port == 23456


def test_state_query_fails(recorder):
    calls = list()
    connect = FakeConnect(calls)
    recorder.replies['getWebSocketState'] = (500, {})
    recorder.replies['setWebSocketState'] = (200, {'result': True})

    with make_client(recorder, connect, calls) as client:
        assert calls == ['getWebSocketState', 'setWebSocketState', 'connect']
        assert client.notifications_available


def test_activation_fails(recorder):
    """ Construction still succeeds; subscriptions quietly do nothing and
        the request path keeps working.
    """

    connect = FakeConnect()
    recorder.replies['getWebSocketState'] = (500, {})
    recorder.replies['setWebSocketState'] = (500, {})

    with make_client(recorder, connect) as client:
        assert connect.urls == []
        assert not client.notifications_available
        assert client.notification_port is None

        seen = list()
        client.on('any', seen.append)
        client.once('newEmail', seen.append)
        client.remove_listener('any', seen.append)
        assert list(client.events('message')) == []

        assert client.get_balance()['method'] == 'getBalance'


def test_socket_fails(recorder):

    def connect(url, **kwargs):
        raise OSError('unreachable')

    recorder.replies['getWebSocketState'] = (200, {'result': 20001})

    with make_client(recorder, connect) as client:
        assert not client.notifications_available
        assert list(client.events()) == []


def test_notifications_off(client, recorder):
    seen = list()
    client.on('any', seen.append)
    assert list(client.events()) == []
    assert recorder.envelopes == []


def test_events_through_client(recorder):
    connect = FakeConnect()
    recorder.replies['getWebSocketState'] = (200, {'result': 20001})

    with make_client(recorder, connect) as client:
        seen = list()
        client.on('incomingMessage', seen.append)
        stream = client.events('newInstantMessage')

        connect.sockets[0].feed(json.dumps({'type': 'newInstantMessage', 'text': 'hi'}))
        event = stream.get(timeout=5)
        assert event.payload['text'] == 'hi'

        connect.sockets[0].feed(json.dumps({'type': 'incomingBuzz'}))
        connect.sockets[0].close()
        client._channel.wait_closed(5)
        assert [event.type for event in seen] == ['incomingBuzz']

    assert list(stream) == []


def test_unknown_category_rejected(client):
    with pytest.raises(ValueError):
        client.on('bogus', print)


def test_negotiate_directly():
    recorder = Recorder()
    recorder.replies['getWebSocketState'] = (200, {'result': 0})
    recorder.replies['setWebSocketState'] = (404, {})

    with UtopiaClient(TOKEN, transport=httpx.MockTransport(recorder)) as client:
        with pytest.raises(NotificationSetupError):
            activation.negotiate(client, 20001)

    recorder.replies['setWebSocketState'] = (200, {})
    with UtopiaClient(TOKEN, transport=httpx.MockTransport(recorder)) as client:
        for result in ('garbage', True, False, 70000, -1, None):
            recorder.replies['getWebSocketState'] = (200, {'result': result})
            assert activation.negotiate(client, 20005) == 20005, result

        recorder.replies['getWebSocketState'] = (200, {'result': '23456'})
        assert activation.negotiate(client, 20005) == 23456


def test_boolean_state_is_not_a_port(recorder):
    """ A bare ``true`` from the state query must not be read as port 1. """

    calls = list()
    connect = FakeConnect(calls)
    recorder.replies['getWebSocketState'] = (200, {'result': True})
    recorder.replies['setWebSocketState'] = (200, {'result': True})

    with make_client(recorder, connect, calls) as client:
        assert calls == ['getWebSocketState', 'setWebSocketState', 'connect']
        assert connect.urls[0].startswith('ws://127.0.0.1:20001/')
        assert client.notification_port == 20001
