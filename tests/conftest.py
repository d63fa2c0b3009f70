import json
import queue

import httpx
import pytest

from utopia import UtopiaClient

TOKEN = "c0ffee00deadbeef"


class Recorder:
    """ httpx handler that records every envelope it receives. By default
        it answers 200 with the envelope itself; ``replies`` maps a remote
        method name to a ``(status, body)`` pair to answer with instead.
    """

    def __init__(self):
        self.envelopes = list()
        self.requests = list()
        self.replies = dict()

    def __call__(self, request):
        envelope = json.loads(request.content)
        self.requests.append(request)
        self.envelopes.append(envelope)

        reply = self.replies.get(envelope['method'])
        if reply is None:
            return httpx.Response(200, json=envelope)

        status, body = reply
        return httpx.Response(status, json=body)

    @property
    def methods(self):
        return [envelope['method'] for envelope in self.envelopes]


class FakeSocket:
    """ Stands in for a websockets connection. Frames fed in are yielded
        by iteration; close() ends the iteration.
    """

    def __init__(self):
        self.frames = queue.Queue()
        self.closed = False

    def feed(self, *frames):
        for frame in frames:
            self.frames.put(frame)

    def close(self):
        self.closed = True
        self.frames.put(None)

    def __iter__(self):
        while True:
            frame = self.frames.get(timeout=5)
            if frame is None:
                return
            yield frame


class FakeConnect:
    """ Replacement for websockets.sync.client.connect. """

    def __init__(self, calls=None):
        self.urls = list()
        self.sockets = list()
        self.calls = calls

    def __call__(self, url, **kwargs):
        self.urls.append(url)
        if self.calls is not None:
            self.calls.append('connect')
        socket = FakeSocket()
        self.sockets.append(socket)
        return socket


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def client(recorder):
    client = UtopiaClient(TOKEN, transport=httpx.MockTransport(recorder))
    yield client
    client.close()
