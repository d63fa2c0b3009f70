"""UtopiaClient — sync HTTP client SDK for the Utopia local API."""

from __future__ import annotations

import inspect
import logging
import os
import re
import threading
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from utopia import files
from utopia.client import activation
from utopia.client.notifications import (
    ChannelState,
    Event,
    EventCategory,
    EventStream,
    NotificationChannel,
    SubscriptionRegistry,
)
from utopia.errors import InvalidCredentialError, NotificationSetupError, TransportError
from utopia.methods import OPERATIONS, Operation, build_params, get_operation
from utopia.protocol import (
    DEFAULT_API_PORT,
    DEFAULT_HOST,
    DEFAULT_METHOD,
    DEFAULT_WS_PORT,
    EP_API,
    WS_NOTIFICATIONS,
    Envelope,
)

log = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[a-f0-9]+")


def normalize_token(token: Any) -> str:
    """Return *token* upper-cased. Raises InvalidCredentialError unless it is hex."""
    if not isinstance(token, str) or not _TOKEN_RE.fullmatch(token.lower()):
        raise InvalidCredentialError("token is not valid")
    return token.upper()


@dataclass(frozen=True)
class Endpoint:
    host: str = DEFAULT_HOST
    api_port: int = DEFAULT_API_PORT
    ws_port: int = DEFAULT_WS_PORT

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.api_port}"

    @property
    def api_url(self) -> str:
        return self.base_url + EP_API

    def ws_url(self, token: str, port: int | None = None) -> str:
        return f"ws://{self.host}:{port or self.ws_port}{WS_NOTIFICATIONS}?token={token}"


class UtopiaClient:
    """Thin client for the API of a running Utopia application.

    All calls are synchronous (httpx), and calls made through one client are
    sent one at a time in the order they were made. Every entry of
    ``utopia.methods.OPERATIONS`` is available as a method of the same name.

    With ``notifications=True`` the constructor also finds or enables the
    server's websocket port and starts listening for events. If that fails
    the client still works for requests; subscriptions just do nothing.
    """

    def __init__(
        self,
        token: str,
        notifications: bool = False,
        host: str = DEFAULT_HOST,
        api_port: int = DEFAULT_API_PORT,
        ws_port: int = DEFAULT_WS_PORT,
        timeout: float = 60.0,
        *,
        transport: httpx.BaseTransport | None = None,
        ws_connect: Callable[..., Any] | None = None,
    ) -> None:
        self._token = normalize_token(token)
        self._endpoint = Endpoint(host, int(api_port), int(ws_port))
        self._http = httpx.Client(
            base_url=self._endpoint.base_url, timeout=timeout, transport=transport,
        )
        self._send_lock = threading.Lock()
        self._registry = SubscriptionRegistry()
        self._channel: NotificationChannel | None = None
        self._notification_port: int | None = None

        if notifications:
            self._start_notifications(ws_connect)
        else:
            self._registry.close()

    @classmethod
    def from_env(cls, **overrides: Any) -> UtopiaClient:
        """Build a client from ``UTOPIA_*`` environment variables."""
        settings: dict[str, Any] = {
            "token": os.environ.get("UTOPIA_TOKEN"),
            "host": os.environ.get("UTOPIA_HOST", DEFAULT_HOST),
            "api_port": int(os.environ.get("UTOPIA_API_PORT", DEFAULT_API_PORT)),
            "ws_port": int(os.environ.get("UTOPIA_WS_PORT", DEFAULT_WS_PORT)),
            "notifications": os.environ.get("UTOPIA_NOTIFICATIONS", "").lower() in ("1", "true", "yes"),
        }
        settings.update(overrides)
        return cls(**settings)

    @property
    def token(self) -> str:
        return self._token

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def notification_port(self) -> int | None:
        return self._notification_port

    @property
    def notifications_available(self) -> bool:
        return self._channel is not None and self._channel.state is ChannelState.OPEN

    def close(self) -> None:
        if self._channel is not None:
            self._channel.close()
        self._registry.close()
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # --- Requests -----------------------------------------------------------

    def send_request(self, method: str | None = None, params: dict[str, Any] | None = None) -> Any:
        """Post one request and return the decoded response body.

        Args:
            method: Remote method name, ``getSystemInfo`` when omitted.
            params: Request params, sent as given.

        Raises:
            TransportError: the request failed, the status was not 200, or
                the body was not JSON. Requests are never retried.
        """
        envelope = Envelope(token=self._token, method=method or DEFAULT_METHOD, params=params or {})
        with self._send_lock:
            log.debug("→ %s", envelope.method)
            try:
                resp = self._http.post(EP_API, json=envelope.model_dump())
            except httpx.HTTPError as exc:
                raise TransportError(f"{envelope.method}: {exc}", cause=exc) from exc

        if resp.status_code != 200:
            raise TransportError(
                f"{envelope.method}: status code is not 200 ({resp.status_code})",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise TransportError(
                f"{envelope.method}: response is not JSON", cause=exc, status_code=200,
            ) from exc

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Run the wrapped method *name* (e.g. ``"get_contacts"``)."""
        operation = get_operation(name)
        return self.send_request(operation.method, build_params(operation, *args, **kwargs))

    # --- File uploads -------------------------------------------------------

    def upload_file(self, filename: str, data: str | None = None) -> Any:
        """Upload a file to the transfer manager.

        Args:
            filename: Local path; its base name is sent as the file name.
            data: Base64 content. Read from *filename* when not given.
        """
        name, data = files.resolve_upload(filename, data)
        return self.call("upload_file", data=data, filename=name)

    def send_channel_picture(self, channel_id: str, filename: str, data: str | None = None) -> Any:
        name, data = files.resolve_upload(filename, data)
        return self.call("send_channel_picture", channel_id, data=data, filename=name)

    # --- Notifications ------------------------------------------------------

    def _start_notifications(self, ws_connect: Callable[..., Any] | None) -> None:
        try:
            port = activation.negotiate(self, self._endpoint.ws_port)
            kwargs = {} if ws_connect is None else {"connect": ws_connect}
            channel = NotificationChannel(
                self._endpoint.ws_url(self._token, port), self._registry, **kwargs,
            )
            channel.open()
        except NotificationSetupError as exc:
            log.warning("notifications unavailable, listeners are disabled: %s", exc)
            self._registry.close()
            return
        self._channel = channel
        self._notification_port = port

    def on(self, event: EventCategory | str, callback: Callable[[Event], Any]) -> None:
        """Call *callback* with every event of category *event*."""
        category = EventCategory(event)
        if self._channel is None:
            log.debug("notifications unavailable, ignoring listener for %s", category.value)
            return
        self._registry.on(category, callback)

    def once(self, event: EventCategory | str, callback: Callable[[Event], Any]) -> None:
        """Call *callback* with the next event of category *event* only."""
        category = EventCategory(event)
        if self._channel is None:
            log.debug("notifications unavailable, ignoring listener for %s", category.value)
            return
        self._registry.once(category, callback)

    def remove_listener(self, event: EventCategory | str, callback: Callable[[Event], Any]) -> None:
        category = EventCategory(event)
        if self._channel is None:
            return
        self._registry.remove_listener(category, callback)

    def events(self, event: EventCategory | str = EventCategory.ANY) -> EventStream:
        """Blocking iterator over events of category *event*.

        It ends when the notification channel closes; without notifications
        it is empty.
        """
        return self._registry.stream(event)


def _make_method(name: str, operation: Operation) -> Callable[..., Any]:
    def method(self: UtopiaClient, *args: Any, **kwargs: Any) -> Any:
        return self.send_request(operation.method, build_params(operation, *args, **kwargs))

    self_param = inspect.Parameter("self", inspect.Parameter.POSITIONAL_OR_KEYWORD)
    method.__name__ = name
    method.__qualname__ = f"UtopiaClient.{name}"
    method.__doc__ = operation.doc or f"Call ``{operation.method}``."
    method.__signature__ = operation.signature.replace(
        parameters=[self_param, *operation.signature.parameters.values()],
    )
    return method


for _name, _operation in OPERATIONS.items():
    if not hasattr(UtopiaClient, _name):
        setattr(UtopiaClient, _name, _make_method(_name, _operation))
