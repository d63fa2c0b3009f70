"""Find or enable the notification port before connecting to it."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from utopia.errors import NotificationSetupError, TransportError

if TYPE_CHECKING:
    from utopia.client.client import UtopiaClient

log = logging.getLogger(__name__)


def _active_port(response) -> int:
    """Port from a getWebSocketState response; 0 when disabled or unreadable."""
    if not isinstance(response, dict):
        return 0
    result = response.get("result")
    if isinstance(result, bool):
        return 0
    try:
        port = int(result or 0)
    except (TypeError, ValueError):
        return 0
    return port if 1 <= port <= 65535 else 0


def negotiate(client: UtopiaClient, fallback_port: int) -> int:
    """Return the port the notification channel listens on.

    Uses the port the server reports as active. When it reports 0, or the
    query fails, asks the server to listen on *fallback_port* instead.
    Raises NotificationSetupError if that request fails too.
    """
    try:
        port = _active_port(client.get_web_socket_state())
    except TransportError as exc:
        log.warning("couldn't get websocket state, activating anyway: %s", exc)
        port = 0

    if port:
        log.debug("notifications already active on port %d", port)
        return port

    try:
        client.set_web_socket_state(enabled=True, port=str(fallback_port))
    except TransportError as exc:
        log.warning("couldn't set websocket state, notifications are disabled: %s", exc)
        raise NotificationSetupError(f"couldn't enable notifications on port {fallback_port}") from exc

    log.debug("notifications enabled on port %d", fallback_port)
    return fallback_port
