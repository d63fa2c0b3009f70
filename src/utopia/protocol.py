"""Shared constants and the request envelope for client ↔ Utopia communication."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_HOST = "127.0.0.1"
DEFAULT_API_PORT = 20000
DEFAULT_WS_PORT = 20001

# REST endpoint
EP_API = "/api/1.0"

# WebSocket
WS_NOTIFICATIONS = "/UtopiaWSS"

# Method sent when none is given
DEFAULT_METHOD = "getSystemInfo"

# Notification event types
EVT_ANY = "any"
EVT_NEW_OUTGOING_CHANNEL_MESSAGE = "newOutgoingChannelMessage"
EVT_NEW_CHANNEL_MESSAGE = "newChannelMessage"
EVT_NEW_OUTGOING_INSTANT_MESSAGE = "newOutgoingInstantMessage"
EVT_NEW_INSTANT_MESSAGE = "newInstantMessage"
EVT_MESSAGE = "message"
EVT_CHANNEL_JOIN_CHANGED = "channelJoinChanged"
EVT_NEW_PAYMENT_TRANSFER = "newPaymentTransfer"
EVT_NEW_EMAIL = "newEmail"
EVT_OUTGOING_MESSAGE = "outgoingMessage"
EVT_INCOMING_MESSAGE = "incomingMessage"


class Envelope(BaseModel):
    """Body of every API request."""

    model_config = ConfigDict(frozen=True)

    token: str
    method: str = DEFAULT_METHOD
    params: dict[str, Any] = Field(default_factory=dict)
