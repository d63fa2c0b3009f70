"""utopia — client SDK for the Utopia local JSON-RPC API."""

from utopia.client.client import Endpoint, UtopiaClient
from utopia.client.notifications import Event, EventCategory, EventStream, classify
from utopia.errors import (
    ChannelClosedError,
    FileAccessError,
    InvalidCredentialError,
    MissingParameterError,
    TransportError,
    UtopiaError,
)
from utopia.methods import list_methods

__all__ = [
    "UtopiaClient",
    "Endpoint",
    "Event",
    "EventCategory",
    "EventStream",
    "classify",
    "list_methods",
    "UtopiaError",
    "InvalidCredentialError",
    "TransportError",
    "MissingParameterError",
    "ChannelClosedError",
    "FileAccessError",
]
