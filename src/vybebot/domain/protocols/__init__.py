"""Re-exports dos Protocolos de domínio para uso por Application."""

from __future__ import annotations

from vybebot.domain.protocols.fetch_client import (
    DetectedIntent,
    FetchClientProtocol,
    IntentDetectorProtocol,
)
from vybebot.domain.protocols.session_store import AsyncSessionStoreProtocol
from vybebot.domain.protocols.transport import (
    Button,
    IncomingUpdate,
    Keyboard,
    TransportProtocol,
)

__all__ = [
    "AsyncSessionStoreProtocol",
    "Button",
    "DetectedIntent",
    "FetchClientProtocol",
    "IncomingUpdate",
    "IntentDetectorProtocol",
    "Keyboard",
    "TransportProtocol",
]
