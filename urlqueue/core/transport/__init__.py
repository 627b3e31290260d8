"""
Transport Module
================

The transport contract consumed by the dispatch queue and its aiohttp implementation.
"""

from .base import Transport, TransportResult
from .aiohttp_transport import AiohttpTransport

__all__ = ["Transport", "TransportResult", "AiohttpTransport"]
