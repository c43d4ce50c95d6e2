"""
Kraken response shapes the client itself depends on.

Everything else is returned to callers as decoded JSON.
"""

import msgspec


class ServerTime(msgspec.Struct):
    unixtime: int
    rfc1123: str


class SystemStatus(msgspec.Struct):
    status: str
    timestamp: str


class WebSocketsToken(msgspec.Struct):
    token: str
    expires: int
