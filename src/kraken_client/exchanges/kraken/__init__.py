from .structs import ServerTime, SystemStatus, WebSocketsToken

__all__ = ['ServerTime', 'SystemStatus', 'WebSocketsToken']
