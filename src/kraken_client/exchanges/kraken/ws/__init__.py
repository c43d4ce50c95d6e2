from .ws_factory import create_public_session, create_private_session

__all__ = ['create_public_session', 'create_private_session']
