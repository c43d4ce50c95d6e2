from .rest_factory import create_rest_manager
from .kraken_rest_public import KrakenPublicRest
from .kraken_rest_private import KrakenPrivateRest

__all__ = ['create_rest_manager', 'KrakenPublicRest', 'KrakenPrivateRest']
