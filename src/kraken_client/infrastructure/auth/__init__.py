from .credentials import CredentialStore
from .nonce import NonceGenerator

__all__ = ['CredentialStore', 'NonceGenerator']
