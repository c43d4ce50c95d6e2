from typing import Any, Dict
from urllib.parse import urlencode

from kraken_client.infrastructure.auth import CredentialStore, NonceGenerator
from kraken_client.infrastructure.networking.http import AuthStrategy, AuthenticationData, RequestSpec
from kraken_client.infrastructure.logging import get_exchange_logger, LoggingTimer
from .request import format_params


class KrakenAuthStrategy(AuthStrategy):
    """
    Kraken private endpoint signing.

    The nonce goes first into the form body, the body is signed as sent, and
    ``API-Key``/``API-Sign`` headers carry the credentials.
    """

    def __init__(self, credentials: CredentialStore, nonce_generator: NonceGenerator, logger=None):
        self.credentials = credentials
        self.nonce_generator = nonce_generator
        self.logger = logger or get_exchange_logger('kraken', 'rest.auth')

        self.logger.debug("Kraken auth strategy initialized",
                          api_key=credentials.get_preview(),
                          api_key_configured=credentials.has_credentials)

    @property
    def has_credentials(self) -> bool:
        return self.credentials.has_credentials

    def sign_request(self, request: RequestSpec, params: Dict[str, Any]) -> AuthenticationData:
        with LoggingTimer(self.logger, "kraken_auth_signature_generation", path=request.path):
            nonce = self.nonce_generator.next()
            body = urlencode({'nonce': nonce, **format_params(params)})
            signature = self.credentials.sign(request.path, nonce, body)

        self.logger.metric("rest_auth_signatures_generated", 1, path=request.path)

        return AuthenticationData(
            headers={
                'API-Key': self.credentials.api_key,
                'API-Sign': signature,
                'Content-Type': 'application/x-www-form-urlencoded; charset=utf-8',
            },
            params={},
            data=body,
        )
