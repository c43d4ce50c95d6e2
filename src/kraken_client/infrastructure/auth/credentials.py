import base64
import binascii
import hashlib
import hmac
from typing import Optional, Union

from ..exceptions.exchange import InvalidSecretEncodingError, MissingCredentialsError


class CredentialStore:
    """
    Immutable holder of the API key and decoded secret, and the only place that
    computes request signatures.

    The secret is base64-decoded once at construction; the decoded bytes never
    leave this object. A store built without a key and secret is empty and
    refuses to sign.
    """

    __slots__ = ("_api_key", "_secret")

    def __init__(self, api_key: Optional[str] = None, api_secret: Optional[str] = None):
        if not api_key and not api_secret:
            self._api_key = None
            self._secret = None
            return
        if not api_key or not api_secret:
            raise MissingCredentialsError("Both API key and API secret are required")

        try:
            secret = base64.b64decode(api_secret, validate=True)
        except (binascii.Error, ValueError):
            # Never chain: the decode error message can echo secret characters
            raise InvalidSecretEncodingError("API secret is not valid base64") from None

        self._api_key = api_key
        self._secret = secret

    @classmethod
    def from_config(cls, credentials) -> "CredentialStore":
        """Build from an ``ExchangeCredentials`` struct."""
        return cls(credentials.api_key or None, credentials.secret_key or None)

    @property
    def has_credentials(self) -> bool:
        return self._secret is not None

    @property
    def api_key(self) -> str:
        if self._api_key is None:
            raise MissingCredentialsError("No API credentials configured")
        return self._api_key

    def sign(self, path: str, nonce: int, body: Union[str, bytes]) -> str:
        """
        Kraken API-Sign value for one request.

        base64(HMAC-SHA512(secret, path + SHA256(nonce + body)))

        Args:
            path: URI path, e.g. "/0/private/Balance"
            nonce: Nonce also present in ``body``
            body: url-encoded POST body exactly as sent
        """
        if self._secret is None:
            raise MissingCredentialsError("No API credentials configured")

        if isinstance(body, str):
            body = body.encode("utf-8")

        inner = hashlib.sha256(str(nonce).encode("utf-8") + body).digest()
        mac = hmac.new(self._secret, path.encode("utf-8") + inner, hashlib.sha512)
        return base64.b64encode(mac.digest()).decode("ascii")

    def get_preview(self) -> str:
        """Get safe preview of the API key for logging."""
        if not self._api_key:
            return "Not configured"
        if len(self._api_key) > 8:
            return f"{self._api_key[:4]}...{self._api_key[-4:]}"
        return "***"

    def __repr__(self) -> str:
        return f"CredentialStore(api_key={self.get_preview()!r})"

    __str__ = __repr__

    def __reduce__(self):
        raise TypeError("CredentialStore cannot be pickled")
