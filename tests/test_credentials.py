"""Credential store and request signer."""

import pickle

import pytest

from kraken_client.config import ExchangeCredentials
from kraken_client.infrastructure.auth import CredentialStore
from kraken_client.infrastructure.exceptions import (
    AuthError, InvalidSecretEncodingError, MissingCredentialsError
)

from fakes import (
    KRAKEN_TEST_BODY, KRAKEN_TEST_NONCE, KRAKEN_TEST_PATH, KRAKEN_TEST_SECRET, KRAKEN_TEST_SIGNATURE
)


class TestSigning:

    def test_matches_published_vector(self):
        store = CredentialStore("key", KRAKEN_TEST_SECRET)
        signature = store.sign(KRAKEN_TEST_PATH, KRAKEN_TEST_NONCE, KRAKEN_TEST_BODY)
        assert signature == KRAKEN_TEST_SIGNATURE

    def test_bytes_body_signs_like_str(self):
        store = CredentialStore("key", KRAKEN_TEST_SECRET)
        signature = store.sign(KRAKEN_TEST_PATH, KRAKEN_TEST_NONCE, KRAKEN_TEST_BODY.encode())
        assert signature == KRAKEN_TEST_SIGNATURE

    def test_deterministic(self):
        store = CredentialStore("key", KRAKEN_TEST_SECRET)
        first = store.sign("/0/private/Balance", 1, "nonce=1")
        assert store.sign("/0/private/Balance", 1, "nonce=1") == first

    def test_signature_depends_on_path_nonce_and_body(self):
        store = CredentialStore("key", KRAKEN_TEST_SECRET)
        base = store.sign("/0/private/Balance", 1, "nonce=1")
        assert store.sign("/0/private/Ledgers", 1, "nonce=1") != base
        assert store.sign("/0/private/Balance", 2, "nonce=1") != base
        assert store.sign("/0/private/Balance", 1, "nonce=2") != base


class TestConstruction:

    def test_empty_store_refuses_to_sign(self):
        store = CredentialStore()
        assert not store.has_credentials
        with pytest.raises(MissingCredentialsError):
            store.sign("/0/private/Balance", 1, "nonce=1")
        with pytest.raises(MissingCredentialsError):
            _ = store.api_key

    def test_key_without_secret_rejected(self):
        with pytest.raises(MissingCredentialsError):
            CredentialStore("key", None)

    def test_invalid_base64_rejected_at_construction(self):
        secret = "not base64 !!!"
        with pytest.raises(InvalidSecretEncodingError) as exc_info:
            CredentialStore("key", secret)
        assert isinstance(exc_info.value, AuthError)
        assert secret not in str(exc_info.value)
        assert exc_info.value.__cause__ is None

    def test_from_config(self):
        store = CredentialStore.from_config(ExchangeCredentials(api_key="k" * 12,
                                                                secret_key=KRAKEN_TEST_SECRET))
        assert store.has_credentials
        assert store.api_key == "k" * 12

    def test_from_empty_config(self):
        assert not CredentialStore.from_config(ExchangeCredentials()).has_credentials


class TestSecretHygiene:

    def test_repr_masks_key_and_hides_secret(self):
        store = CredentialStore("ABCDEFGHIJKLMNOP", KRAKEN_TEST_SECRET)
        text = repr(store)
        assert "ABCD...MNOP" in text
        assert "ABCDEFGHIJKLMNOP" not in text
        assert KRAKEN_TEST_SECRET not in text
        assert str(store) == text

    def test_no_secret_attribute_in_dict(self):
        store = CredentialStore("key", KRAKEN_TEST_SECRET)
        assert not hasattr(store, "__dict__")

    def test_cannot_be_pickled(self):
        store = CredentialStore("key", KRAKEN_TEST_SECRET)
        with pytest.raises(TypeError):
            pickle.dumps(store)

    def test_config_repr_masks_secret(self):
        credentials = ExchangeCredentials(api_key="ABCDEFGHIJKLMNOP", secret_key=KRAKEN_TEST_SECRET)
        assert KRAKEN_TEST_SECRET not in repr(credentials)
