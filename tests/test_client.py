import textwrap
from unittest.mock import AsyncMock

import pytest

from kraken_client import KrakenClient
from kraken_client.config import ExchangeConfig, ExchangeCredentials
from kraken_client.exchanges.kraken.structs import WebSocketsToken
from kraken_client.infrastructure.exceptions import ConfigurationError, MissingCredentialsError
from kraken_client.infrastructure.logging import LoggerFactory
from kraken_client.infrastructure.networking.websocket import SubscriptionAction

from fakes import FakeHttpSession, KRAKEN_TEST_SECRET


def private_config():
    return ExchangeConfig(credentials=ExchangeCredentials(api_key="test-api-key-123",
                                                          secret_key=KRAKEN_TEST_SECRET))


class TestKrakenClient:

    @pytest.mark.asyncio
    async def test_public_only_client(self):
        async with KrakenClient(session=FakeHttpSession()) as client:
            assert not client.has_credentials
            with pytest.raises(MissingCredentialsError):
                client.private_websocket()

    def test_invalid_config(self):
        config = ExchangeConfig(credentials=ExchangeCredentials(api_key="only-key"))
        with pytest.raises(ConfigurationError):
            KrakenClient(config)

    @pytest.mark.asyncio
    async def test_websocket_sessions_use_configured_urls(self):
        client = KrakenClient(private_config(), session=FakeHttpSession())
        try:
            public = client.websocket()
            private = client.private_websocket()

            assert public.name == "public"
            assert private.name == "private"
            assert public._connection_strategy.url == "wss://ws.kraken.com"
            assert private._connection_strategy.url == "wss://ws-auth.kraken.com"
        finally:
            await client.close()

        assert public.is_closed
        assert private.is_closed

    @pytest.mark.asyncio
    async def test_private_websocket_fetches_token_over_rest(self):
        client = KrakenClient(private_config(), session=FakeHttpSession())
        client.private.get_websockets_token = AsyncMock(
            return_value=WebSocketsToken(token="ws-token", expires=900)
        )
        try:
            session = client.private_websocket()
            strategy = session._subscription_strategy
            await strategy.prepare()

            message = strategy.create_subscription_message(
                SubscriptionAction.SUBSCRIBE, "openOrders", [None], {})
            assert message["subscription"]["token"] == "ws-token"
            client.private.get_websockets_token.assert_awaited_once()
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_close_leaves_injected_http_session_open(self):
        http_session = FakeHttpSession()
        client = KrakenClient(session=http_session)
        await client.close()
        assert not http_session.closed

    @pytest.mark.asyncio
    async def test_from_config_file_installs_logging_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(textwrap.dedent("""
            logging:
              environment: test
              console:
                min_level: ERROR
              propagate: false
              redact_keys: [otp]
        """))
        previous = LoggerFactory.get_default_config()
        try:
            client = KrakenClient.from_config_file(path, env_path=tmp_path / "missing.env")
            try:
                installed = LoggerFactory.get_default_config()
                assert installed.console.min_level == "ERROR"
                assert installed.redact_keys == ["otp"]
                assert client.logger._redact_keys == ("otp",)
            finally:
                await client.close()
        finally:
            LoggerFactory.configure(previous)
