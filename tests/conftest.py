"""Pytest configuration and shared fixtures"""

import httpx
import pytest

from shopify_mcp.config import Config
from shopify_mcp.tools import ToolContext

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)

SETTINGS_ENV_VARS = (
    "SHOPIFY_ACCESS_TOKEN",
    "SHOPIFY_CLIENT_ID",
    "SHOPIFY_CLIENT_SECRET",
    "MYSHOPIFY_DOMAIN",
    "SHOPIFY_API_VERSION",
    "TIMEOUT",
    "RETRY_ATTEMPTS",
    "SSL_VERIFY",
    "MCP_TOOL_PACKAGE",
    "TOOL_PACKAGES_FILE",
    "LOG_LEVEL",
    "DEBUG_MODE",
)

TEST_DOMAIN = "test-store.myshopify.com"
TEST_TOKEN = "shpat_0123456789abcdef"


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Clear settings environment variables and isolate from any .env file.

    This ensures Config tests see the true defaults without interference
    from the user's shell or working directory.
    """
    for key in SETTINGS_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture
def config(clean_env):
    """Config with a static token against a test store"""
    return Config(MYSHOPIFY_DOMAIN=TEST_DOMAIN, SHOPIFY_ACCESS_TOKEN=TEST_TOKEN)


@pytest.fixture
def client_credentials_config(clean_env):
    """Config using the client-credentials flow"""
    return Config(
        MYSHOPIFY_DOMAIN=TEST_DOMAIN,
        SHOPIFY_CLIENT_ID="client-id",
        SHOPIFY_CLIENT_SECRET="client-secret-value",
    )


class RecordingSleep:
    """Stand-in for asyncio.sleep that returns immediately and records delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep():
    return RecordingSleep()


class FakeGraphQLClient:
    """Records query/mutate calls and replays canned responses in order.

    An Exception in the response list is raised instead of returned.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    async def query(self, document, variables=None):
        return self._next("query", document, variables)

    async def mutate(self, document, variables=None):
        return self._next("mutate", document, variables)

    def _next(self, kind, document, variables):
        self.calls.append((kind, document, variables))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_client():
    return FakeGraphQLClient()


@pytest.fixture
def tool_context(config, fake_client):
    return ToolContext(config=config, client=fake_client)


def mock_http_client(handler) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler(request)``"""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def connection(*nodes, has_next_page=False):
    """Build a GraphQL connection payload from plain nodes"""
    return {
        "edges": [{"node": node} for node in nodes],
        "pageInfo": {
            "hasNextPage": has_next_page,
            "hasPreviousPage": False,
            "startCursor": "start" if nodes else None,
            "endCursor": "end" if nodes else None,
        },
    }
