"""Shared pytest fixtures."""

import pytest
from httpx import AsyncClient, ASGITransport
from fastapi import FastAPI

from insight_agent.agent.loop import AgentLoop
from insight_agent.api import deps
from insight_agent.api.v1 import ask, conversations
from insight_agent.db import DatabaseConnection, ClientRepository
from insight_agent.db.database_models import ClientDO
from insight_agent.services import AskService, ConversationStore
from insight_agent.tools import ToolExecutor, default_registry

from insight_fakes import FakeAdapter, ScriptedProvider, final_turn


OPERATOR_KEY = "operator-test-key"


@pytest.fixture
def db_conn(tmp_path):
    """Provide a fresh database connection."""
    db = DatabaseConnection(str(tmp_path / "test.db"))
    yield db
    db.close()


@pytest.fixture
def store(db_conn):
    """Provide a ConversationStore."""
    return ConversationStore(db_conn)


@pytest.fixture
def client_repo(db_conn):
    """Provide a ClientRepository."""
    return ClientRepository(db_conn.conn)


@pytest.fixture
def acme(client_repo):
    """A client with both data sources configured."""
    client = ClientDO(
        id="acme",
        name="Acme Corp",
        gsc_site_url="sc-domain:acme.com",
        ga4_property_id="123456",
        analytics_summary="Organic traffic up 12% MoM.",
        snapshot_insights={"takeaways": "Blog drives signups"}
    )
    client_repo.upsert(client)
    return client


@pytest.fixture
def search_adapter():
    return FakeAdapter(rows=[{"keys": ["shoes"], "clicks": 10}])


@pytest.fixture
def analytics_adapter():
    return FakeAdapter(rows=[{"dimensions": [], "metrics": [42.0]}])


@pytest.fixture
def executor(search_adapter, analytics_adapter):
    return ToolExecutor(search_adapter, analytics_adapter, timeout_seconds=5)


@pytest.fixture
def provider():
    """Scripted model; tests replace ``provider.turns``."""
    return ScriptedProvider([final_turn("Hello.")])


@pytest.fixture
def agent_loop(provider, executor):
    return AgentLoop(provider=provider, registry=default_registry(), executor=executor)


@pytest.fixture
def ask_service(store, client_repo, agent_loop):
    return AskService(store=store, clients=client_repo, loop=agent_loop)


@pytest.fixture
async def api_client(ask_service, store):
    """Async HTTP client against a test app with injected services."""
    ask.ask_service = ask_service
    conversations.store = store
    deps.operator_api_keys = [OPERATOR_KEY]

    # Test app without lifespan
    test_app = FastAPI(title="Insight Agent Test")
    test_app.include_router(ask.router)
    test_app.include_router(conversations.router)

    transport = ASGITransport(app=test_app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": f"Bearer {OPERATOR_KEY}"}
    ) as ac:
        yield ac

    ask.ask_service = None
    conversations.store = None
    deps.operator_api_keys = None
