"""FastAPI main application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

import httpx

from .config import settings
from .agent.llm import AnthropicProvider
from .agent.loop import AgentLoop
from .db import DatabaseConnection, ClientRepository
from .services import AskService, ConversationStore
from .tools import (
    GoogleOAuthSession,
    SearchConsoleAdapter,
    AnalyticsDataAdapter,
    ToolExecutor,
    default_registry
)
from .utils.logger import init_app_logger, mask_secret
from .api import deps
from .api.v1 import ask, conversations


# Initialize logger
logger = init_app_logger(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    # Startup
    logger.info("=" * 70)
    logger.info("Starting Insight Agent...")
    logger.info("=" * 70)

    logger.info("")
    logger.info("📡 Server Configuration:")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")
    logger.info(f"  Debug: {settings.debug}")
    logger.info(f"  Log Level: {settings.log_level}")
    logger.info(f"  Log File: {settings.log_file}")
    logger.info(f"  Database: {settings.database_path}")

    logger.info("")
    logger.info("🤖 Agent Configuration:")
    logger.info(f"  Model: {settings.anthropic_model}")
    logger.info(f"  API Key: {mask_secret(settings.anthropic_api_key)}")
    logger.info(f"  Max Iterations: {settings.agent_max_iterations}")
    logger.info(f"  Model Timeout: {settings.model_timeout_seconds}s")
    logger.info(f"  Tool Timeout: {settings.tool_timeout_seconds}s")

    logger.info("")
    logger.info("📊 Analytics Configuration:")
    logger.info(f"  Google OAuth: {'connected' if settings.google_oauth_configured() else 'not connected'}")
    logger.info(f"  Refresh Token: {mask_secret(settings.google_refresh_token)}")
    logger.info(f"  Operator Keys: {len(settings.get_operator_api_keys())}")

    db_conn = DatabaseConnection(settings.database_path)
    http_client = httpx.AsyncClient(timeout=settings.tool_timeout_seconds)

    oauth = GoogleOAuthSession.from_settings(settings, http_client)
    registry = default_registry()
    executor = ToolExecutor(
        search_adapter=SearchConsoleAdapter(oauth, http_client),
        analytics_adapter=AnalyticsDataAdapter(oauth, http_client),
        timeout_seconds=settings.tool_timeout_seconds,
        default_row_limit=settings.default_row_limit
    )
    agent_loop = AgentLoop(
        provider=AnthropicProvider.from_settings(settings),
        registry=registry,
        executor=executor,
        max_iterations=settings.agent_max_iterations
    )
    store = ConversationStore(db_conn)

    logger.info(f"  Tools: {', '.join(registry.names())}")

    # Set collaborators in API modules
    deps.operator_api_keys = settings.get_operator_api_keys()
    conversations.store = store
    ask.ask_service = AskService(
        store=store,
        clients=ClientRepository(db_conn.conn),
        loop=agent_loop,
        data_lag_days=settings.data_lag_days
    )

    logger.info("")
    logger.info("=" * 70)
    logger.info("✅ Insight Agent started successfully!")
    logger.info(f"📍 Access at: http://{settings.host}:{settings.port}")
    logger.info(f"📚 API Docs: http://{settings.host}:{settings.port}/docs")
    logger.info("=" * 70)

    yield

    # Shutdown
    logger.info("Shutting down Insight Agent...")
    await http_client.aclose()
    db_conn.close()
    logger.info("✅ Insight Agent shut down successfully")


# Create FastAPI application
app = FastAPI(
    title="Insight Agent",
    description="Tool-augmented analytics Q&A for agency operators",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify allowed origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(ask.router)
app.include_router(conversations.router)


@app.get("/health")
async def health():
    """
    Simple health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": "Insight Agent"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "insight_agent.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
