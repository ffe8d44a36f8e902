# Standard library imports
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from uuid import UUID

# Third-party imports
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

# Local application imports
from waterwatch.api import router as api_router
from waterwatch.api.internal.utils.exceptions import register_exception_handlers
from waterwatch.core.backend import BackendClient
from waterwatch.core.events import EventChannel
from waterwatch.core.monitoring import get_logger
from waterwatch.services.auth import AuthEvent, AuthGate, ensure_admin_account
from waterwatch.services.chat.model_client import ChatModel, GenerativeModelClient
from waterwatch.services.chat.registry import ConversationRegistry
from waterwatch.services.geo import IpGeolocationProvider, PositionProvider, get_client_ip
from waterwatch.services.issues import IssueStore, StoreRegistry
from waterwatch.services.issues.issue_source import SqlIssueSource
from waterwatch.services.weather import WeatherClient
from waterwatch.settings import settings

# Set up the main application logger
logger = get_logger("waterwatch")


if settings.ENVIRONMENT == "production" and settings.SENTRY_DSN:
    logger.info(f"Initializing Sentry in {settings.ENVIRONMENT} environment")
    # The logging integration is set up in core/monitoring/sentry.py; add the FastAPI one here
    client = sentry_sdk.get_client()
    if not client.is_active():
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            integrations=[FastApiIntegration()],
            environment=settings.ENVIRONMENT,
            traces_sample_rate=0.2,
        )
    else:
        integrations = list(client.options.get("integrations", []))
        if not any(isinstance(integration, FastApiIntegration) for integration in integrations):
            logger.info("Adding FastAPI integration to existing Sentry configuration")
            integrations.append(FastApiIntegration())
            sentry_sdk.init(
                dsn=client.options.get("dsn"),
                integrations=integrations,
                environment=client.options.get("environment", settings.ENVIRONMENT),
                traces_sample_rate=client.options.get("traces_sample_rate", 0.2),
            )


def custom_generate_unique_id(route: APIRoute) -> str:
    # Handle routes without tags
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name or "unnamed_route"


def default_position_provider(request: Request) -> PositionProvider:
    return IpGeolocationProvider(get_client_ip(request))


def create_app(
    backend_factory: Callable[[], BackendClient] | None = None,
    chat_model: ChatModel | None = None,
    weather_client: WeatherClient | None = None,
    position_provider_factory: Callable[[Request], PositionProvider] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application"""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting up FastAPI application")

        backend = (backend_factory or BackendClient.from_settings)()
        await backend.open(create_schema=settings.CREATE_SCHEMA_ON_STARTUP)

        weather = weather_client or WeatherClient()
        events = EventChannel()
        auth_gate = AuthGate()

        def build_store(user_id: UUID | None, is_admin: bool) -> IssueStore:
            return IssueStore(SqlIssueSource(backend), user_id=user_id, is_admin=is_admin, weather_client=weather)

        stores = StoreRegistry(build_store)
        conversations = ConversationRegistry(chat_model or GenerativeModelClient(), events)

        async def on_auth_change(event: AuthEvent, user_id: UUID) -> None:
            if event == AuthEvent.SIGNED_OUT:
                closed = await stores.close_for_user(user_id)
                logger.info(f"Closed {closed} map session(s) after sign-out of {user_id}")

        auth_gate.on_auth_state_change(on_auth_change)

        async with backend.session_factory() as db:
            admin = await ensure_admin_account(db)
            logger.info(f"Admin user ready with ID: {admin.id}")

        app.state.backend = backend
        app.state.events = events
        app.state.auth_gate = auth_gate
        app.state.stores = stores
        app.state.conversations = conversations
        app.state.position_provider_factory = position_provider_factory or default_position_provider

        yield

        logger.info("Shutting down FastAPI application")
        await stores.close_all()
        conversations.close()
        await backend.close()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Community water issue reporting, mapping and assistance",
        openapi_url=f"{settings.API_V1_STR}/openapi.json" if settings.ENVIRONMENT != "production" else None,
        docs_url=f"{settings.API_V1_STR}/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url=f"{settings.API_V1_STR}/redoc" if settings.ENVIRONMENT != "production" else None,
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    @app.get("/health")
    async def health_check(request: Request) -> dict:
        backend: BackendClient | None = getattr(request.app.state, "backend", None)
        return {
            "status": "healthy",
            "version": "1.0.0",
            "database": "connected" if backend is not None and backend.is_open else "disconnected",
        }

    app.include_router(api_router)

    return app


# Create the app instance
app = create_app()
