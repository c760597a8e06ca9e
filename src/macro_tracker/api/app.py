"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from macro_tracker.api.goals import router as goals_router
from macro_tracker.api.models import SignInRequest, SignInResponse
from macro_tracker.api.tracking import ledger_view
from macro_tracker.api.tracking import router as tracking_router
from macro_tracker.app_logging import configure_logging
from macro_tracker.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        scope = app.state.container.session_scope
        scope.start()
        if scope.current is not None:
            await scope.current.ledger.load_today()
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(tracking_router)
    app.include_router(goals_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/auth/sign-in")
    async def sign_in(body: SignInRequest, request: Request) -> SignInResponse:
        """Sign in and load today's ledger for the user."""
        state_container: AppContainer = request.app.state.container
        user_id = state_container.identity_provider.sign_in(body.email, body.password)
        if user_id is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign-in failed"
            )
        scope = state_container.session_scope
        scope.handle_identity(user_id)
        context = scope.current
        if context is None:
            return SignInResponse(user_id=user_id, ledger=None)
        await context.ledger.load_today()
        logger.info("User %s signed in", user_id[:8])
        return SignInResponse(
            user_id=user_id,
            ledger=ledger_view(context.ledger.ledger, state_container.goals),
        )

    @app.post("/auth/sign-out")
    async def sign_out(request: Request) -> dict[str, str]:
        """Flush pending writes and end the session."""
        state_container: AppContainer = request.app.state.container
        scope = state_container.session_scope
        if scope.current is not None:
            await scope.current.flush()
        state_container.identity_provider.sign_out()
        scope.handle_identity(None)
        return {"status": "ok"}

    return app
