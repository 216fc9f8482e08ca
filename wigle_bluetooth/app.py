from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from wigle_bluetooth.settings import settings

from wigle_bluetooth.api.http.routes_health import router as health_router
from wigle_bluetooth.api.ws.events_ws import events_ws


# ------------------------------------------------------------
# App factory
# ------------------------------------------------------------
def create_app(orchestrator) -> FastAPI:
    """
    Read-only status surface for a running logger.
    The orchestrator is owned by the CLI; the app never starts or stops it.
    """
    app = FastAPI(title=settings.APP_NAME)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.state.orchestrator = orchestrator

    # --------------------------------------------------------
    # HTTP API ROUTES
    # --------------------------------------------------------
    app.include_router(health_router)

    # --------------------------------------------------------
    # WEBSOCKET ROUTES
    # --------------------------------------------------------
    @app.websocket("/ws/events")
    async def ws_events(websocket: WebSocket):
        await events_ws(websocket, orchestrator)

    return app
