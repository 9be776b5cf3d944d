from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from pickleball.api.endpoints import bracket as bracket_endpoints
from pickleball.api.endpoints import matches as match_endpoints
from pickleball.api.endpoints import scheduling as scheduling_endpoints
from pickleball.api.endpoints import tournaments as tournament_endpoints
from pickleball.api.errors import register_error_handlers
from pickleball.core.config import Settings, settings as default_settings
from pickleball.core.logging_config import configure_logging
from pickleball.services.container import ServiceContainer, build_services


def create_app(settings: Optional[Settings] = None, services: Optional[ServiceContainer] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.services.close()

    app = FastAPI(title=settings.APP_TITLE, lifespan=lifespan)
    app.state.services = services or build_services(settings)

    app.include_router(tournament_endpoints.router, prefix="/tournaments", tags=["Tournaments"])
    app.include_router(scheduling_endpoints.router, prefix="/tournaments", tags=["Teams & Scheduling"])
    app.include_router(bracket_endpoints.router, prefix="/tournaments", tags=["Standings & Bracket"])
    app.include_router(match_endpoints.router, prefix="/matches", tags=["Matches"])
    register_error_handlers(app)

    @app.get("/")
    def read_root():
        return {"message": settings.APP_TITLE}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("pickleball.main:app", host="0.0.0.0", port=8000, reload=True)
