from contextlib import asynccontextmanager
from typing import Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from regdesk import __version__
from regdesk.core.config import Settings, get_settings
from regdesk.core.container import build_container
from regdesk.core.logging import configure_logging
from regdesk.core.registry import DomainModule, ModuleRegistry
from regdesk.infrastructure.database import init_db
from regdesk.interfaces.http.errors import register_exception_handlers
from regdesk.modules import DOMAIN_MODULES


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.container
    await init_db(container.engine)
    yield
    await container.dispose()


def create_app(
    settings: Optional[Settings] = None,
    *,
    modules: Optional[Sequence[DomainModule]] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.logging.level)

    app = FastAPI(
        title=settings.project_name,
        description="Team event registration and payment service",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.container = build_container(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app, debug=settings.debug)

    registry = ModuleRegistry(
        DOMAIN_MODULES if modules is None else modules,
        missing_descriptor=settings.modules.missing_descriptor,
    )
    app.state.registration_report = registry.register_all(app, prefix=settings.api_prefix)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "regdesk.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload,
    )


if __name__ == "__main__":
    run()
