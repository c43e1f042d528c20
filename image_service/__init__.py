from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from image_service.api.errors import register_exception_handlers
from image_service.api.routes import health, tasks
from image_service.config import Settings, settings
from image_service.container import build_container
from image_service.logging_config import setup_logging

__all__ = ["__version__", "app", "create_app"]

__version__ = "0.1.0"


def create_app(config: Settings = settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # start
        setup_logging(config.log_level)
        container = build_container(config)
        await container.start()
        app.state.container = container
        yield
        # shutdown
        await container.aclose()

    app = FastAPI(title=config.app_name, version=__version__, lifespan=lifespan)
    app.include_router(health.router)
    app.include_router(tasks.router, prefix=config.api_prefix)
    app.mount(
        "/output",
        StaticFiles(directory=Path(config.output_dir), check_dir=False),
        name="output",
    )
    register_exception_handlers(app)
    return app


app = create_app()
