from fastapi import FastAPI
from recipe_ingest.routers import health, recipes
from recipe_ingest.core.logging import setup_logging
from recipe_ingest.core.middleware import RequestLoggingMiddleware


def create_app() -> FastAPI:
    app = FastAPI(title="Recipe Ingest")
    app.include_router(recipes.router)
    app.include_router(health.router)

    setup_logging()

    app.add_middleware(RequestLoggingMiddleware)

    return app

app = create_app()
