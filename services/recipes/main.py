import os

import uvicorn
from fastapi import FastAPI

from services.config import get_config_for_service
from services.framework.app import create_microservice
from services.recipes.db import make_engine, make_session_factory
from services.recipes.dependencies import session_dependency
from services.recipes.models import create_tables


def create_app(engine=None) -> FastAPI:
    """
    Build the recipes service. Without an explicit engine one is created from
    the configured database URL. Tables are created when the app starts.
    """
    if engine is None:
        engine = make_engine(get_config_for_service("recipes").db)

    get_db = session_dependency(make_session_factory(engine))

    return create_microservice(
        "recipes", get_db, on_startup=[lambda: create_tables(engine)]
    )


def run():
    uvicorn.run(
        create_app(),
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
    )
