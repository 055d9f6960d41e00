from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from services.config import get_config, get_config_for_service
from services.framework.helpers import make_endpoint, resolve_handler
from services.framework.logging import log_event
from services.framework.responses import JSONResponse, install_error_handlers
from services.framework.tracing import tracing_middleware


def create_microservice(service_name: str, get_db, on_startup=None) -> FastAPI:
    """
    Build a FastAPI microservice dynamically from config.yaml.
    `get_db` is the dependency yielding a database session per request,
    `on_startup` an optional list of callables run once when the app starts.
    """

    app_config = get_config()
    service = get_config_for_service(service_name)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        for hook in on_startup or []:
            hook()
        yield

    app = FastAPI(
        title=service.title,
        version=service.version,
        openapi_url="/openapi.json",
        default_response_class=JSONResponse,
        lifespan=lifespan,
    )

    router = APIRouter(prefix=app_config.urlPrefix)

    # Register all routes listed under this service config
    for route in service.routes:
        handler_fn = resolve_handler(route.handler)
        endpoint = make_endpoint(route, handler_fn, get_db)

        router.add_api_route(
            route.path,
            endpoint,
            methods=[route.method.upper()],
            response_model=route.response_model,
            status_code=route.status_code,
            summary=route.description,
            tags=route.tags or [service.name],
            name=f"{route.method.lower()}_{handler_fn.__name__}",
        )

        log_event(
            "startup",
            action="route_registration",
            service_name=service_name,
            method=route.method.upper(),
            path=f"{app_config.urlPrefix}{route.path}",
            handler=route.handler,
        )

    app.include_router(router)
    install_error_handlers(app)
    app.middleware("http")(tracing_middleware)

    @app.get("/healthz")
    async def health():
        return {"status": "ok"}

    return app
