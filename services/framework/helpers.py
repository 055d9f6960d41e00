import importlib
import inspect
from contextlib import asynccontextmanager

from fastapi import Depends, HTTPException, Request
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from services.framework.responses import INVALID_PAYLOAD
from services.framework.utils import build_query_dependency, convert_path_param


async def _run(handler_fn, args, kwargs):
    """
    Helper to run a handler function with the correct arguments.
    Plain functions are executed in the worker thread pool so a blocking
    database call only holds up its own request.
    """
    if inspect.iscoroutinefunction(handler_fn):
        return await handler_fn(*args, **kwargs)
    return await run_in_threadpool(handler_fn, *args, **kwargs)


def resolve_handler(handler_path: str):
    """
    Resolve a handler function from a string path, e.g. "services.recipes.crud.get_recipe".
    """
    module_name, func_name = handler_path.rsplit(".", 1)
    module = importlib.import_module(module_name)
    return getattr(module, func_name)


def convert_path_params(route, request: Request) -> list:
    """
    Converts path params in declaration order using the route's typed placeholders.
    """
    args = []
    for name, value in request.path_params.items():
        param = route.path_params.get(name)
        args.append(convert_path_param(value, param) if param else value)
    return args


@asynccontextmanager
async def decoded_body(request: Request, request_model):
    """
    Decode the JSON body into `request_model`.
    The request is released once decoding is done, whatever the outcome.
    """
    try:
        try:
            data = request_model.model_validate_json(await request.body())
        except ValidationError:
            raise HTTPException(status_code=400, detail=INVALID_PAYLOAD) from None
        yield data
    finally:
        await request.close()


def build_body_handler(route, handler_fn, get_db):
    """
    Helper to build an endpoint for routes that expect a request body.
    Path params are validated first, then the body is decoded, and then the
    handler is called with (path params..., body, db).
    """

    async def endpoint(request: Request, db=Depends(get_db)):
        args = convert_path_params(route, request)

        async with decoded_body(request, route.request_model) as data:
            args.append(data)

        args.append(db)
        return await _run(handler_fn, args, {})

    return endpoint


def build_query_handler(route, handler_fn, get_db, qp_dep):
    """
    Helper to build an endpoint for routes that do not expect a request body.
    Query/form params are forwarded to the handler as keyword arguments.
    """

    async def endpoint(
        request: Request,
        db=Depends(get_db),
        qp: dict = Depends(qp_dep),
    ):
        args = convert_path_params(route, request)
        args.append(db)
        return await _run(handler_fn, args, qp)

    return endpoint


def make_endpoint(route, handler_fn, get_db):
    """
    Helper to build an endpoint for a given route.
    """
    if route.request_model:
        return build_body_handler(route, handler_fn, get_db)

    qp_dep = build_query_dependency(route)
    return build_query_handler(route, handler_fn, get_db, qp_dep)
