"""
Example application.

    pip install -e ".[examples]"
    python examples/app.py
    curl localhost:4242/foobar/123
"""

import structlog
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from structlog_starlette import (
    Config,
    RequestLoggingMiddleware,
    add_custom_attributes,
    report_error,
    setup_logging,
)

setup_logging(level="INFO", json_output=False)
logger = structlog.get_logger("http").bind(env="production")


async def home(request):
    return PlainTextResponse("Hello, World!")


async def foobar(request):
    add_custom_attributes(request, foo="bar")
    return PlainTextResponse("Hello, World!")


async def error(request):
    raise HTTPException(status_code=500, detail="A simulated error")


# HTTPException raised by a route is rendered before it reaches the middleware
async def http_error(request, exc):
    report_error(request, exc)
    return PlainTextResponse(exc.detail, status_code=exc.status_code, headers=exc.headers)


app = Starlette(
    routes=[
        Route("/", home),
        Route("/foobar/{id}", foobar),
        Route("/error", error),
    ],
    middleware=[
        # Config(with_request_body=True, with_response_body=True,
        #        with_request_header=True, with_response_header=True)
        Middleware(RequestLoggingMiddleware, logger=logger, config=Config()),
    ],
    exception_handlers={HTTPException: http_error},
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=4242)
