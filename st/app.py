import logging
import os
import time
from typing import Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from fastapi.templating import Jinja2Templates

from st import __version__
from st.errors import StorageError, TokenGenerationError, ValidationError
from st.store import LinkStore
from st.tokens import TokenRegistry

logger = logging.getLogger(__name__)

templates_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")
templates = Jinja2Templates(directory=templates_path)


# --- Dependencies ---

def get_store(request: Request) -> LinkStore:
    return request.app.state.store


def get_tokens(request: Request) -> TokenRegistry:
    return request.app.state.tokens


# --- Error handlers ---

async def storage_error_handler(request: Request, exc: StorageError) -> PlainTextResponse:
    logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
    if request.url.path == "/add":
        return PlainTextResponse("error adding link", status_code=500)
    return PlainTextResponse("error retrieving link", status_code=500)


async def token_error_handler(request: Request, exc: TokenGenerationError) -> Response:
    logger.error("Error generating CSRF token: %s", exc)
    return Response(status_code=500)


async def validation_error_handler(request: Request, exc: ValidationError) -> PlainTextResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return PlainTextResponse(str(exc), status_code=400)


# --- Routes ---

async def add_link_form(request: Request, tokens: TokenRegistry = Depends(get_tokens)):
    """Renders the add-link form with a freshly issued anti-forgery token."""
    token = tokens.issue_token()
    return templates.TemplateResponse(request, "add.html", {"csrftoken": token})


def add_link_submit(url: Optional[str] = Form(None),
                    name: Optional[str] = Form(None),
                    csrftoken: Optional[str] = Form(None),
                    store: LinkStore = Depends(get_store),
                    tokens: TokenRegistry = Depends(get_tokens)):
    """Stores a new link submitted from the add form.

    The token is spent before the fields are checked, so a form with a
    missing field has to be fetched again.
    """
    if not tokens.consume_token(csrftoken):
        raise ValidationError("invalid csrf token")

    if not url or not name:
        raise ValidationError("must provide both link name and url")

    logger.info("adding link %s (%s)", name, url)
    store.add_link(name, url)
    return PlainTextResponse("added link")


async def add_link_unsupported(request: Request):
    """Rejects every method on /add other than GET and POST."""
    raise ValidationError("unsupported method")


async def favicon():
    return Response(status_code=404)


def redirect_link(name: str, store: LinkStore = Depends(get_store)):
    """Redirects a short name to its stored URL."""
    url = store.get_link(name)
    if url is None:
        return PlainTextResponse("link not found", status_code=404)

    logger.info("Redirecting to %s for link %s", url, name)
    # Location is sent exactly as stored, without re-quoting
    return Response(status_code=301, headers={"location": url})


def create_app(store: LinkStore, tokens: Optional[TokenRegistry] = None) -> FastAPI:
    """Builds the web application around a link store and a token registry.

    Args:
        store: Where links are read from and written to. It is expected to
            be initialized already.
        tokens: Registry of anti-forgery tokens. A new, empty one is created
            if not given.

    Returns:
        The FastAPI application.
    """
    app = FastAPI(title="st", version=__version__, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.store = store
    app.state.tokens = tokens if tokens is not None else TokenRegistry()

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("Handling request at path %s", request.url.path)
        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = time.perf_counter() - start_time
        logger.info("%s %s -> %d (%.4f secs)", request.method, request.url.path,
                    response.status_code, process_time)
        return response

    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(TokenGenerationError, token_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)

    # Order matters: the catch-all lookup route has to come last.
    app.add_api_route("/favicon.ico", favicon, methods=["GET"], name="favicon")
    app.add_api_route("/add", add_link_form, methods=["GET"], response_class=HTMLResponse, name="add_link_form")
    app.add_api_route("/add", add_link_submit, methods=["POST"], name="add_link_submit")
    # No method filter, so this catches whatever GET and POST did not
    app.router.add_route("/add", add_link_unsupported, name="add_link_unsupported")
    app.add_api_route("/{name:path}", redirect_link, methods=["GET", "HEAD"], name="redirect_link")
    return app
