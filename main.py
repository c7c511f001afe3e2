import logging
import os
from typing import Callable, Optional, Tuple

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth import GoogleServices, build_services, has_token
from config import Settings
from docs_fetcher import DocsError, DocsFetcher
from models import ErrorResponse, GenerateRequest, GenerateResponse, PreviewRequest, PreviewResponse
from rate_limit import RateLimiter
from slides_builder import SLIDE_TEMPLATES, SlidesBuilder, list_templates
from summarizer import GeminiClient, Summarizer

# Logging configuration
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

MIN_SLIDE_COUNT = 3
MAX_SLIDE_COUNT = 10

ServicesFactory = Callable[[str], GoogleServices]

router = APIRouter(prefix="/generate", tags=["generate"])


# --- Dependencies ---
def get_summarizer(request: Request) -> Summarizer:
    return request.app.state.summarizer


def get_services_factory(request: Request) -> ServicesFactory:
    return request.app.state.services_factory


async def rate_limit(request: Request) -> None:
    await request.app.state.rate_limiter(request)


# --- Validation ---
def validate_request(body: PreviewRequest, require_user: bool = False) -> None:
    """
    Checks a preview/generate body in a fixed order: source fields (400),
    slideCount presence (400), credentials (401), slideCount range (400).
    """
    if not body.import_mode and not (body.document_content and body.document_title):
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: documentContent and documentTitle, or googleDocsUrl",
        )
    if body.slide_count is None:
        raise HTTPException(status_code=400, detail="Missing required fields: slideCount")

    missing = []
    if (body.import_mode or require_user) and not has_token(body.access_token):
        missing.append("accessToken")
    if require_user and not body.user_email:
        missing.append("userEmail")
    if missing:
        raise HTTPException(status_code=401, detail=f"Missing authentication: {' and '.join(missing)} required")

    if not MIN_SLIDE_COUNT <= body.slide_count <= MAX_SLIDE_COUNT:
        raise HTTPException(
            status_code=400,
            detail=f"slideCount must be between {MIN_SLIDE_COUNT} and {MAX_SLIDE_COUNT}",
        )


def resolve_source(body: PreviewRequest, services_factory: ServicesFactory) -> Tuple[str, str]:
    """Returns (content, title), fetching the Google Doc in import mode."""
    if not body.import_mode:
        return body.document_content, body.document_title

    fetcher = DocsFetcher(services_factory(body.access_token))
    document = fetcher.fetch_content(body.google_docs_url)
    if not document.content:
        raise HTTPException(status_code=400, detail="The Google Doc has no text content")
    logging.info(f"Imported Google Doc '{document.title}' ({len(document.content)} chars)")
    return document.content, body.document_title or document.title


# --- Endpoints ---
@router.get("/templates")
def get_templates():
    return {"templates": [t.model_dump() for t in list_templates()]}


@router.post(
    "/preview",
    response_model=PreviewResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit)],
)
def preview(
    body: PreviewRequest,
    summarizer: Summarizer = Depends(get_summarizer),
    services_factory: ServicesFactory = Depends(get_services_factory),
):
    """Returns the generated slide structure without creating a presentation."""
    validate_request(body)
    try:
        content, title = resolve_source(body, services_factory)
        structure = summarizer.summarize(content, title, body.slide_count, body.custom_prompt)
    except HTTPException:
        raise
    except DocsError as e:
        logging.warning(f"Google Docs import failed: {e.code.value} {e.message}")
        raise HTTPException(status_code=e.http_status, detail=e.message)
    except Exception as e:
        logging.error(f"Preview error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e) or "Unknown error")

    return PreviewResponse(
        structure=structure,
        document_title=title if body.import_mode else None,
    )


@router.post(
    "",
    response_model=GenerateResponse,
    response_model_by_alias=True,
    dependencies=[Depends(rate_limit)],
)
def generate(
    body: GenerateRequest,
    summarizer: Summarizer = Depends(get_summarizer),
    services_factory: ServicesFactory = Depends(get_services_factory),
):
    """Generates slide content and creates a Google Slides presentation."""
    validate_request(body, require_user=True)
    if body.template and body.template not in SLIDE_TEMPLATES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown template '{body.template}'. Valid templates: {', '.join(SLIDE_TEMPLATES)}",
        )

    try:
        services = services_factory(body.access_token)
        content, title = resolve_source(body, lambda _token: services)

        # 1. Call LLM to get structured data
        structure = summarizer.summarize(content, title, body.slide_count, body.custom_prompt)

        # 2. Create the Google Slides presentation
        result = SlidesBuilder(services).create_presentation(structure, body.template)
    except HTTPException:
        raise
    except DocsError as e:
        logging.warning(f"Google Docs import failed: {e.code.value} {e.message}")
        raise HTTPException(status_code=e.http_status, detail=e.message)
    except Exception as e:
        logging.error(f"An error occurred in the generation process: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e) or "Unknown error occurred")

    return GenerateResponse(slides_url=result["slidesUrl"], slides_id=result["slidesId"])


# --- Error rendering ---
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {location} {first.get('msg', '')}".strip()
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content=ErrorResponse(error=message).model_dump())


# --- FastAPI App ---
def create_app(
    settings: Optional[Settings] = None,
    summarizer: Optional[Summarizer] = None,
    services_factory: Optional[ServicesFactory] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.getLogger().setLevel(settings.log_level)

    app = FastAPI(
        title="Doc2Slides API",
        description="Turns documents into executive slide decks with Gemini and Google Slides.",
        version="1.0.0",
    )

    if summarizer is None:
        model = None
        if settings.gemini_configured:
            model = GeminiClient(
                settings.google_cloud_project, settings.google_cloud_location, settings.gemini_model
            )
        summarizer = Summarizer(model)
    logging.info(f"Gemini configured: {'No (mock mode)' if summarizer.mock_mode else 'Yes'}")

    app.state.settings = settings
    app.state.summarizer = summarizer
    app.state.services_factory = services_factory or build_services
    app.state.rate_limiter = RateLimiter(settings.rate_limit_per_minute)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(router)

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "geminiConfigured": not summarizer.mock_mode,
            "mockMode": summarizer.mock_mode,
            "oauthConfigured": bool(settings.google_client_id),
            "templates": list(SLIDE_TEMPLATES),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=app.state.settings.port, reload=True)
