# repo_tracker/api/server.py
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, Path, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from repo_tracker.adapters.github.client import GitHubApiClient
from repo_tracker.api.schemas import ApiErrorResponse, HealthDTO, InfoDTO
from repo_tracker.core.config import GitHubSettings
from repo_tracker.core.errors import GitHubApiError, GitHubRateLimitError
from repo_tracker.core.logger import get_logger
from repo_tracker.core.models.domain import GitHubRepository, RepositoryActivityResponse
from repo_tracker.services.activity_service import RepositoryActivityService

load_dotenv()
logger = get_logger(__name__)

SERVICE_NAME = "GitHub Repository Activity Tracker"
SERVICE_VERSION = "1.0.0"
API_PREFIX = "/api/v1/repositories"

# GitHub logins: alphanumerics and single hyphens, no leading/trailing hyphen.
USERNAME_PATTERN = r"^[a-zA-Z0-9](?:-?[a-zA-Z0-9])*$"
REPO_NAME_PATTERN = r"^[a-zA-Z0-9._-]+$"

# Upstream status codes passed through unchanged. Any other 4xx (e.g. 409)
# becomes 400 and any other code (e.g. 504) becomes 500.
PASSTHROUGH_STATUSES = {400, 401, 403, 404, 422, 429, 500, 502, 503}


# --- Lifespan ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🏁 System Startup: Initializing GitHub client...")
    settings = GitHubSettings.from_env()
    client = GitHubApiClient(settings)
    service = RepositoryActivityService(client, settings)
    app.state.activity_service = service
    yield
    logger.info("🛑 System Shutdown")
    client.close()
    service.shutdown()


def get_activity_service(request: Request) -> RepositoryActivityService:
    """Dependency for FastAPI to get the process-wide activity service."""
    return request.app.state.activity_service


router = APIRouter(prefix=API_PREFIX)


@router.get("/activity/{username}", response_model=RepositoryActivityResponse)
def get_repository_activity(
    username: str = Path(..., min_length=1, max_length=39, pattern=USERNAME_PATTERN),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=30, ge=1, alias="perPage"),
    service: RepositoryActivityService = Depends(get_activity_service),
):
    """
    Repository activity for a GitHub user or organization: one page of
    repositories, each with its most recent commits.
    """
    logger.info(f"Received request to get repository activity for user: {username} (page: {page}, perPage: {per_page})")

    response = service.fetch_activity(username, page, per_page)

    logger.info(
        f"Successfully processed repository activity request for user: {username} "
        f"- returned {response.repositories_processed} repositories"
    )
    return response


@router.get("/details/{owner}/{repo}", response_model=GitHubRepository)
def get_repository_details(
    owner: str = Path(..., min_length=1, max_length=39, pattern=USERNAME_PATTERN),
    repo: str = Path(..., min_length=1, max_length=100, pattern=REPO_NAME_PATTERN),
    service: RepositoryActivityService = Depends(get_activity_service),
):
    """Recent commits of a single repository."""
    logger.info(f"Received request to get repository details for: {owner}/{repo}")

    repository = service.fetch_repository_details(owner, repo)

    logger.info(
        f"Successfully processed repository details request for: {owner}/{repo} "
        f"- returned {len(repository.recent_commits)} commits"
    )
    return repository


@router.get("/health", response_model=HealthDTO)
def health():
    return HealthDTO(
        status="UP",
        timestamp=datetime.now(timezone.utc),
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
    )


@router.get("/info", response_model=InfoDTO)
def info():
    return InfoDTO(
        service=SERVICE_NAME,
        description="Fetch GitHub repository activity including recent commits for users and organizations",
        version=SERVICE_VERSION,
        endpoints={
            f"GET {API_PREFIX}/activity/{{username}}": "Get repository activity for a user/organization",
            f"GET {API_PREFIX}/details/{{owner}}/{{repo}}": "Get detailed repository information",
            f"GET {API_PREFIX}/health": "Health check endpoint",
            f"GET {API_PREFIX}/info": "API information",
        },
        parameters={
            "page": "Page number for pagination (default: 1)",
            "perPage": "Number of repositories per page (default: 30, capped by configuration)",
        },
        timestamp=datetime.now(timezone.utc),
    )


# --- Error Handling ---
def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[str],
    trace_id: str,
) -> JSONResponse:
    body = ApiErrorResponse(
        error=error,
        message=message,
        details=details,
        status=status_code,
        path=request.url.path,
        timestamp=datetime.now(timezone.utc),
        trace_id=trace_id,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


def determine_http_status(upstream_status: Optional[int]) -> int:
    """Maps an upstream GitHub status to the status returned to our caller."""
    if upstream_status is None:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    if upstream_status in PASSTHROUGH_STATUSES:
        return upstream_status
    if 400 <= upstream_status < 500:
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def handle_rate_limit_error(request: Request, exc: GitHubRateLimitError) -> JSONResponse:
    trace_id = str(uuid.uuid4())
    logger.warning(f"GitHub rate limit exceeded [{trace_id}]: {exc.message}")

    reset = exc.rate_limit_reset.isoformat() if exc.rate_limit_reset else None
    return _error_response(
        request,
        status.HTTP_429_TOO_MANY_REQUESTS,
        error="Rate Limit Exceeded",
        message="GitHub API rate limit exceeded. Please try again later.",
        details=f"Rate limit exceeded. Remaining: {exc.rate_limit_remaining}, Reset time: {reset}",
        trace_id=trace_id,
    )


async def handle_github_api_error(request: Request, exc: GitHubApiError) -> JSONResponse:
    trace_id = str(uuid.uuid4())
    logger.error(f"GitHub API error [{trace_id}]: {exc.message}")

    return _error_response(
        request,
        determine_http_status(exc.status_code),
        error="GitHub API Error",
        message=exc.message,
        details=exc.response_body,
        trace_id=trace_id,
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    trace_id = str(uuid.uuid4())
    logger.warning(f"Validation error [{trace_id}]: {exc.errors()}")

    details = ", ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        error="Validation Error",
        message="Invalid request parameters",
        details=details,
        trace_id=trace_id,
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    trace_id = str(uuid.uuid4())
    logger.error(f"Unexpected error [{trace_id}]: {exc}", exc_info=exc)

    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        error="Internal Server Error",
        message="An unexpected error occurred while processing your request",
        details="Please try again later or contact support if the problem persists",
        trace_id=trace_id,
    )


def create_app() -> FastAPI:
    app = FastAPI(title="GitHub Repository Activity Tracker", version=SERVICE_VERSION, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
        max_age=3600,
    )

    app.add_exception_handler(GitHubRateLimitError, handle_rate_limit_error)
    app.add_exception_handler(GitHubApiError, handle_github_api_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(router)
    return app


app = create_app()
