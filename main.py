# main.py
import logging
import os

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from models import Group, GroupSummary, Student
from store import GroupNotFoundError, GroupStore, GroupValidationError

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3902


# Settings read from the environment (or a .env file)
class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    reload: bool = False
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s value: %r. Using default: %s", name, raw, default)
        return default


def _env_log_level(name: str, default: str) -> str:
    raw = os.getenv(name)
    if not raw:
        return default
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Invalid %s value: %r. Using default: %s", name, raw, default)
        return default
    return level


def load_settings() -> Settings:
    origins = os.getenv("GROUP_MS_CORS_ORIGINS", "*")
    return Settings(
        host=os.getenv("GROUP_MS_HOST", "0.0.0.0"),
        port=_env_int("GROUP_MS_PORT", DEFAULT_PORT),
        reload=os.getenv("GROUP_MS_RELOAD", "").lower() == "true",
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
        log_level=_env_log_level("GROUP_MS_LOG_LEVEL", "INFO"),
    )


# Request body for creating a group
class CreateGroupRequest(BaseModel):
    groupName: str
    members: list[str]


# Dependency handing each request the application store
def get_store(request: Request) -> GroupStore:
    return request.app.state.store


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(GroupNotFoundError)
    async def group_not_found_handler(request: Request, exc: GroupNotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, "Group not found")

    @app.exception_handler(GroupValidationError)
    async def group_validation_handler(request: Request, exc: GroupValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        problems = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()))
            problems.append(f"{location}: {err.get('msg')}")
        logger.debug("Rejected request to %s: %s", request.url.path, problems)
        return _error(status.HTTP_400_BAD_REQUEST, "; ".join(problems) or "Invalid request")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


def _register_routes(app: FastAPI) -> None:
    # All groups, members as ids only
    @app.get("/api/groups", response_model=list[GroupSummary])
    def list_groups(store: GroupStore = Depends(get_store)):
        return store.list_groups()

    # Every student of every group
    @app.get("/api/students", response_model=list[Student])
    def list_students(store: GroupStore = Depends(get_store)):
        return store.list_students()

    # Create a group together with its students
    @app.post("/api/groups", response_model=GroupSummary)
    def create_group(request: CreateGroupRequest, store: GroupStore = Depends(get_store)):
        return store.create_group(request.groupName, request.members)

    # Delete a group; the id comes from the path only
    @app.delete(
        "/api/groups/{group_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
    )
    def delete_group(group_id: int, store: GroupStore = Depends(get_store)):
        store.delete_group(group_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # One group with full member records
    @app.get("/api/groups/{group_id}", response_model=Group)
    def get_group(group_id: int, store: GroupStore = Depends(get_store)):
        return store.get_group(group_id)


def create_app(store: GroupStore | None = None, settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Group Microservice")
    app.state.store = store if store is not None else GroupStore()
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)
    _register_routes(app)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = app.state.settings
    logger.info("Server running on port %d", settings.port)
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.reload)


if __name__ == "__main__":
    run()
