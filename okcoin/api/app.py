"""HTTP adapter: JSON routes over the shared GameEngine."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from okcoin.api.schemas import (
    CreateReferralRequest,
    CreateUserRequest,
    HealthResponse,
    MessageResponse,
    RankResponse,
    RankedUserResponse,
    ReferralResponse,
    ReferralWithUserResponse,
    TaskProgressResponse,
    TaskResponse,
    UserResponse,
)
from okcoin.core.engine import GameEngine
from okcoin.domain.clock import now as clock_now
from okcoin.domain.economy import LEADERBOARD_DEFAULT
from okcoin.domain.failures import Failure

logger = logging.getLogger(__name__)

# Every error body, validation included, is a MessageResponse.
router = APIRouter(prefix="/api", tags=["OK Coin"], responses={400: {"model": MessageResponse}})
NOT_FOUND = {404: {"model": MessageResponse}}


def get_engine(request: Request) -> GameEngine:
    return request.app.state.engine


# Handlers are plain `def`: they run in the threadpool and the engine's
# per-user locks keep concurrent requests consistent.


@router.get("/health", response_model=HealthResponse)
def health(engine: GameEngine = Depends(get_engine)) -> dict:
    return {
        "status": "ok",
        "timestamp": clock_now(),
        "users": engine.count_users(),
        "tasks": engine.count_tasks(),
    }


@router.post("/users", response_model=UserResponse)
def create_user(body: CreateUserRequest, engine: GameEngine = Depends(get_engine)) -> dict:
    """Idempotent on username: an existing user is returned unchanged."""
    return engine.create_or_get_user(body.username)


@router.get("/users/{user_id}", response_model=UserResponse, responses=NOT_FOUND)
def get_user(user_id: int, engine: GameEngine = Depends(get_engine)) -> dict:
    user = engine.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("/users/{user_id}/tap", response_model=UserResponse)
def tap(user_id: int, engine: GameEngine = Depends(get_engine)) -> dict:
    user, failure = engine.tap(user_id)
    if failure is not None:
        raise HTTPException(status_code=400, detail="Cannot tap - no energy or user not found")
    return user


@router.get("/tasks", response_model=list[TaskResponse])
def list_tasks(engine: GameEngine = Depends(get_engine)) -> list:
    return engine.list_active_tasks()


@router.get("/users/{user_id}/tasks", response_model=list[TaskProgressResponse])
def user_tasks(user_id: int, engine: GameEngine = Depends(get_engine)) -> list:
    return engine.get_user_tasks_with_progress(user_id)


@router.post("/users/{user_id}/tasks/{task_id}/complete", response_model=UserResponse, responses=NOT_FOUND)
def complete_task(user_id: int, task_id: int, engine: GameEngine = Depends(get_engine)) -> dict:
    user, failure = engine.complete_task(user_id, task_id)
    if failure is Failure.NOT_FOUND:
        raise HTTPException(status_code=404, detail="User or task not found")
    if failure is Failure.ALREADY_COMPLETED:
        raise HTTPException(status_code=400, detail="Task already completed")
    return user


@router.post("/referrals", response_model=ReferralResponse, responses=NOT_FOUND)
def create_referral(body: CreateReferralRequest, engine: GameEngine = Depends(get_engine)) -> dict:
    referral, failure = engine.create_referral(body.referrer_id, body.referred_id, body.reward)
    if failure is Failure.DUPLICATE:
        raise HTTPException(status_code=400, detail="User already referred")
    if failure is not None:
        raise HTTPException(status_code=404, detail="Referrer or referred user not found")
    return referral


@router.get("/users/{user_id}/referrals", response_model=list[ReferralWithUserResponse])
def user_referrals(user_id: int, engine: GameEngine = Depends(get_engine)) -> list:
    return engine.get_user_referrals(user_id)


@router.get("/leaderboard", response_model=list[RankedUserResponse])
def leaderboard(limit: str | None = None, engine: GameEngine = Depends(get_engine)) -> list:
    return engine.get_leaderboard(limit_or_default(limit))


def limit_or_default(raw: str | None) -> int:
    """Positive integer from the query string; anything else means the default top 10."""
    if raw is None:
        return LEADERBOARD_DEFAULT
    try:
        value = int(raw)
    except ValueError:
        return LEADERBOARD_DEFAULT
    return value if value > 0 else LEADERBOARD_DEFAULT


@router.get("/users/{user_id}/rank", response_model=RankResponse)
def user_rank(user_id: int, engine: GameEngine = Depends(get_engine)) -> dict:
    return {"rank": engine.get_user_rank(user_id)}


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers returning `{"message": ...}` bodies."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed ids and payloads never reach the engine."""
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid request", "errors": jsonable_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]


def create_app(engine: GameEngine) -> FastAPI:
    app = FastAPI(title="OK Coin API")
    app.state.engine = engine
    setup_error_handlers(app)
    app.include_router(router)
    return app
