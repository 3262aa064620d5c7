from fastapi import FastAPI, APIRouter, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import logging
import time
from pydantic import BaseModel
from typing import List

from backend import config
from backend.config import ENV
from backend.errors import (
    AuthError,
    InputValidationError,
    ModelError,
    RateLimited,
    SchemaViolation,
    TodoAIError,
    TransportError,
)
from backend.models import Period, Task, TodoSummary
from backend.todo_extraction import generate_todo
from backend.todo_summary import summarize_tasks
from backend.todo_tips import get_focus_tip

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Docs at /api/docs in development, disabled in production
if ENV == 'production':
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
else:
    app = FastAPI(docs_url="/api/docs", redoc_url="/api/redoc", openapi_url="/api/openapi.json")

# Note: When allow_credentials=True, you cannot use allow_origins=['*']
if config.CORS_ORIGINS == ['*']:
    cors_origins = ['*']
    allow_creds = False
else:
    cors_origins = config.CORS_ORIGINS
    allow_creds = True

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_creds,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "content-type", "accept", "origin", "x-requested-with"],
    max_age=600,  # Cache preflight for 10 minutes
)

# Request logging middleware (dev only) - MUST be after CORS middleware
if ENV != 'production':
    @app.middleware("http")
    async def log_requests(request, call_next):
        """Log all requests in development mode"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} → {response.status_code} "
            f"({process_time:.3f}s)"
        )
        return response

api_router = APIRouter(prefix="/api")

config.validate_required_env_vars()


# ============ REQUEST MODELS ============
class GenerateTodoRequest(BaseModel):
    input: str


class SummarizeTodosRequest(BaseModel):
    todos: List[Task]
    period: Period


# ============ ERROR MAPPING ============
def to_http_exception(error: TodoAIError) -> HTTPException:
    """
    Map pipeline errors to HTTP errors.

    Input errors are shown verbatim. Model errors only expose a generic message,
    plus the raw error in development.
    """
    if isinstance(error, InputValidationError):
        return HTTPException(status_code=400, detail={"error": str(error)})

    detail = {"error": error.public_message if isinstance(error, ModelError) else "Unexpected error."}
    if ENV == 'development':
        detail["details"] = str(error)

    if isinstance(error, SchemaViolation):
        status_code = 400
    elif isinstance(error, AuthError):
        status_code = 401
    elif isinstance(error, RateLimited):
        detail["message"] = "Please try again later. Limits usually reset within a few minutes."
        status_code = 429
    elif isinstance(error, TransportError):
        status_code = 503
    else:
        status_code = 500
    return HTTPException(status_code=status_code, detail=detail)


# ============ ROUTES ============
@api_router.get("/")
async def root():
    return {"message": "Todo AI API"}


@api_router.get("/health")
async def health():
    return {"status": "healthy"}


@api_router.post("/ai/generate-todo")
async def generate_todo_endpoint(request: GenerateTodoRequest):
    try:
        task = await generate_todo(request.input)
    except TodoAIError as e:
        logger.error(f"Todo generation failed ({type(e).__name__}): {e}")
        raise to_http_exception(e)

    return {
        "success": True,
        "data": {
            "title": task.title,
            "description": task.description,
            "due_date": task.due_at.isoformat(),
            "priority": task.priority,
            "category": task.category,
        },
    }


@api_router.post("/ai/summarize-todos")
async def summarize_todos_endpoint(request: SummarizeTodosRequest):
    try:
        summary: TodoSummary = await summarize_tasks(request.todos, request.period)
    except TodoAIError as e:
        logger.error(f"Todo summary failed ({type(e).__name__}): {e}")
        raise to_http_exception(e)

    return {"success": True, "data": summary.model_dump(by_alias=True)}


@api_router.get("/ai/todo-tips")
async def todo_tips_endpoint():
    try:
        tip = await get_focus_tip()
    except TodoAIError as e:
        logger.error(f"Focus tip failed ({type(e).__name__}): {e}")
        raise to_http_exception(e)
    return {"tip": tip}


app.include_router(api_router)
