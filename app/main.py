from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import ai as ai_router
from app.api.v1 import auth as auth_router
from app.api.v1 import knowledge as knowledge_router
from app.api.v1 import tickets as tickets_router
from app.api.v1 import users as users_router
from app.config.db import check_db_connection, engine
from app.settings import settings
from app.utils.logging_config import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events.
    """
    await check_db_connection()
    logger.info("HELPDESK API IS READY")

    yield

    await engine.dispose()


app = FastAPI(
    lifespan=lifespan,
    title="Helpdesk",
    description="Support tickets, knowledge base and an AI assistant",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    detail = _describe_validation_error(exc)
    logger.warning(f"Rejected {request.method} {request.url.path}: {detail}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Include routers
app.include_router(auth_router.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(tickets_router.router, prefix="/api/v1/tickets", tags=["Tickets"])
app.include_router(ai_router.router, prefix="/api/v1/ai", tags=["AI"])
app.include_router(
    knowledge_router.router, prefix="/api/v1/knowledge", tags=["Knowledge"]
)
app.include_router(users_router.router, prefix="/api/v1/users", tags=["Users"])


@app.get("/")
def read_root() -> dict[str, str]:
    return {"message": "Hello from Helpdesk API!"}
