from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
import logging
import time

from quiz_engine.config import APP_NAME, APP_VERSION, DEBUG, LOG_LEVEL
from quiz_engine.exceptions import QuizEngineError

from quiz_engine.routes.users.quiz import router as user_quiz_router

from quiz_engine.routes.users.teacher.quiz import router as teacher_quiz_router
from quiz_engine.routes.users.teacher.quiz_attempt import router as teacher_quiz_attempt_router

from quiz_engine.routes.users.student.quiz_attempt import router as student_quiz_attempt_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing"""
    start_time = time.time()

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Duration: {duration:.3f}s"
    )

    return response


# Quiz engine errors (not found, forbidden, policy, conflict)
@app.exception_handler(QuizEngineError)
async def quiz_engine_exception_handler(request: Request, exc: QuizEngineError):
    if exc.status_code >= 500:
        logger.error(f"{exc.error}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error,
            "reason": exc.reason,
            "message": exc.message,
        }
    )


# HTTP exception handler
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Format HTTP exceptions consistently"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "http_error",
            "reason": None,
            "message": exc.detail,
        },
        headers=getattr(exc, "headers", None),
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "reason": None,
            "message": "An unexpected error occurred. Please try again later.",
            "detail": str(exc) if DEBUG else None,
        }
    )


@app.get("/")
def root():
    return {
        "message": f"{APP_NAME} is Running!"
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "app": APP_NAME,
        "version": APP_VERSION,
    }


app.include_router(user_quiz_router)

app.include_router(teacher_quiz_router)
app.include_router(teacher_quiz_attempt_router)

app.include_router(student_quiz_attempt_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "quiz_engine.main:app",
        host="0.0.0.0",
        port=8000,
        reload=DEBUG,
    )
