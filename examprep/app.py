import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from examprep.config import config
from examprep.exceptions import ExamPrepError
from examprep.api.routes import chat, extraction, papers, sessions

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Exam Prep Service",
    description="PDF text extraction and AI tutoring for past exam papers",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=config.CORS_ALLOW_METHODS,
    allow_headers=config.CORS_ALLOW_HEADERS,
)


@app.exception_handler(ExamPrepError)
async def exam_prep_error_handler(request: Request, exc: ExamPrepError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.details or exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


app.include_router(extraction.router)
app.include_router(chat.router)
app.include_router(papers.router)
app.include_router(sessions.router)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint; reports configuration without calling external services"""
    missing = config.missing_storage_settings()
    return {
        "ok": True,
        "status": "healthy",
        "service": "examprep",
        "gemini_configured": config.gemini_configured,
        "database_configured": "DATABASE_URL" not in missing,
        "storage_configured": "STORAGE_URL" not in missing and "STORAGE_SERVICE_KEY" not in missing,
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "service": "Exam Prep Service",
        "version": "1.0.0",
        "endpoints": {
            "health": "GET /health",
            "extract": "POST /extract-pdf-text",
            "chat": "POST /exam-chat-ai",
            "paper_context": "GET /papers/{paper_id}/extraction",
            "chat_session": "GET /chat-sessions/{session_id}",
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
