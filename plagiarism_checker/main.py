from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from plagiarism_checker.config import CORS_ORIGINS
from plagiarism_checker.logger import logger
from plagiarism_checker.routers.check_analysis import router as check_router
from plagiarism_checker.routers.report_export import router as export_router
from plagiarism_checker.utils.gemini_client import GeminiClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.provider = GeminiClient()
    if not app.state.provider.is_configured:
        logger.warning("GEMINI_API_KEY is not set; checks will fail until it is configured")
    yield
    app.state.provider.close()


app = FastAPI(title="Plagiarism Checker", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(check_router)
app.include_router(export_router)


@app.get("/health")
async def health():
    provider = getattr(app.state, "provider", None)
    return {
        "status": "ok",
        "providerConfigured": bool(provider and provider.is_configured),
    }
