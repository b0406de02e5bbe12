import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from app.ai.analyzers import get_analyzer
from app.ai.resume_agent import run_resume_extraction_crew
from app.sessions import SessionStore
from routes.wizard import router as wizard_router
from routes.dashboards import router as dashboards_router

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="ImmiPlanner",
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
    openapi_url="/api/v1/openapi.json"
)

app.include_router(wizard_router, prefix="/api/v1")
app.include_router(dashboards_router, prefix="/api/v1")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    app.state.store = SessionStore()
    app.state.analyzer = get_analyzer()
    app.state.resume_parser = run_resume_extraction_crew
    logger.info("Session TTL %s; CORS origins %s", app.state.store.ttl, os.getenv("CORS_ORIGINS", "http://localhost:5173"))


@app.get("/health")
async def health():
    return {"status": "ok"}
