"""
FastAPI Application: Satellite Classification Backend.

Serves single and batch classification, the session prediction log and
the demo login endpoints.
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from satclass import __version__
from satclass.auth import SessionStore
from satclass.core.exceptions import BatchProcessingError, SatClassError
from satclass.ml.batch import BatchProcessor
from satclass.ml.classifier import RuleClassifier
from satclass.ml.explain import FeatureExplainer
from satclass.monitoring import PredictionLog
from satclass.utils.config_loader import Config

logger = logging.getLogger(__name__)

# Global app state (accessed by route modules)
app_state: dict = {}

CONFIG_DIR = Path(os.environ.get("SATCLASS_CONFIG_DIR", "config"))


def build_state(config: Config) -> dict:
    """Wire the services from a loaded configuration."""
    prediction_log = PredictionLog(max_entries=config.api.max_log_entries)
    classifier = RuleClassifier(config.classifier, config.validation)
    return {
        "config": config,
        "classifier": classifier,
        "explainer": FeatureExplainer(config.classifier),
        "prediction_log": prediction_log,
        "batch_processor": BatchProcessor(classifier, config.batch, prediction_log),
        "session_store": SessionStore(config.session),
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load configuration and build services on startup."""
    t0 = time.perf_counter()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    config = Config(CONFIG_DIR).load_all()
    app_state.update(build_state(config))

    logger.info("Backend ready in %.2fs, classes: %s",
                time.perf_counter() - t0, ", ".join(config.classifier.classes))

    yield

    app_state.clear()
    logger.info("Backend shut down")


app = FastAPI(
    title="Satellite Classification API",
    description="Rule-based ISS / Sentinel-1A identification from orbital state",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:8000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SatClassError)
async def satclass_error_handler(request: Request, exc: SatClassError):
    content = {"detail": exc.detail}
    if isinstance(exc, BatchProcessingError) and exc.failures:
        content["failures"] = [
            {"line_number": f.line_number, "reason": f.reason} for f in exc.failures
        ]
    logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=content)


# Register routes
from satclass.api.routes.auth import router as auth_router
from satclass.api.routes.predict import router as predict_router
from satclass.api.routes.monitoring import router as monitoring_router

app.include_router(auth_router)
app.include_router(predict_router)
app.include_router(monitoring_router)


@app.get("/api/health")
async def health():
    """Health check endpoint."""
    config = app_state.get("config")
    return {
        "status": "ok",
        "version": __version__,
        "classes": config.classifier.classes if config else [],
        "model_version": config.classifier.model_version if config else None,
    }
