# /callscript/utils/lifecycle.py

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from callscript.config.settings import settings
from callscript.jobs.auto_logout import build_scheduler
from callscript.navigation.definitions import HABITACIONAL_SCRIPT, HABITACIONAL_TABULATIONS
from callscript.navigation.importer import import_script
from callscript.services.product_resolver import product_resolver
from callscript.services.session_service import session_registry
from callscript.services.step_store import step_store
from callscript.utils.logging import setup_logging

# Startup loads the bundled script and starts the auto-logout scheduler;
# shutdown stops the scheduler and ends every open session.

logger = logging.getLogger(__name__)


def seed_sample_script():
    if len(step_store):
        return
    result = import_script(HABITACIONAL_SCRIPT, step_store, product_resolver, HABITACIONAL_TABULATIONS)
    logger.info(f"Seeded sample script: {result.step_count} steps.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    setup_logging()
    logger.info("Application starting up...")

    if settings.seed_sample_script:
        seed_sample_script()

    scheduler = None
    if settings.auto_logout_enabled:
        scheduler = build_scheduler(session_registry)
        scheduler.start()
    app.state.scheduler = scheduler

    logger.info("Application startup complete. Ready to accept requests.")

    yield  # Application is now running

    logger.info("Application shutting down...")

    if scheduler is not None:
        scheduler.shutdown(wait=False)
    session_registry.reset_all()
