import logging

from fastapi import FastAPI

from .db import SessionLocal, init_db
from .cleanup import purge_stale_progress
from .settings import settings
from .routers import course
from .routers.course import close_generation_client


logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
# Suppress noisy loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

app = FastAPI(title="Adaptive Course API")
app.include_router(course.router)


@app.get("/info")
def root():
	configured_key = settings.gemini_api_key if settings.generation_provider == "gemini" else settings.chat_api_key
	return {
		"status": "ok",
		"generation_provider": settings.generation_provider,
		"generation_configured": bool(configured_key),
		"quiz_item_count": settings.quiz_item_count,
	}


@app.on_event("startup")
async def startup_event():
	init_db()
	# Best-effort retention cleanup at startup
	db = SessionLocal()
	try:
		removed = purge_stale_progress(db, settings.progress_retention_days)
		if removed:
			logger.info("Purged %d stale progress rows", removed)
	except Exception:
		logger.exception("Progress cleanup failed")
	finally:
		db.close()


@app.on_event("shutdown")
async def shutdown_event():
	await close_generation_client()
