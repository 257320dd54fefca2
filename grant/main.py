"""Main FastAPI application entry point."""
import logging

from fastapi import FastAPI

from grant.config import Settings, get_settings
from grant.database import engine, Base
from grant.api.routes import router
# Import models to register them with SQLAlchemy Base
from grant.models.officer import Officer
from grant.models.audit import OfficerAuditLog

logger = logging.getLogger(__name__)


def report_configuration(settings: Settings) -> None:
    """Log the effective configuration once at startup."""
    logger.info("Starting Grant (env=%s, database=%s)",
                settings.app_env, settings.database_url.split("://", 1)[0])
    if not settings.discord_public_key:
        # Missing key is fatal for a production deployment, expected in local runs
        level = logging.ERROR if settings.app_env == "production" else logging.WARNING
        logger.log(level, "DISCORD_PUBLIC_KEY is not set: every interaction will be rejected")


settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
report_configuration(settings)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title="Grant - Officer Roster Bot",
    description="Signed interaction webhook for officer roster management.",
    version="0.1.0"
)

app.include_router(router, tags=["Interactions"])


# Health check
@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "Grant"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
