"""
Main FastAPI application.
Blog CMS backend: posts, tags and comments.
"""
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from alembic import command
from alembic.config import Config
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from blogcms.config import settings
from blogcms.database import SessionLocal, engine
from blogcms.exceptions import register_exception_handlers
from blogcms.rate_limiter import limiter
from blogcms.services.users import ensure_admin


def configure_logging():
    """Log to the configured file and to stderr."""
    Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(settings.log_file),
            logging.StreamHandler()
        ]
    )


configure_logging()

logger = logging.getLogger(__name__)


def run_migrations():
    """
    Run Alembic migrations automatically.
    Fatal if they cannot be applied.
    """
    try:
        base_dir = Path(__file__).resolve().parent.parent
        alembic_cfg = Config(str(base_dir / "alembic.ini"))
        alembic_cfg.set_main_option("script_location", str(base_dir / "alembic"))
        alembic_cfg.attributes["configure_logger"] = False

        logger.info("Running database migrations...")
        command.upgrade(alembic_cfg, "head")
        logger.info("Migrations completed successfully")

    except Exception as e:
        logger.critical(f"Failed to run migrations: {e}")
        sys.exit(1)


def check_database_integrity():
    """
    Run PRAGMA integrity_check on an existing SQLite database.
    Fatal if corruption is detected.
    """
    try:
        db_path = Path(settings.database_path)

        if not db_path.exists():
            logger.info("Database does not exist yet, skipping integrity check")
            return

        with engine.connect() as conn:
            result = conn.execute(text("PRAGMA integrity_check;")).fetchone()

            if result[0] != "ok":
                logger.critical(f"Database integrity check failed: {result[0]}")
                sys.exit(1)

            logger.info("Database integrity check passed")

    except Exception as e:
        logger.critical(f"Failed to check database integrity: {e}")
        sys.exit(1)


def bootstrap_admin():
    db = SessionLocal()
    try:
        ensure_admin(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown.
    Runs the database checks and migrations on startup.
    """
    logger.info("Starting Blog CMS application")
    logger.info(f"Database: {settings.database_path}")
    logger.info(f"Log level: {settings.log_level}")

    # Make sure the data directory exists
    Path(settings.database_path).parent.mkdir(parents=True, exist_ok=True)

    check_database_integrity()
    run_migrations()
    bootstrap_admin()

    yield

    logger.info("Shutting down Blog CMS application")


# Create FastAPI app
app = FastAPI(
    title="Blog CMS API",
    description="Posts, tags and comments with role-based authoring",
    version="1.0.0",
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint (no authentication)
@app.get("/health")
async def health_check():
    """Basic health check"""
    return {"status": "ok"}


# Include routers
from blogcms.routes import auth, comments, posts, tags
app.include_router(auth.router, prefix="/api")
app.include_router(posts.router, prefix="/api")
app.include_router(comments.router, prefix="/api")
app.include_router(tags.router, prefix="/api")
