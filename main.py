import argparse
import logging
import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db
from config import load_config
from routes import practice_router, rehearsals_router

logger = logging.getLogger(__name__)


def configure_logging(config: dict) -> None:
    level = getattr(logging, config.get("logging", {}).get("level", "INFO"), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: init config, logging and DB
    config = load_config()  # Ensures config exists
    configure_logging(config)
    init_db()
    logger.info("VerseCoach ready")
    yield


app = FastAPI(
    title="VerseCoach",
    description="Recall scoring and rehearsal scheduling for memorized passages",
    lifespan=lifespan,
)

# Include routers
app.include_router(practice_router, prefix="/practice", tags=["practice"])
app.include_router(rehearsals_router, prefix="/rehearsals", tags=["rehearsals"])


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="VerseCoach App")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    args = parser.parse_args()
    if args.init:
        load_config()  # Ensures config is copied if missing
        init_db()
        print("DB initialized and config copied to ~/.versecoach/")
        exit(0)
    # Run server
    uvicorn.run("main:app", host="127.0.0.1", port=args.port, reload=args.dev, log_level="info")
