from __future__ import annotations

import logging

from fastapi import FastAPI

from .config import DEBUG
from .db import init_db
from .routers import warbands

logger = logging.getLogger(__name__)

app = FastAPI(title="Space Weirdos Warband Builder", debug=DEBUG)


@app.on_event("startup")
def startup_event() -> None:
    init_db()
    logger.info("Application started")


app.include_router(warbands.router)
