import logging

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from rest_timer import config  # noqa: E402
from rest_timer.api.base import api_router  # noqa: E402

app = FastAPI(
    title="Rest Timer Notifications API",
    description=(
        "Stores rest-timer notifications scheduled by the workout client and "
        "pushes them over Web Push or Expo once the rest period is over"
    ),
    version="1.0.0"
)

# The workout client calls the API from the browser and the native shell
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rest notifications, cron trigger and health routes
app.include_router(api_router)


@app.get("/")
def read_root():
    return {
        "message": "Rest Timer Notifications API",
        "docs": "/docs",
        "version": "1.0.0"
    }
