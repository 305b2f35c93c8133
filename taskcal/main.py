import logging

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from taskcal.observability.logger import init_sentry
from taskcal.routes.calendar import router as calendar_router
from taskcal.routes.events import router as events_router
from taskcal.routes.health import router as health_router
from taskcal.routes.settings import router as settings_router
from taskcal.routes.tasks import router as tasks_router

logger = logging.getLogger("taskcal")
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="taskcal")

init_sentry()

# Routes
app.include_router(health_router, tags=["health"])
app.include_router(tasks_router, prefix="/tasks", tags=["tasks"])
app.include_router(events_router, prefix="/events", tags=["events"])
app.include_router(calendar_router, prefix="/calendar", tags=["calendar"])
app.include_router(settings_router, prefix="/settings", tags=["settings"])


@app.get("/")
def root():
    return {"status": "ok"}
