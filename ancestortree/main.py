import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ancestortree.config import settings
from ancestortree.core.policy import get_engine
from ancestortree.database import Base, engine

# Import models so SQLAlchemy registers tables
from ancestortree.models import (  # noqa: F401
    person,
    family,
    child,
    event,
    media,
    profile,
)

# Routers
from ancestortree.routers import (
    people_router,
    families_router,
    events_router,
    media_router,
    profile_router,
    admin_router,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# -----------------------
# POLICY
# -----------------------
# Built here so a bad POLICY_VERSION fails at startup, not on first request
policy_engine = get_engine()
logger.info("Privacy policy version %s", policy_engine.config.version)

# -----------------------
# CREATE APP
# -----------------------
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Backend API for the AncestorTree family register.",
    version="1.0.0",
)

# -----------------------
# CORS
# -----------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------
# DATABASE TABLES
# -----------------------
Base.metadata.create_all(bind=engine)

# -----------------------
# ROUTES
# -----------------------
app.include_router(people_router.router)
app.include_router(families_router.router)
app.include_router(events_router.router)
app.include_router(media_router.router)
app.include_router(profile_router.router)
app.include_router(admin_router.router)


# -----------------------
# HEALTH CHECK
# -----------------------
@app.get("/")
def root():
    return {"message": "AncestorTree API is running!"}
