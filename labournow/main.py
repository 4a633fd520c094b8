import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from labournow.config import settings
from labournow.dependencies import _init_firebase
from labournow.routers import contact, health, labour, location
from labournow.services.contact_masking import validate_masking_pattern

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    validate_masking_pattern(settings.mask_pattern)
    _init_firebase()
    yield


app = FastAPI(
    title="LabourNow API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(labour.router)
app.include_router(contact.router)
app.include_router(location.router)
