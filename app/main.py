from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import HotelHubError
from app.core.logging import configure_logging
from app.db.session import connect_store, close_store
from app.api.v1.api import api_router

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_store()
    yield
    await close_store()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.DESCRIPTION,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HotelHubError)
async def hotel_hub_error_handler(request: Request, exc: HotelHubError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code}
    )


@app.get("/")
async def root():
    return {"message": "Welcome to Hotel Hub API"}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "store": settings.STORE_BACKEND}


app.include_router(api_router, prefix=settings.API_V1_STR)
