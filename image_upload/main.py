import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from image_upload.config import get_settings
from image_upload.routers import upload
from image_upload.schemas import HealthResponse

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse()

    app.include_router(upload.router, tags=["upload"])
    return app


app = create_app()
