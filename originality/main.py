from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from originality.config import CORS_ORIGINS
from originality.logger import logger
from originality.routers.check import router as check_router

app = FastAPI(title="Originality Checker")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(check_router)

logger.info("Originality checker ready")
