# app/main.py
import logging

from fastapi import FastAPI

from app.api.routes import router as api_router
from app.config import settings


def _setup_logging() -> None:
    """ルートロガーにコンソール出力を 1 つだけ付ける。"""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
                "%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(handler)
    root.setLevel(settings.log_level.upper())


_setup_logging()

app = FastAPI(title=settings.app_title)

app.include_router(api_router, prefix="/api")
