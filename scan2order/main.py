"""
ASGI entry point: ``uvicorn scan2order.main:app``.

Loads ``.env`` before anything reads the environment, configures logging and
builds the application from config.
"""

from dotenv import load_dotenv

load_dotenv()

from .logging_config import setup_logging  # noqa: E402
from .app_factory import create_app  # noqa: E402

setup_logging()

app = create_app()
