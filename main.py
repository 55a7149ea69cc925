"""
Main application entry point.
"""

import logging

from sample_app import app
from sample_app.core.config import settings
from sample_app.core.database import Base, engine
from sample_app.core.logging_config import setup_logging
import sample_app.models  # noqa: F401  registers tables

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)
logger.info(f"Database ready at {engine.url.render_as_string(hide_password=True)}")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
