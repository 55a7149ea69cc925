"""
Main application package initialization.
This package contains the FastAPI application and all its components.
"""

from fastapi import FastAPI

from sample_app.core.config import settings
from sample_app.routes import health, micropost, relationship, sessions, user

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Micro-blogging backend: accounts, follows and microposts",
    version="0.1.0"
)

# Include routers
app.include_router(sessions.router)
app.include_router(user.router)
app.include_router(micropost.router)
app.include_router(relationship.router)
app.include_router(health.router)
