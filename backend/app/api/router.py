from fastapi import APIRouter

from app.api.routes import functions
from app.api.routes import pages
from app.api.routes import runs

api_router = APIRouter()
api_router.include_router(runs.router)
api_router.include_router(functions.router)
# Catch-all tenant pages go last.
api_router.include_router(pages.router)
