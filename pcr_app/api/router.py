# FILE: pcr_app/api/router.py
from fastapi import APIRouter
from pcr_app.api import (
    routes_pcr_pdf,
    routes_print_jobs,
)

api_router = APIRouter()

api_router.include_router(routes_pcr_pdf.router)
api_router.include_router(routes_print_jobs.router)
