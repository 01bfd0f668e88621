from fastapi import APIRouter

from app.api.v1.endpoints import invoices, jobs

api_router = APIRouter()

api_router.include_router(jobs.router, prefix="/jobs", tags=["Jobs"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["Invoices"])
