from fastapi import FastAPI

from app.api.v1.endpoints.api import api_router

app = FastAPI(title="AAL Logistics API")

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
def health():
    return {"status": "up"}
