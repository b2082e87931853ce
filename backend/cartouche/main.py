"""
backend/cartouche/main.py

FastAPI entrypoint for the photo transformation service.

Responsibilities:
- Initialize FastAPI app
- Register routers
- Setup middleware (CORS)
- Health check endpoint
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cartouche.routes import upload

app = FastAPI(
    title="Cartouche",
    description="Resize photos into named variants and store them",
    version="0.1.0"
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, replace with specific frontend origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(upload.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Cartouche is running"}
