from fastapi import FastAPI  # Core FastAPI imports
from fastapi.middleware.cors import CORSMiddleware
import logging

from crosscheck.api.routes import router
from crosscheck.core.config import get_settings

settings = get_settings()
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG_EXTRACTION else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(title="License Cross-Check API", version="0.1.0")  # Main ASGI app

# CORS (wide-open for dev; restrict in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    return {"status": "ok"}  # Basic liveness


app.include_router(router)
