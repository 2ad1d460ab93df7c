from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .api.recipes import router as recipes_router
from .api.websocket import router as ws_router
from .core.config import get_settings
from .services.openai_client import check_api_key

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

app = FastAPI(title="recipe-checklist", version="0.1.0", description="Recipe generation with an interactive checklist")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recipes_router)
app.include_router(ws_router)


@app.get("/api/health")
async def health_check(verify: bool = False):
    status = {
        "status": "ok",
        "message": "recipe-checklist API is running",
        "openai_configured": settings.api_key_configured,
    }
    if verify:
        status["openai_key_valid"] = await check_api_key(settings)
    return status
