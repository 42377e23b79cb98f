from fastapi import FastAPI
import logging

from ghost_typist.api.routes import router
from ghost_typist.config import load_settings

app = FastAPI(title="ghost-typist", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=load_settings().log_level)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "ghost-typist", "version": "0.1.0"}
