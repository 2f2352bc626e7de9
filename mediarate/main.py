from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.logging_config import setup_logging
from .catalog.router import router as catalog_router
from .media.router import router as media_router
from .ratings.router import router as ratings_router
from .websockets.router import router as websockets_router

setup_logging()

app = FastAPI(title="MediaRate API")

@app.get("/")
def read_root():
    return {"message": "Welcome to the MediaRate API"}

app.include_router(catalog_router)
app.include_router(media_router)
app.include_router(ratings_router)
app.include_router(websockets_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
