"""
FastAPI main application.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from voidloot.core.config import settings
from voidloot.core.logging import configure_logging

from .routes import battle, combat, data, loot, monsters, skills, stats

configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

app = FastAPI(
    title="Voidloot API",
    description="Loot RPG generators, stat pipeline and combat simulation API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(loot.router, prefix="/api/loot", tags=["Loot"])
app.include_router(monsters.router, prefix="/api/monsters", tags=["Monsters"])
app.include_router(skills.router, prefix="/api/skills", tags=["Skills"])
app.include_router(stats.router, prefix="/api/stats", tags=["Stats"])
app.include_router(combat.router, prefix="/api/combat", tags=["Combat"])
app.include_router(data.router, prefix="/api/data", tags=["Data"])
app.include_router(battle.router, tags=["Live Battle"])


@app.get("/")
async def root():
    """API status check."""
    return {
        "status": "ok",
        "name": "Voidloot API",
        "version": "1.0.0",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
