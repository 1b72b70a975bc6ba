"""
NH Console - API Backend
Leads → customers → invoices → inventory → referral rewards → reports

Start with:
    uvicorn server:app --host 0.0.0.0 --port 8001 --reload
"""

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
import logging

from config import CORS_ORIGINS, client

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("nh_console")

app = FastAPI(
    title="NH Console",
    description="Small-business operations console",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ==================== ROUTES ====================

from routes import auth, products, catalog, leads, customers, orders, referrals, dashboard, settings, public

# Routes with /api prefix
app.include_router(auth.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(catalog.router, prefix="/api")
app.include_router(leads.router, prefix="/api")
app.include_router(customers.router, prefix="/api")
app.include_router(orders.router, prefix="/api")
app.include_router(referrals.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")
app.include_router(settings.router, prefix="/api")
app.include_router(public.router, prefix="/api")


# ==================== ROOT ====================

@app.get("/")
async def root():
    return {
        "name": "NH Console API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs"
    }


@app.get("/api/health")
async def health():
    return {"status": "ok"}


# ==================== STARTUP / SHUTDOWN ====================

@app.on_event("startup")
async def startup():
    from services.document_store import ensure_indexes
    from services.live_state import live_state

    await ensure_indexes()
    await live_state.start()
    logger.info("🚀 NH Console started")


@app.on_event("shutdown")
async def shutdown():
    from services.live_state import live_state

    live_state.stop()
    client.close()
    logger.info("NH Console stopped")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
