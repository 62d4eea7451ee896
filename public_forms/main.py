"""FastAPI application entry point (same-origin API proxy)."""

from fastapi import FastAPI

from public_forms.core.config import settings
from public_forms.routers import proxy

# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Public Forms Proxy",
    description="Same-origin proxy used by public form pages",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url=None,
)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}


# ============================================================================
# Routers
# ============================================================================

# Catch-all proxy; mounted last so /health wins.
app.include_router(proxy.router)
