import logging
from typing import Optional

from fastapi import FastAPI

from realms.modules import get_routers
from realms.modules.rules_pkg.data_loader import CodexCache

# Initialize Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("realms.api")


def create_app(codex_cache: Optional[CodexCache] = None) -> FastAPI:
    """
    Builds the API app. Each app owns its codex cache on `app.state`;
    routers reach it through the `get_codex_cache` dependency.
    """
    app = FastAPI(title="Realms Rules Engine API", version="1.0.0")
    app.state.codex_cache = codex_cache if codex_cache is not None else CodexCache()

    # --- Startup Event ---
    @app.on_event("startup")
    async def startup_event():
        """Warms the codex cache so the first request does not pay for loading."""
        codex = app.state.codex_cache.get()
        logger.info(f"Codex loaded with {len(codex.get('power_parts', []))} power parts.")

    # --- Routers ---
    for router in get_routers():
        app.include_router(router)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": "realms-rules"}

    return app


app = create_app()
