# wishcart/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging
from contextlib import asynccontextmanager

from wishcart.config import settings
from wishcart.database import db
from wishcart.api.routes import cart as cart_routes
from wishcart.api.routes import wishlist as wishlist_routes
from wishcart.core.errors import WishlistError
from wishcart.middleware.cors_config import configure_cors


logger = logging.getLogger("uvicorn.error")
logging.getLogger("wishcart").setLevel(settings.LOG_LEVEL.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup checks: the catalog and customer tables are owned by other
    services, so only warn when they are missing.
    """
    for table in ("products", "customers"):
        path = db._file_path(table)
        if not path.exists():
            logger.warning("%s file not found at %s (run scripts/init_db.py to seed one)", table, path)
        else:
            logger.info("Found %s file: %s", table, path)
    yield
    logger.info("Shutting down Wishlist API")

app = FastAPI(title="Wishlist API", version="0.1.0", lifespan=lifespan)
configure_cors(app)


@app.exception_handler(WishlistError)
async def wishlist_error_handler(request: Request, exc: WishlistError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "errors": exc.errors})


app.include_router(wishlist_routes.router)
app.include_router(cart_routes.router)


@app.get("/", tags=["root"])
async def root():
    return {"status": "ok", "service": "Wishlist API"}
