from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
import logging

from dropx.config import get_settings
from dropx.routers import auth, cart, user as user_router, addresses, orders, categories
from dropx.utils.responses import register_exception_handlers
from dropx.utils.storage import MEDIA_ROOT

logging.basicConfig(
    level=getattr(logging, get_settings().LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="DropX API")


@app.on_event("startup")
def on_startup():
    # Ensure all DB tables exist after all models are imported
    from dropx.models.user import Base, engine  # Base/engine single source
    import dropx.models.merchant  # register Merchant/MenuItem models
    import dropx.models.cart  # register CartSession/CartLineItem models
    import dropx.models.address  # register Address model
    import dropx.models.order  # register Order/OrderItem models
    import dropx.models.activity  # register UserActivity model
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready: %s", ", ".join(sorted(Base.metadata.tables)))


register_exception_handlers(app)

# Ensure media directory exists before mounting
MEDIA_ROOT.mkdir(parents=True, exist_ok=True)

# Serve uploaded media files
app.mount("/media", StaticFiles(directory=str(MEDIA_ROOT)), name="media")

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=[get_settings().CART_SESSION_HEADER],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(cart.router, prefix="/api/cart", tags=["cart"])
app.include_router(user_router.router, prefix="/api/profile", tags=["profile"])
app.include_router(addresses.router, prefix="/api/addresses", tags=["addresses"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
app.include_router(categories.router, prefix="/api/categories", tags=["categories"])


# --- Entry point for local runs ---
if __name__ == "__main__":
    import uvicorn, os
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("dropx.main:app", host="0.0.0.0", port=port, reload=False)
