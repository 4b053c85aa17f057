import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import (
    admin_router,
    coupons_router,
    health_router,
    notifications_router,
    orders_router,
    payments_router,
)
from config import settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("storefront")

app = FastAPI(title="Storefront API")

if settings.allowed_origins == ["*"]:
    allow_origins = ["*"]
else:
    allow_origins = settings.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(orders_router)
app.include_router(coupons_router)
app.include_router(notifications_router)
app.include_router(payments_router)
app.include_router(admin_router)


@app.on_event("startup")
async def _on_startup() -> None:
    if allow_origins == ["*"]:
        logger.warning(
            "CORS is set to allow all origins with credentials; set ALLOWED_ORIGINS to explicit values outside local dev."
        )
    if not settings.revalidate_url:
        logger.info("REVALIDATE_URL not set; page revalidation is disabled.")
