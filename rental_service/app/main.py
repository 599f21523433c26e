from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import rental_engine, Base
from shared.core.logging_config import setup_logging
from shared.exception_handler import setup_exception_handlers

from . import models  # noqa: F401  registers every table on Base
from .router.contracts import unit_contracts_router, property_contracts_router
from .router.payments import collection_payments_router, supply_payments_router
from .router.system import settings_router

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

app = FastAPI(title="Rental Contracts Service API")

# Create all tables
Base.metadata.create_all(bind=rental_engine)

origins = [
    "http://localhost:8080",
    "http://127.0.0.1:8003"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# Include routers
app.include_router(unit_contracts_router.router)
app.include_router(property_contracts_router.router)
app.include_router(collection_payments_router.router)
app.include_router(supply_payments_router.router)
app.include_router(settings_router.router)
