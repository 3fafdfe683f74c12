from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from core.config import settings
from core.logging_config import configure_logging
from db.database import async_session_maker, create_db_and_tables, engine
from db.seed import seed_measurements
from routers.bookings import router as bookings_router
from routers.measurement import router as measurement_router
from routers.menus import router as menus_router
from routers.orders import router as orders_router
from routers.payments import router as payments_router
from routers.statistics import menus_router as menu_statistics_router
from routers.statistics import router as statistics_router
from routers.statistics import stock_router as stock_statistics_router
from routers.stock import router as stock_router
from routers.tables import router as tables_router
from routers.users import router as users_router
from services import check_dialect


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    check_dialect(engine.dialect.name)
    await create_db_and_tables()
    async with async_session_maker() as db:
        await seed_measurements(db)
    yield


app = FastAPI(
    title="Restaurant API",
    description="API for table bookings, orders, stock and payments",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Seating
app.include_router(tables_router, prefix="/tables", tags=["tables"])
app.include_router(bookings_router, prefix="/bookings", tags=["bookings"])

# Orders and payment
app.include_router(menus_router, prefix="/menus", tags=["menus"])
app.include_router(orders_router, prefix="/orders", tags=["orders"])
app.include_router(payments_router, prefix="/payment", tags=["payment"])
app.include_router(statistics_router, prefix="/stats/sales", tags=["statistics"])
app.include_router(menu_statistics_router, prefix="/stats/menus", tags=["statistics"])

# Stock and units
app.include_router(stock_router, prefix="/stock", tags=["stock"])
app.include_router(stock_statistics_router, prefix="/stats/stock", tags=["statistics"])
app.include_router(measurement_router, prefix="/measurement", tags=["measurement"])

app.include_router(users_router, prefix="/users", tags=["users"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
