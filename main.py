from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, RESORT_NAME
from database.connection import Base, engine
import models  # registers every table on Base.metadata
from utils.logging_utils import log_event
from utils.rate_limiter import setup_rate_limiting

Base.metadata.create_all(bind=engine)
log_event("startup", "system", "Tables ready", f"engine={engine.url.get_backend_name()}")

app = FastAPI(title=f"{RESORT_NAME} Booking API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_rate_limiting(app)

from endpoints import availability, bookings, expenses, rooms, statistics
app.include_router(bookings.router)
app.include_router(rooms.router)
app.include_router(availability.router)
app.include_router(expenses.router)
app.include_router(statistics.router)


@app.get("/")
def read_root():
    return {"message": f"{RESORT_NAME} booking API"}
