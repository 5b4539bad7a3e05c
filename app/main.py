from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .logging_config import configure_logging
from .routers import bookings, events
from .routers.errors import register_exception_handlers

configure_logging()

app = FastAPI(
    title="Event Ticket Booking API",
    version="1.0.0",
    description="Event catalog, seat inventory and booking lifecycle",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS for docs UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(events.router)
app.include_router(bookings.router)


@app.get("/")
def read_root():
    return {"message": "Event Ticket Booking API", "status": "running"}
