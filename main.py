from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from app import config
from app.database.database import test_connection
from app.api import api_router
from app.database.migration import run_migration
import logging

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Facility Services Booking API",
    description="Guest accommodation, club facility and food order bookings with staged approvals",
    version="1.0.0",
)

if "*" in config.CORS_ORIGINS:
    logger.info("CORS allows all origins")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def startup_event():
    """Run startup tasks"""
    try:
        logger.info("Starting up Facility Services Booking API...")

        # Test database connection
        logger.info("Testing database connection...")
        if test_connection():
            logger.info("Database connection successful!")

            # Run database migration
            logger.info("Running database migration...")
            run_migration()
            logger.info("Database migration completed!")
        else:
            logger.error("Database connection failed!")

        logger.info("Startup completed!")

    except Exception as e:
        logger.error(f"Startup failed: {e}")

app.include_router(api_router)

@app.get("/")
def read_root():
    return {
        "message": "Welcome to the Facility Services Booking API",
        "version": "1.0.0",
        "status": "running"
    }

@app.get("/health")
def health_check():
    """Health check endpoint for deployment platforms"""
    try:
        db_status = test_connection()
        return {
            "status": "healthy" if db_status else "unhealthy",
            "database": "connected" if db_status else "disconnected",
            "version": "1.0.0"
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unavailable")
