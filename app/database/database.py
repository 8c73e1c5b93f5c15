from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
import logging

from app import config

logger = logging.getLogger(__name__)

# Database configuration
DATABASE_URL = config.DATABASE_URL
if not DATABASE_URL:
    DATABASE_URL = "sqlite:///./facility_booking.db"
    logger.warning("No DATABASE_URL found, using SQLite fallback")

# Configure database engine with proper settings for a pooled Postgres
if DATABASE_URL.startswith("postgresql"):
    engine_kwargs = {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,  # Recycle connections every 30 minutes
        "pool_pre_ping": True,  # Validate connections before use
        "echo": False,
        "connect_args": {
            "connect_timeout": 10,
            "application_name": "facility_booking_api"
        }
    }

    try:
        engine = create_engine(DATABASE_URL, **engine_kwargs)
        logger.info("PostgreSQL engine created successfully")
    except Exception as e:
        logger.error(f"Failed to create PostgreSQL engine: {e}")
        raise
else:
    # SQLite configuration for development
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
    logger.info("Using SQLite database")

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# Test database connection
def test_connection():
    """Test database connection on startup"""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.info("Database connection test successful")
        return True
    except Exception as e:
        logger.error(f"Database connection test failed: {e}")
        return False
