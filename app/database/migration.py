from sqlalchemy import text, inspect
from app.database.database import engine, Base
from app.database.models.users import Profile, UserRole
from app.database.models.catalog import Accommodation, Facility, MenuItem
from app.database.models.booking import AccommodationBooking, FacilityBooking, FoodOrder, FoodOrderItem
from app.database.models.notification import Notification
import logging

logger = logging.getLogger(__name__)

# Global cache for column existence checks
_column_cache = {}

# Columns added after the first schema revision; older databases get them on startup
EXPECTED_COLUMNS = {
    "profiles": {
        "updated_at": "TIMESTAMP",
        "employee_id": "VARCHAR(100)",
    },
    "accommodation_bookings": {
        "department_approval": "VARCHAR(20)",
        "md_approval": "VARCHAR(20)",
        "approval_notes": "TEXT",
        "updated_at": "TIMESTAMP",
    },
    "facility_bookings": {
        "md_approval": "VARCHAR(20)",
        "approval_notes": "TEXT",
        "updated_at": "TIMESTAMP",
    },
    "food_orders": {
        "order_status": "VARCHAR(20) DEFAULT 'received'",
        "approval_notes": "TEXT",
        "updated_at": "TIMESTAMP",
    },
}

def has_column(table_name: str, column_name: str) -> bool:
    """Check if a table has a specific column (with caching)"""
    cache_key = f"{table_name}.{column_name}"

    if cache_key not in _column_cache:
        try:
            inspector = inspect(engine)
            columns = [col['name'] for col in inspector.get_columns(table_name)]
            _column_cache[cache_key] = column_name in columns
        except Exception:
            _column_cache[cache_key] = False

    return _column_cache[cache_key]

def add_column_if_not_exists(table_name: str, column_name: str, column_type: str):
    """Add a column to a table if it doesn't exist"""
    if not has_column(table_name, column_name):
        try:
            with engine.connect() as conn:
                sql = text(f"ALTER TABLE {table_name} ADD COLUMN {column_name} {column_type}")
                conn.execute(sql)
                conn.commit()
                logger.info(f"Added column {column_name} to {table_name} table")
                # Update cache
                _column_cache[f"{table_name}.{column_name}"] = True
        except Exception as e:
            logger.error(f"Failed to add column {column_name} to {table_name}: {e}")

def check_and_add_missing_columns():
    """Check for missing columns and add them if necessary"""
    logger.info("Checking for missing database columns...")

    for table_name, columns in EXPECTED_COLUMNS.items():
        for col_name, col_type in columns.items():
            add_column_if_not_exists(table_name, col_name, col_type)

    logger.info("Column verification completed")

def create_tables_if_not_exist():
    """Create tables if they don't exist"""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

def run_migration():
    """Run complete database migration"""
    logger.info("Starting database migration...")

    # Create tables first
    create_tables_if_not_exist()

    # Then add missing columns
    check_and_add_missing_columns()

    logger.info("Database migration completed!")
