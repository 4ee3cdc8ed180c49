"""
Database initialization script
Creates the pump_status and crop_settings tables
"""
import logging

from sqlalchemy import inspect
from pump_control.database import engine as default_engine
from pump_control.models import Base

logger = logging.getLogger(__name__)

def init_database(engine=None):
    """Create missing tables; existing tables and rows are left untouched"""
    engine = engine or default_engine
    Base.metadata.create_all(bind=engine)
    tables = inspect(engine).get_table_names()
    logger.info(f"Pump status tables initialized: {', '.join(sorted(tables))}")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_database()
