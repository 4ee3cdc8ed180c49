from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from pydantic_settings import BaseSettings
from typing import List
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./pump_control.db")
    database_sslmode: str = os.getenv("DATABASE_SSLMODE", "")

    host: str = os.getenv("PUMP_CONTROL_HOST", "0.0.0.0")
    port: int = int(os.getenv("PUMP_CONTROL_PORT", "3001"))
    cors_origins: str = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")

    send_timeout_seconds: float = float(os.getenv("SEND_TIMEOUT_SECONDS", "5"))
    resync_interval_seconds: int = int(os.getenv("RESYNC_INTERVAL_SECONDS", "300"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

settings = Settings()

def make_engine(database_url: str, sslmode: str = ""):
    """Create an engine with the connect args each backend needs"""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    elif sslmode and database_url.startswith("postgresql"):
        connect_args["sslmode"] = sslmode
    return create_engine(database_url, connect_args=connect_args)

engine = make_engine(settings.database_url, settings.database_sslmode)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
