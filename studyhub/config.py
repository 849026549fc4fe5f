"""Environment configuration"""
import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_supabase_url() -> Optional[str]:
    return os.getenv("SUPABASE_URL")


def get_supabase_service_role_key() -> Optional[str]:
    return os.getenv("SUPABASE_SERVICE_ROLE_KEY")


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_cors_origins() -> List[str]:
    """Comma separated origins; '*' when unset"""
    raw = os.getenv("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_daily_goal_minutes() -> int:
    """Daily study goal used for progress (4 hours by default)"""
    return int(os.getenv("DAILY_GOAL_MINUTES", "240"))
