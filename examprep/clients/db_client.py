from typing import Optional
import psycopg2
from psycopg2.extras import RealDictCursor
from examprep.config import config
from examprep.exceptions import ConfigurationError

def get_db_connection(database_url: Optional[str] = None):
    """Get PostgreSQL connection"""
    database_url = database_url or config.DATABASE_URL
    if not database_url:
        raise ConfigurationError("Server configuration error. Missing database credentials.")
    return psycopg2.connect(database_url, cursor_factory=RealDictCursor)
