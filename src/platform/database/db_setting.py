"""
Database configuration entry point

Re-exports the SQLAlchemy pieces from orm_db_setting.py.
"""

from src.platform.database.orm_db_setting import AsyncEngineManager, Base, Database


__all__ = [
    'AsyncEngineManager',
    'Base',
    'Database',
]
