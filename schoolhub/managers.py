# managers.py

from django.db import models, connections
from django.conf import settings
from threading import local
import logging

logger = logging.getLogger(__name__)

_thread_locals = local()


def get_current_db():
    """Get the current school database name for this thread"""
    return getattr(_thread_locals, 'current_db', None)


def set_current_db(db):
    """Set the current school database name for this thread"""
    if not db:
        return False

    if db not in settings.DATABASES:
        logger.warning(f"Database '{db}' not found in settings")
        return False

    _thread_locals.current_db = db
    logger.debug(f"Set current_db to: {db}")
    return True


def clear_current_db():
    """Clear the current database setting"""
    if hasattr(_thread_locals, 'current_db'):
        delattr(_thread_locals, 'current_db')


def get_school_db():
    """
    Database alias that school data is written to for this thread.

    Used to bind transaction.atomic() to the same connection the
    SchoolManager querysets use, so a batch rollback covers every row.
    """
    current_db = get_current_db()
    if current_db and current_db in connections:
        return current_db
    return 'default'


class DatabaseContext:
    """Context manager for temporarily switching the school database"""

    def __init__(self, db_name):
        self.db_name = db_name
        self.previous_db = None

    def __enter__(self):
        self.previous_db = get_current_db()
        set_current_db(self.db_name)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.previous_db:
            set_current_db(self.previous_db)
        else:
            clear_current_db()


class SchoolManager(models.Manager):
    """Manager that automatically uses the current school database"""

    def get_queryset(self):
        current_db = get_current_db()

        if not current_db or current_db == 'default':
            return super().get_queryset()

        if current_db not in connections:
            logger.error(f"Invalid database '{current_db}'")
            return super().get_queryset()

        return super().get_queryset().using(current_db)

    # Creation methods go through get_queryset() so they hit the same database
    def create(self, **kwargs):
        return self.get_queryset().create(**kwargs)

    def bulk_create(self, objs, **kwargs):
        return self.get_queryset().bulk_create(objs, **kwargs)

    def get_or_create(self, **kwargs):
        return self.get_queryset().get_or_create(**kwargs)

    def update_or_create(self, **kwargs):
        return self.get_queryset().update_or_create(**kwargs)


def with_database(db_name):
    """
    Decorator to execute a function with a specific database context.

    Example:
        @with_database('school_abc')
        def regenerate():
            FinalResultService.generate_final_results(school_class, year)
    """
    def decorator(func):
        def wrapper(*args, **kwargs):
            with DatabaseContext(db_name):
                return func(*args, **kwargs)
        return wrapper
    return decorator
