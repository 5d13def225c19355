# routers.py
import logging
from django.conf import settings
from django.db import connections

from .managers import get_current_db

logger = logging.getLogger(__name__)


class SchoolRouter:
    """
    Router for the multi-database setup.

    Each school owns a database; the shared 'default' database keeps Django's
    own tables. When no school database is configured (single school, tests)
    the school apps live in 'default' too.
    """

    default_apps = {'admin', 'auth', 'contenttypes', 'sessions'}
    school_apps = {
        'utils',
        'academics',
        'students',
        'results',
    }

    def __init__(self):
        self._school_dbs = set()
        self._update_school_dbs()

    def _update_school_dbs(self):
        """Cache all school databases from settings"""
        self._school_dbs = {
            db_name for db_name in settings.DATABASES.keys()
            if db_name != 'default'
        }
        logger.debug(f"School databases: {self._school_dbs}")

    def db_for_read(self, model, **hints):
        app_label = model._meta.app_label
        if app_label in self.default_apps:
            return 'default'
        if app_label in self.school_apps:
            db = get_current_db()
            if db in connections:
                return db
            # No school selected: let Django fall back to 'default'
            return None
        return 'default'

    def db_for_write(self, model, **hints):
        return self.db_for_read(model, **hints)

    def allow_relation(self, obj1, obj2, **hints):
        app1 = obj1._meta.app_label
        app2 = obj2._meta.app_label
        if app1 in self.school_apps and app2 in self.school_apps:
            # Rows of two different schools are never related
            if obj1._state.db and obj2._state.db:
                return obj1._state.db == obj2._state.db
            return True
        if app1 in self.default_apps and app2 in self.default_apps:
            return True
        return None

    def allow_migrate(self, db, app_label, model_name=None, **hints):
        if app_label in self.default_apps:
            return db == 'default'

        if app_label in self.school_apps:
            if not self._school_dbs:
                return db == 'default'
            # Never migrate school apps to default when schools have their own DBs
            return db in self._school_dbs

        return db == 'default'
