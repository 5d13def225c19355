from io import StringIO

import pytest
from django.apps import apps
from django.conf import settings
from django.core.management import call_command
from django.db import connection
from django.db.migrations.loader import MigrationLoader
from django.db.models import UUIDField

SCHOOL_APPS = ('academics', 'students', 'results')

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize('app_label', SCHOOL_APPS)
def test_app_ships_initial_migration(app_label):
    loader = MigrationLoader(connection)
    assert (app_label, '0001_initial') in loader.disk_migrations
    assert app_label not in loader.unmigrated_apps


def test_models_match_migrations():
    out = StringIO()
    call_command('makemigrations', *SCHOOL_APPS, check=True, dry_run=True, stdout=out)
    assert 'No changes detected' in out.getvalue()


def test_tables_created_by_migrations():
    tables = set(connection.introspection.table_names())
    for app_label in SCHOOL_APPS:
        for model in apps.get_app_config(app_label).get_models():
            assert model._meta.db_table in tables


@pytest.mark.parametrize('app_label', ('utils',) + SCHOOL_APPS)
def test_app_configs_use_project_auto_field(app_label):
    config = apps.get_app_config(app_label)
    assert 'default_auto_field' not in type(config).__dict__
    assert config.default_auto_field == settings.DEFAULT_AUTO_FIELD


@pytest.mark.parametrize('app_label', SCHOOL_APPS)
def test_models_use_uuid_primary_key(app_label):
    for model in apps.get_app_config(app_label).get_models():
        assert isinstance(model._meta.pk, UUIDField)
