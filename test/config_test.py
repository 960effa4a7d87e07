import logging
import os
import tempfile
import unittest
from unittest import mock

import automigrate
from automigrate.config import MigrationConfig, Settings
from automigrate.runner import NoChange, TableCreated
from automigrate.schema import ColumnDefinition, ColumnType, TableSchema
from automigrate.sqlite import SqliteConnector

USERS = TableSchema('users', [
    ColumnDefinition('id', ColumnType.INTEGER, is_primary_key=True, auto_increment=True),
    ColumnDefinition('name', ColumnType.TEXT, nullable=False),
])
POSTS = TableSchema('posts', [
    ColumnDefinition('id', ColumnType.INTEGER, is_primary_key=True, auto_increment=True),
])


class _Resource(object):
  def __init__(self, schema=None):
    if schema is not None:
      self.schema = schema


class SettingsTestCase(unittest.TestCase):
  def test_defaults(self):
    with mock.patch.dict(os.environ, {}, clear=True):
      settings = Settings(_env_file=None)

    assert settings.ENABLED == True
    assert settings.VERBOSE == False
    assert settings.DRIVER == 'sqlite'
    assert settings.DB_FILE == ':memory:'

  def test_environment(self):
    env = {
        'AUTOMIGRATE_ENABLED': 'false',
        'AUTOMIGRATE_VERBOSE': 'true',
        'AUTOMIGRATE_DB_FILE': '/tmp/app.db',
    }
    with mock.patch.dict(os.environ, env, clear=True):
      settings = Settings(_env_file=None)

    assert settings.ENABLED == False
    assert settings.VERBOSE == True
    assert settings.DB_FILE == '/tmp/app.db'


class MigrationConfigTestCase(unittest.TestCase):
  def setUp(self):
    self.connector = SqliteConnector()
    self.connector.connect()

  def tearDown(self):
    self.connector.close()

  def test_disabled(self):
    config = MigrationConfig.disabled()

    assert automigrate.migrate(self.connector, config) is None
    assert not automigrate.get_runner(self.connector).inspector.table_exists('users')

  def test_explicit(self):
    config = MigrationConfig.explicit([USERS, POSTS], verbose=True)
    report = automigrate.migrate(self.connector, config)

    assert report.created_tables == ['users', 'posts']

    report = automigrate.migrate(self.connector, config)
    assert report.outcomes == [NoChange('users'), NoChange('posts')]

  def test_fromResources(self):
    resources = [_Resource(POSTS), _Resource(), _Resource(USERS)]
    config = MigrationConfig.from_resources(resources)

    assert config.schemas == [POSTS, USERS]

    report = automigrate.migrate(self.connector, config)
    assert report.created_tables == ['posts', 'users']

  def test_fromSettings(self):
    settings = Settings(_env_file=None, ENABLED=True, VERBOSE=True)

    config = MigrationConfig.from_settings(settings, schemas=[USERS])
    assert config.enabled
    assert config.verbose
    assert config.schemas == [USERS]

    config = MigrationConfig.from_settings(settings, resources=[_Resource(POSTS)])
    assert config.schemas == [POSTS]

  def test_fromSettingsDisabled(self):
    settings = Settings(_env_file=None, ENABLED=False)
    config = MigrationConfig.from_settings(settings, schemas=[USERS])

    assert not config.enabled
    assert config.apply(automigrate.get_runner(self.connector)) is None

  def test_fromSettingsRejectsBothSources(self):
    settings = Settings(_env_file=None)

    with self.assertRaises(ValueError):
      MigrationConfig.from_settings(settings, schemas=[USERS], resources=[])

  def test_apply(self):
    report = MigrationConfig.explicit([USERS]).apply(automigrate.get_runner(self.connector))

    assert isinstance(report.outcomes[0], TableCreated)


class ConnectFromSettingsTestCase(unittest.TestCase):
  def tearDown(self):
    logging.getLogger('automigrate').setLevel(logging.NOTSET)

  def test_opensConfiguredDatabase(self):
    with tempfile.TemporaryDirectory() as d:
      db_file = os.path.join(d, 'app.db')
      settings = Settings(_env_file=None, DRIVER='sqlite', DB_FILE=db_file, LOG_LEVEL='warning')

      connector = automigrate.connect_from_settings(settings)
      try:
        assert connector.is_connected
        assert connector.type == 'sqlite'
        assert connector.db_file == db_file
        report = automigrate.migrate(connector, MigrationConfig.from_settings(settings, schemas=[USERS]))
        assert report.created_tables == ['users']
      finally:
        connector.close()

      assert automigrate.database_exists('sqlite', {'db_file': db_file})
    assert logging.getLogger('automigrate').level == logging.WARNING

  def test_unknownLogLevel(self):
    settings = Settings(_env_file=None, LOG_LEVEL='chatty')

    with self.assertRaises(ValueError):
      automigrate.connect_from_settings(settings)

  def test_unsupportedDriver(self):
    settings = Settings(_env_file=None, DRIVER='oracle')

    with self.assertRaises(automigrate.Connector.DriverNotSupportedError):
      automigrate.connect_from_settings(settings)
