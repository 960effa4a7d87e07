import logging
import os
from .config import MigrationConfig, Settings, get_settings
from .connector import Connector
from .errors import (ExecutionError, InspectionError, MigrationError,
                     SchemaValidationError, UnsupportedMigrationError)
from .postgres import PostgresInspector, PostgresMigrationBuilder
from .runner import (ColumnAdded, MigrationFailed, MigrationReport,
                     MigrationRunner, NoChange, TableCreated, TypeDrift)
from .schema import (ColumnDefinition, ColumnType, ExistingColumnInfo,
                     SchemaRegistry, TableSchema)
from .sqlite import SqliteConnector, SqliteInspector, SqliteMigrationBuilder

_CONNECTORS = {
    'sqlite': SqliteConnector
}

_DIALECTS = {
    'sqlite': (SqliteInspector, SqliteMigrationBuilder),
    'postgres': (PostgresInspector, PostgresMigrationBuilder),
}


def get_connector(driver: str, opts: dict = None) -> Connector:
  if not driver in _CONNECTORS:
    raise Connector.DriverNotSupportedError(driver)

  return _CONNECTORS[driver](**(opts or {}))


def get_dialect(name: str):
  if not name in _DIALECTS:
    raise Connector.DriverNotSupportedError(name)
  return _DIALECTS[name]


def get_runner(connector: Connector, registry: SchemaRegistry = None,
               logger: logging.Logger = None) -> MigrationRunner:
  inspector_type, builder_type = get_dialect(connector.type)
  return MigrationRunner(
      connector,
      inspector_type(connector),
      builder_type(),
      registry=registry,
      logger=logger
  )


def connect_from_settings(settings: Settings = None) -> Connector:
  """Open a connector described by ``AUTOMIGRATE_*`` settings.

  Also applies ``LOG_LEVEL`` to the ``automigrate`` logger.
  """
  settings = settings or get_settings()
  level = logging.getLevelName(settings.LOG_LEVEL.upper())
  if not isinstance(level, int):
    raise ValueError('`LOG_LEVEL`: unknown level `%s`' % settings.LOG_LEVEL)
  logging.getLogger(__name__).setLevel(level)

  opts = {}
  if settings.DRIVER == 'sqlite':
    opts['db_file'] = settings.DB_FILE
  connector = get_connector(settings.DRIVER, opts)
  connector.connect()
  return connector


def migrate(connector: Connector, config: MigrationConfig, logger: logging.Logger = None):
  """Run the configured migrations on an open connector.

  Returns ``None`` when migrations are disabled.
  """
  return config.apply(get_runner(connector, logger=logger))


def database_exists(driver: str, opts: dict = None):
  opts = opts or {}
  if driver == 'sqlite':
    if not 'db_file' in opts:
      raise ValueError(
          '`opts`: `db_file` option is required when checking Sqlite databases')
    return os.path.exists(opts['db_file'])
  raise NotImplementedError()
