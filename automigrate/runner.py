import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .builder import MigrationBuilder
from .connector import Connector
from .errors import (ExecutionError, InspectionError, MigrationError,
                     SchemaValidationError, UnsupportedMigrationError)
from .inspector import SchemaInspector
from .schema import (ColumnDefinition, ColumnType, ExistingColumnInfo,
                     SchemaRegistry, TableSchema, validate_schema)

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableCreated:
  table: str
  sql: str

  def describe(self):
    return 'Created table `%s`' % self.table


@dataclass(frozen=True)
class ColumnAdded:
  table: str
  column: str
  sql: str

  def describe(self):
    return 'Added column `%s` to table `%s`' % (self.column, self.table)


@dataclass(frozen=True)
class NoChange:
  table: str

  def describe(self):
    return 'Table `%s` is up to date' % self.table


@dataclass(frozen=True)
class MigrationFailed:
  table: str
  error: MigrationError
  column: Optional[str] = None

  def describe(self):
    return 'Failed to migrate table `%s`: %s' % (self.table, self.error)


@dataclass(frozen=True)
class TypeDrift:
  table: str
  column: str
  declared_type: str
  expected: ColumnType

  def describe(self):
    return 'Column `%s` of table `%s` has type `%s`, declared as `%s`; left unchanged' % (
        self.column, self.table, self.declared_type, self.expected.value)


@dataclass
class MigrationReport:
  outcomes: list = field(default_factory=list)
  statements: List[str] = field(default_factory=list)
  drift: List[TypeDrift] = field(default_factory=list)

  @property
  def failures(self) -> List[MigrationFailed]:
    return [o for o in self.outcomes if isinstance(o, MigrationFailed)]

  @property
  def created_tables(self) -> List[str]:
    return [o.table for o in self.outcomes if isinstance(o, TableCreated)]

  @property
  def added_columns(self) -> List[tuple]:
    return [(o.table, o.column) for o in self.outcomes if isinstance(o, ColumnAdded)]

  @property
  def has_changes(self) -> bool:
    return len(self.statements) > 0

  @property
  def is_successful(self) -> bool:
    return len(self.failures) == 0

  def __iter__(self):
    return iter(self.outcomes)

  def __len__(self):
    return len(self.outcomes)


class MigrationRunner(object):
  """Brings a database up to a list of declared table schemas.

  Only additive statements are ever issued: missing tables are created and
  missing columns are added. Nothing is dropped, renamed or retyped.
  Schemas are processed strictly in the order they are supplied.
  """

  def __init__(self, connector: Connector, inspector: SchemaInspector,
               builder: MigrationBuilder, registry: SchemaRegistry = None,
               logger: logging.Logger = None):
    self._connector = connector
    self._inspector = inspector
    self._builder = builder
    self._registry = registry
    self._logger = logger or _log

  @property
  def inspector(self) -> SchemaInspector:
    return self._inspector

  @property
  def builder(self) -> MigrationBuilder:
    return self._builder

  def needs_migration(self, schema: TableSchema) -> bool:
    if not self._inspector.table_exists(schema.name):
      return True
    return len(self.get_missing_columns(schema)) > 0

  def get_missing_columns(self, schema: TableSchema) -> List[ColumnDefinition]:
    if not self._inspector.table_exists(schema.name):
      return []
    return self._missing_columns(schema, self._inspector.list_columns(schema.name))

  def plan(self, schemas: Iterable[TableSchema] = None) -> List[str]:
    statements = []
    for schema in self._resolve(schemas):
      validate_schema(schema)
      if not self._inspector.table_exists(schema.name):
        statements.append(self._builder.build_create_table(schema))
        continue
      for c in self.get_missing_columns(schema):
        statements.append(self._builder.build_add_column(schema.name, c))
    return statements

  def run(self, schemas: Iterable[TableSchema] = None, verbose: bool = False) -> MigrationReport:
    schemas = self._resolve(schemas)
    report = MigrationReport()
    _log.info('Running migrations for %d table(s)' % len(schemas))

    for schema in schemas:
      try:
        self._migrate(schema, report, verbose)
      except InspectionError as err:
        self._report_error(err, verbose)
        raise
      except (SchemaValidationError, UnsupportedMigrationError, ExecutionError) as err:
        self._record(report, MigrationFailed(schema.name, err, column=err.column), verbose)

    _log.info('Migrations finished: %d statement(s) executed, %d failure(s)' %
              (len(report.statements), len(report.failures)))
    return report

  def _migrate(self, schema: TableSchema, report: MigrationReport, verbose: bool):
    validate_schema(schema)

    if not self._inspector.table_exists(schema.name):
      sql = self._builder.build_create_table(schema)
      self._execute(schema.name, sql, report)
      self._record(report, TableCreated(schema.name, sql), verbose)
      return

    existing = self._inspector.list_columns(schema.name)
    self._check_drift(schema, existing, report, verbose)

    missing = self._missing_columns(schema, existing)
    if len(missing) == 0:
      self._record(report, NoChange(schema.name), verbose)
      return

    # build every statement first so an unsupported column leaves the table untouched
    statements = [(c, self._builder.build_add_column(schema.name, c)) for c in missing]
    for c, sql in statements:
      self._execute(schema.name, sql, report, column=c.name)
      self._record(report, ColumnAdded(schema.name, c.name, sql), verbose)

  def _execute(self, table: str, sql: str, report: MigrationReport, column: str = None):
    try:
      self._connector.execute(sql)
    except Connector.StatementError as err:
      raise ExecutionError(table, sql, err.cause, column=column) from err
    report.statements.append(sql)

  def _check_drift(self, schema: TableSchema, existing: List[ExistingColumnInfo],
                   report: MigrationReport, verbose: bool):
    for info in existing:
      declared = schema.column(info.name)
      if declared is None:
        continue
      if not self._builder.is_type_compatible(declared.type, info.declared_type):
        drift = TypeDrift(schema.name, info.name, info.declared_type, declared.type)
        report.drift.append(drift)
        if verbose:
          self._logger.warning(drift.describe())
        else:
          _log.warning(drift.describe())

  @staticmethod
  def _missing_columns(schema: TableSchema, existing: List[ExistingColumnInfo]) -> List[ColumnDefinition]:
    existing_names = {c.name.lower() for c in existing}
    return [c for c in schema.columns if not c.name.lower() in existing_names]

  def _resolve(self, schemas: Optional[Iterable[TableSchema]]) -> List[TableSchema]:
    if schemas is None:
      schemas = self._registry if self._registry is not None else []
    schemas = list(schemas)

    seen = set()
    for s in schemas:
      if s.name in seen:
        raise SchemaValidationError(s.name, 'table is declared more than once')
      seen.add(s.name)
    return schemas

  def _record(self, report: MigrationReport, outcome, verbose: bool):
    report.outcomes.append(outcome)
    if isinstance(outcome, MigrationFailed):
      self._report_error(outcome.error, verbose)
    elif verbose:
      self._logger.info(outcome.describe())

  def _report_error(self, err: MigrationError, verbose: bool):
    if verbose:
      self._logger.error('Failed to migrate table `%s`: %s' % (err.table, err))
    else:
      _log.warning('Migration of table `%s` failed: %s' % (err.table, err))
