from abc import ABC, abstractmethod

from .errors import UnsupportedMigrationError
from .schema import ColumnDefinition, ColumnType, TableSchema, validate_schema


class MigrationBuilder(ABC):
  """Translates schema values into additive DDL for one SQL dialect.

  Builders hold no connection and perform no I/O. The only statements they
  can produce are ``CREATE TABLE`` and ``ALTER TABLE ... ADD COLUMN``.
  """

  name = None

  @abstractmethod
  def map_type(self, column_type: ColumnType) -> str:
    pass

  @abstractmethod
  def render_literal(self, value, column_type: ColumnType) -> str:
    pass

  @abstractmethod
  def is_type_compatible(self, column_type: ColumnType, declared_type: str) -> bool:
    pass

  def quote(self, identifier: str) -> str:
    return '"%s"' % identifier.replace('"', '""')

  def build_create_table(self, schema: TableSchema) -> str:
    validate_schema(schema)

    column_sql_list = ['  ' + self._column_sql(c) for c in schema.columns]
    return 'CREATE TABLE %s (\n' % self.quote(schema.name) \
        + ',\n'.join(column_sql_list) \
        + '\n)'

  def build_add_column(self, table_name: str, column: ColumnDefinition) -> str:
    validate_schema(TableSchema(table_name, (column,)))

    if column.is_primary_key:
      raise UnsupportedMigrationError(
          table_name, column.name,
          'primary key columns can only be declared when the table is created')
    if column.is_required:
      raise UnsupportedMigrationError(
          table_name, column.name,
          'a NOT NULL column needs a default value to be added to an existing table')
    self._check_add_column(table_name, column)

    return 'ALTER TABLE %s ADD COLUMN %s' % (
        self.quote(table_name), self._column_sql(column))

  def _check_add_column(self, table_name: str, column: ColumnDefinition):
    pass

  def _primary_key_sql(self, column: ColumnDefinition) -> str:
    return 'PRIMARY KEY'

  def _column_sql(self, c: ColumnDefinition) -> str:
    result = '%s %s' % (self.quote(c.name), self.map_type(c.type))
    if c.is_primary_key:
      result += ' ' + self._primary_key_sql(c)
    if not c.nullable or c.is_primary_key:
      result += ' NOT NULL'
    else:
      result += ' NULL'
    if c.unique and not c.is_primary_key:
      result += ' UNIQUE'
    if c.has_default:
      result += ' DEFAULT %s' % self.render_literal(c.default_value, c.type)
    return result

  @staticmethod
  def _quote_string(value: str) -> str:
    return "'%s'" % value.replace("'", "''")
