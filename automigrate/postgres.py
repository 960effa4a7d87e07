from datetime import datetime
from typing import List

from .builder import MigrationBuilder
from .errors import InspectionError
from .inspector import SchemaInspector
from .schema import ColumnDefinition, ColumnType, ExistingColumnInfo

_TYPE_NAMES = {
    ColumnType.INTEGER: 'INTEGER',
    ColumnType.TEXT: 'TEXT',
    ColumnType.REAL: 'DOUBLE PRECISION',
    ColumnType.BOOLEAN: 'BOOLEAN',
    ColumnType.DATETIME: 'TIMESTAMP',
    ColumnType.BLOB: 'BYTEA',
}

# information_schema.columns.data_type values accepted for each portable type
_CATALOG_TYPES = {
    ColumnType.INTEGER: {'integer', 'bigint', 'smallint'},
    ColumnType.TEXT: {'text', 'character varying', 'character'},
    ColumnType.REAL: {'double precision', 'real', 'numeric'},
    ColumnType.BOOLEAN: {'boolean'},
    ColumnType.DATETIME: {
        'timestamp', 'timestamp without time zone', 'timestamp with time zone'},
    ColumnType.BLOB: {'bytea'},
}


class PostgresInspector(SchemaInspector):
  """Catalog reader for PostgreSQL, scoped to ``current_schema()``.

  Works with any connector that accepts ``%s`` placeholders.
  """

  def table_exists(self, name: str) -> bool:
    rows = self._query(name, """
        SELECT table_name
        FROM information_schema.tables
        WHERE table_schema = current_schema()
        AND table_type = 'BASE TABLE'
        AND table_name = %s
    """, [name])
    return len(rows) > 0

  def list_columns(self, table_name: str) -> List[ExistingColumnInfo]:
    rows = self._query(table_name, """
        SELECT column_name, data_type, is_nullable
        FROM information_schema.columns
        WHERE table_schema = current_schema() AND table_name = %s
        ORDER BY ordinal_position
    """, [table_name])
    if len(rows) == 0:
      raise InspectionError(table_name, 'table does not exist')

    key_rows = self._query(table_name, """
        SELECT kcu.column_name
        FROM information_schema.table_constraints tc
        JOIN information_schema.key_column_usage kcu
          ON tc.constraint_name = kcu.constraint_name
          AND tc.table_schema = kcu.table_schema
        WHERE tc.constraint_type = 'PRIMARY KEY'
        AND tc.table_schema = current_schema()
        AND tc.table_name = %s
    """, [table_name])
    primary_key = {r['column_name'] for r in key_rows}

    return [
        ExistingColumnInfo(
            name=r['column_name'],
            declared_type=r['data_type'],
            nullable=r['is_nullable'] == 'YES',
            is_primary_key=r['column_name'] in primary_key,
        )
        for r in rows
    ]


class PostgresMigrationBuilder(MigrationBuilder):
  name = 'postgres'

  def map_type(self, column_type: ColumnType) -> str:
    if not column_type in _TYPE_NAMES:
      raise NotImplementedError()
    return _TYPE_NAMES[column_type]

  def render_literal(self, value, column_type: ColumnType) -> str:
    if column_type == ColumnType.BOOLEAN:
      return 'TRUE' if value else 'FALSE'
    if isinstance(value, datetime):
      return self._quote_string(value.isoformat())
    if isinstance(value, (bytes, bytearray)):
      return "'\\x%s'::bytea" % bytes(value).hex()
    if isinstance(value, str):
      return self._quote_string(value)
    return repr(value)

  def is_type_compatible(self, column_type: ColumnType, declared_type: str) -> bool:
    return (declared_type or '').strip().lower() in _CATALOG_TYPES[column_type]

  def _primary_key_sql(self, column: ColumnDefinition) -> str:
    if column.auto_increment:
      return 'GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY'
    return 'PRIMARY KEY'
