import logging
import sqlite3
import time
from datetime import datetime, timedelta
from typing import List

from .builder import MigrationBuilder
from .connector import Connector
from .errors import InspectionError, UnsupportedMigrationError
from .inspector import SchemaInspector
from .querylog import QueryLog
from .schema import ColumnDefinition, ColumnType, ExistingColumnInfo

_log = logging.getLogger(__name__)

_TYPE_NAMES = {
    ColumnType.INTEGER: 'INTEGER',
    ColumnType.TEXT: 'TEXT',
    ColumnType.REAL: 'REAL',
    ColumnType.BOOLEAN: 'INTEGER',
    ColumnType.DATETIME: 'TEXT',
    ColumnType.BLOB: 'BLOB',
}


def encode_value(value, column_type: ColumnType):
  if not value is None:
    if column_type == ColumnType.BOOLEAN:
      return 1 if value else 0
    if column_type == ColumnType.DATETIME:
      return value.isoformat()
    if column_type == ColumnType.BLOB:
      return bytes(value)
  return value


def decode_value(value, column_type: ColumnType):
  if not value is None:
    if column_type == ColumnType.BOOLEAN:
      return bool(value)
    if column_type == ColumnType.DATETIME:
      return datetime.fromisoformat(value)
  return value


def type_affinity(declared_type: str) -> str:
  t = (declared_type or '').upper()
  if 'INT' in t:
    return 'INTEGER'
  if 'CHAR' in t or 'CLOB' in t or 'TEXT' in t:
    return 'TEXT'
  if 'BLOB' in t or t == '':
    return 'BLOB'
  if 'REAL' in t or 'FLOA' in t or 'DOUB' in t:
    return 'REAL'
  return 'NUMERIC'


class SqliteConnector(Connector):
  def __init__(self, db_file=':memory:', query_log: QueryLog = None):
    super().__init__(query_log)
    self._con = None
    self._db_file = db_file

  @property
  def type(self):
    return 'sqlite'

  @property
  def db_file(self):
    return self._db_file

  @property
  def is_connected(self):
    return not self._con is None

  def connect(self):
    if not self._con is None:
      raise Connector.AlreadyConnectedError()

    self._con = sqlite3.connect(
        self._db_file,
        isolation_level=None,
    )
    self._con.row_factory = sqlite3.Row

  def close(self):
    if self._con is None:
      raise Connector.InvalidConnectionStateError(
          expected='open', actual='closed')

    self._con.close()
    self._con = None

  def query(self, sql: str, params=None):
    cursor, elapsed = self._execute(sql, params)
    rows = [dict(r) for r in cursor.fetchall()]
    self.query_log.log(sql, params, duration=elapsed, row_count=len(rows))
    return rows

  def execute(self, sql: str, params=None):
    cursor, elapsed = self._execute(sql, params)
    self.query_log.log(
        sql, params, duration=elapsed,
        row_count=cursor.rowcount if cursor.rowcount >= 0 else None)
    if sql.lstrip().upper().startswith('INSERT'):
      return cursor.lastrowid
    return cursor.rowcount

  def _execute(self, sql: str, sql_params: list = None):
    if self._con is None:
      raise Connector.NotConnectedError()

    cursor = self._con.cursor()
    begin = time.perf_counter()
    error = None
    try:
      cursor.execute(sql, sql_params or [])
      return cursor, timedelta(seconds=time.perf_counter() - begin)
    except sqlite3.Error as err:
      error = err
      raise Connector.StatementError(sql, err) from err
    finally:
      state_txt = 'completed' if error is None else 'failed'
      log_fn = _log.debug if error is None else _log.error
      elapsed_mtime = int((time.perf_counter() - begin) * 1000)
      log_fn('Sql statement %s:\nsql: %s\nduration_ms: %d' %
             (state_txt, sql, elapsed_mtime))


class SqliteInspector(SchemaInspector):
  def table_exists(self, name: str) -> bool:
    rows = self._query(
        name,
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
        [name]
    )
    return len(rows) > 0

  def list_columns(self, table_name: str) -> List[ExistingColumnInfo]:
    rows = self._query(
        table_name,
        "SELECT p.* FROM sqlite_master m JOIN pragma_table_info(m.name) p "
        "WHERE m.type = 'table' AND m.name = ? ORDER BY p.cid",
        [table_name]
    )
    if len(rows) == 0:
      raise InspectionError(table_name, 'table does not exist')

    return [
        ExistingColumnInfo(
            name=r['name'],
            declared_type=r['type'] or '',
            nullable=not r['notnull'] and not r['pk'],
            is_primary_key=r['pk'] > 0,
        )
        for r in rows
    ]


class SqliteMigrationBuilder(MigrationBuilder):
  name = 'sqlite'

  def map_type(self, column_type: ColumnType) -> str:
    if not column_type in _TYPE_NAMES:
      raise NotImplementedError()
    return _TYPE_NAMES[column_type]

  def render_literal(self, value, column_type: ColumnType) -> str:
    encoded = encode_value(value, column_type)
    if isinstance(encoded, bytes):
      return "X'%s'" % encoded.hex().upper()
    if isinstance(encoded, str):
      return self._quote_string(encoded)
    return repr(encoded)

  def is_type_compatible(self, column_type: ColumnType, declared_type: str) -> bool:
    return type_affinity(declared_type) == type_affinity(self.map_type(column_type))

  def _primary_key_sql(self, column: ColumnDefinition) -> str:
    if column.auto_increment:
      return 'PRIMARY KEY AUTOINCREMENT'
    return 'PRIMARY KEY'

  def _check_add_column(self, table_name: str, column: ColumnDefinition):
    if column.unique:
      raise UnsupportedMigrationError(
          table_name, column.name,
          'SQLite cannot add a UNIQUE column to an existing table')
