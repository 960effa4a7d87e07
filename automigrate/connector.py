from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from .querylog import QueryLog


class Connector(ABC):
  """Transport the migration engine issues its SQL through.

  The engine only ever calls :meth:`query` for catalog reads and
  :meth:`execute` for DDL; it never opens a transaction around DDL.
  """

  def __init__(self, query_log: QueryLog = None):
    self.query_log = query_log if query_log is not None else QueryLog()

  @property
  @abstractmethod
  def type(self) -> str:
    pass

  @property
  @abstractmethod
  def is_connected(self) -> bool:
    pass

  @abstractmethod
  def connect(self):
    pass

  @abstractmethod
  def close(self):
    pass

  @abstractmethod
  def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
    pass

  @abstractmethod
  def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
    pass

  def __enter__(self):
    self.connect()
    return self

  def __exit__(self, type, value, tb):
    if self.is_connected:
      self.close()

  class ConnectorError(Exception):
    pass

  class DriverNotSupportedError(ConnectorError):
    def __init__(self, name):
      super().__init__('The driver `%s` is not supported' % name)

  class AlreadyConnectedError(ConnectorError):
    def __init__(self):
      super().__init__('Connector is already connected')

  class NotConnectedError(ConnectorError):
    def __init__(self):
      super().__init__('Connector is not connected')

  class InvalidConnectionStateError(ConnectorError):
    def __init__(self, expected, actual):
      super().__init__('Invalid connection state. Expected: %s; actual: %s' %
                       (expected, actual))

  class StatementError(ConnectorError):
    def __init__(self, sql, cause):
      super().__init__('Sql statement failed: %s\nsql: %s' % (cause, sql))
      self.sql = sql
      self.cause = cause
