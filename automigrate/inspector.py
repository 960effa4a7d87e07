import logging
from abc import ABC, abstractmethod
from typing import List

from .connector import Connector
from .errors import InspectionError
from .schema import ExistingColumnInfo

_log = logging.getLogger(__name__)


class SchemaInspector(ABC):
  """Read-only view of the live database catalog."""

  def __init__(self, connector: Connector):
    self._connector = connector

  @property
  def connector(self) -> Connector:
    return self._connector

  @abstractmethod
  def table_exists(self, name: str) -> bool:
    pass

  @abstractmethod
  def list_columns(self, table_name: str) -> List[ExistingColumnInfo]:
    pass

  def _query(self, table_name: str, sql: str, params=None):
    try:
      return self._connector.query(sql, params or [])
    except Connector.StatementError as err:
      _log.error('Catalog query failed for table `%s`' % table_name)
      raise InspectionError(table_name, err.cause, sql=sql) from err
    except Connector.ConnectorError as err:
      raise InspectionError(table_name, err, sql=sql) from err
