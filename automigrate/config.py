"""Migration settings loaded from the environment."""

from functools import lru_cache
from typing import Iterable, List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .schema import TableSchema


class Settings(BaseSettings):
  """Settings read from ``AUTOMIGRATE_*`` environment variables."""

  model_config = SettingsConfigDict(
      env_prefix='AUTOMIGRATE_',
      env_file='.env',
      env_file_encoding='utf-8',
      extra='ignore',
  )

  ENABLED: bool = True
  VERBOSE: bool = False

  # Database
  DRIVER: str = 'sqlite'
  DB_FILE: str = ':memory:'

  # Logging
  LOG_LEVEL: str = 'INFO'


@lru_cache()
def get_settings() -> Settings:
  return Settings()


class MigrationConfig(object):
  """How, and whether, migrations run at startup.

  Three modes: disabled, an explicit schema list, or schemas collected from
  objects that may expose a ``schema`` attribute.
  """

  def __init__(self, enabled: bool, schemas: Iterable[TableSchema] = (), verbose: bool = False):
    self.enabled = enabled
    self.schemas: List[TableSchema] = list(schemas)
    self.verbose = verbose

  @classmethod
  def disabled(cls):
    return cls(enabled=False)

  @classmethod
  def explicit(cls, schemas: Iterable[TableSchema], verbose: bool = False):
    return cls(enabled=True, schemas=schemas, verbose=verbose)

  @classmethod
  def from_resources(cls, resources: Iterable, verbose: bool = False):
    schemas = []
    for r in resources:
      schema = getattr(r, 'schema', None)
      if schema is not None:
        schemas.append(schema)
    return cls(enabled=True, schemas=schemas, verbose=verbose)

  @classmethod
  def from_settings(cls, settings: Settings = None,
                    schemas: Optional[Iterable[TableSchema]] = None,
                    resources: Optional[Iterable] = None):
    settings = settings or get_settings()
    if not settings.ENABLED:
      return cls.disabled()
    if schemas is not None and resources is not None:
      raise ValueError('`schemas` and `resources` are mutually exclusive')
    if resources is not None:
      return cls.from_resources(resources, verbose=settings.VERBOSE)
    return cls.explicit(schemas or [], verbose=settings.VERBOSE)

  def apply(self, runner):
    if not self.enabled:
      return None
    return runner.run(self.schemas, verbose=self.verbose)
