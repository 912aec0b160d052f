import logging
import os
from typing import Optional

from lowborn.application.services.balance_tables import DEFAULT_SEED
from lowborn.application.services.event_bus import EventBus
from lowborn.application.services.run_session_service import (
    DEFAULT_SLOT,
    RunSessionService,
    register_run_log_handlers,
)
from lowborn.domain.repositories import SaveRepository
from lowborn.infrastructure.inmemory.inmemory_save_repo import InMemorySaveRepository

DATABASE_URL_ENV = "LOWBORN_DATABASE_URL"
LOG_LEVEL_ENV = "LOWBORN_LOG_LEVEL"
DEFAULT_SEED_ENV = "LOWBORN_DEFAULT_SEED"


def configure_logging(level_name: Optional[str] = None) -> int:
    name = (level_name or os.getenv(LOG_LEVEL_ENV, "WARNING")).strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    return level


def default_seed() -> str:
    return os.getenv(DEFAULT_SEED_ENV, "").strip() or DEFAULT_SEED


def create_save_repository() -> SaveRepository:
    database_url = os.getenv(DATABASE_URL_ENV, "").strip()
    if not database_url:
        return InMemorySaveRepository()

    from sqlalchemy import create_engine

    from lowborn.infrastructure.db.sql_save_repo import SqlSaveRepository

    repository = SqlSaveRepository(create_engine(database_url, echo=False, future=True))
    repository.ensure_schema()
    return repository


def create_session_service(slot: str = DEFAULT_SLOT) -> RunSessionService:
    event_bus = EventBus()
    register_run_log_handlers(event_bus)
    return RunSessionService(event_bus, repository=create_save_repository(), slot=slot)
