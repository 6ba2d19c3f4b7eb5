from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from prepgames.clients.content_client import ContentClient
from prepgames.db.database import get_db
from prepgames.db.sql_repository import SQLGameRepository
from prepgames.services.game_service import GameService
from prepgames.services.settings_store import SettingsStore

# One client and one settings cache for the whole process
content_client = ContentClient()
settings_store = SettingsStore(content_client)


def get_service(db: Session = Depends(get_db)) -> Generator[GameService, None, None]:
    yield GameService(SQLGameRepository(db), content_client, settings_store)
