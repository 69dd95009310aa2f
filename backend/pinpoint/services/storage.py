import json
import logging
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..database.models import StoredValue
from ..exceptions import MalformedStoredData

logger = logging.getLogger(__name__)

PLAYER_NAME_KEY = "pinpoint_player_name"
DAILY_PLAYED_KEY = "pinpoint_daily_played"
RESULTS_KEY = "pinpoint_results"
DAILY_RESULTS_KEY = "pinpoint_daily_results"
SAVED_MAPS_KEY = "pinpoint_saved_maps"
CURRENT_PUZZLE_KEY = "pinpoint_current_puzzle"

M = TypeVar("M", bound=BaseModel)


class KeyValueStore:
    """
    Local key/value state with JSON values.

    get() raises MalformedStoredData when a stored value is not valid JSON;
    the load_* helpers below turn that into the empty default.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> Optional[Any]:
        async with self._session_factory() as session:
            row = await session.get(StoredValue, key)
            if row is None:
                return None
            try:
                return json.loads(row.value)
            except ValueError as e:
                raise MalformedStoredData(key, str(e)) from e

    async def set(self, key: str, value: Any):
        encoded = json.dumps(value)
        async with self._session_factory() as session:
            row = await session.get(StoredValue, key)
            if row is None:
                session.add(StoredValue(key=key, value=encoded))
            else:
                row.value = encoded
            await session.commit()

    async def remove(self, key: str):
        async with self._session_factory() as session:
            await session.execute(delete(StoredValue).where(StoredValue.key == key))
            await session.commit()


async def load_value(store: KeyValueStore, key: str, default: Any = None) -> Any:
    """Read a raw JSON value, treating corrupt data as missing."""
    try:
        value = await store.get(key)
    except MalformedStoredData as e:
        logger.error(f"{e}; using default")
        return default
    return default if value is None else value


async def load_models(store: KeyValueStore, key: str, model: Type[M]) -> List[M]:
    """Read a JSON list of records; a corrupt list or entry reads as empty."""
    raw = await load_value(store, key, [])
    if not isinstance(raw, list):
        logger.error(f"Stored value for '{key}' is not a list; using empty list")
        return []
    try:
        return [model.model_validate(item) for item in raw]
    except ValidationError as e:
        logger.error(f"Stored value for '{key}' has malformed entries: {e}; using empty list")
        return []


async def save_models(store: KeyValueStore, key: str, items: List[BaseModel]):
    await store.set(key, [item.model_dump(mode="json") for item in items])


async def load_model(store: KeyValueStore, key: str, model: Type[M]) -> Optional[M]:
    raw = await load_value(store, key)
    if raw is None:
        return None
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        logger.error(f"Stored value for '{key}' is malformed: {e}; ignoring it")
        return None

