import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..models.profile import SavedMap, SavedMapCreate
from .storage import (
    PLAYER_NAME_KEY, SAVED_MAPS_KEY, KeyValueStore, load_models, load_value, save_models
)

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 20

# Two saved points closer than this on both axes (~1 km) count as the same place
SAME_PLACE_DEGREES = 0.01


class PlayerProfile:
    """The local player's display name, used for leaderboard submissions."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def get_name(self) -> Optional[str]:
        name = await load_value(self.store, PLAYER_NAME_KEY)
        return name if isinstance(name, str) else None

    async def set_name(self, name: str) -> bool:
        """Store a trimmed name; names outside 2-20 characters are rejected."""
        trimmed = name.strip()
        if not MIN_NAME_LENGTH <= len(trimmed) <= MAX_NAME_LENGTH:
            return False
        await self.store.set(PLAYER_NAME_KEY, trimmed)
        return True

    async def has_name(self) -> bool:
        name = await self.get_name()
        return name is not None and len(name) >= MIN_NAME_LENGTH

    async def clear_name(self):
        await self.store.remove(PLAYER_NAME_KEY)


class SavedMaps:
    """The player's collection of saved puzzle locations."""

    def __init__(
        self,
        store: KeyValueStore,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self.store = store
        self._now = now

    async def list(self) -> List[SavedMap]:
        return await load_models(self.store, SAVED_MAPS_KEY, SavedMap)

    async def save(self, entry: SavedMapCreate) -> SavedMap:
        saved = SavedMap(
            **entry.model_dump(),
            id=f"map-{uuid.uuid4().hex[:12]}",
            saved_at=self._now().isoformat(),
        )
        maps = await self.list()
        maps.append(saved)
        await save_models(self.store, SAVED_MAPS_KEY, maps)
        return saved

    async def delete(self, map_id: str) -> bool:
        maps = await self.list()
        remaining = [m for m in maps if m.id != map_id]
        if len(remaining) == len(maps):
            return False
        await save_models(self.store, SAVED_MAPS_KEY, remaining)
        return True

    async def clear(self):
        await self.store.remove(SAVED_MAPS_KEY)

    async def is_saved(self, lat: float, lng: float) -> bool:
        return any(
            abs(m.lat - lat) < SAME_PLACE_DEGREES and abs(m.lng - lng) < SAME_PLACE_DEGREES
            for m in await self.list()
        )
