from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .config import Settings
from .services.daily import DailyPuzzleScheduler
from .services.geo_index import GeoIndex
from .services.geocoding import LocationResolver, RequestThrottle
from .services.leaderboard import LeaderboardClient
from .services.profile import PlayerProfile, SavedMaps
from .services.puzzles import PuzzleGenerator
from .services.rounds import RoundService
from .services.stats import StatsAggregator
from .services.storage import KeyValueStore


@dataclass
class GameServices:
    """Process-scoped service objects, built once at startup."""
    store: KeyValueStore
    countries: GeoIndex
    land: GeoIndex
    throttle: RequestThrottle
    resolver: LocationResolver
    generator: PuzzleGenerator
    scheduler: DailyPuzzleScheduler
    stats: StatsAggregator
    profile: PlayerProfile
    saved_maps: SavedMaps
    leaderboard: LeaderboardClient
    rounds: RoundService


def build_services(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> GameServices:
    """Wire the service graph. ``transport`` replaces the network in tests."""
    store = KeyValueStore(session_factory)
    countries = GeoIndex(
        settings.COUNTRIES_TOPOLOGY_URL, settings.COUNTRIES_OBJECT,
        timeout=settings.GEOMETRY_TIMEOUT_SECONDS, transport=transport
    )
    land = GeoIndex(
        settings.LAND_TOPOLOGY_URL, settings.LAND_OBJECT,
        timeout=settings.GEOMETRY_TIMEOUT_SECONDS, transport=transport
    )
    throttle = RequestThrottle(settings.GEOCODER_MIN_INTERVAL_SECONDS)
    resolver = LocationResolver(
        countries,
        throttle,
        api_url=settings.NOMINATIM_URL,
        user_agent=settings.GEOCODER_USER_AGENT,
        timeout=settings.GEOCODER_TIMEOUT_SECONDS,
        transport=transport,
    )
    generator = PuzzleGenerator(
        countries,
        land,
        resolver,
        max_attempts=settings.MAX_SAMPLING_ATTEMPTS,
        seed_stride=settings.DAILY_SEED_STRIDE,
    )
    scheduler = DailyPuzzleScheduler(generator, store, retention_days=settings.DAILY_RETENTION_DAYS)
    stats = StatsAggregator(store, history_limit=settings.HISTORY_LIMIT, recent=settings.RECENT_RESULTS)
    profile = PlayerProfile(store)
    leaderboard = LeaderboardClient(
        settings.LEADERBOARD_URL, timeout=settings.LEADERBOARD_TIMEOUT_SECONDS, transport=transport
    )
    rounds = RoundService(
        store, generator, scheduler, resolver, stats, profile, leaderboard,
        max_zoom=settings.max_zoom,
    )
    return GameServices(
        store=store,
        countries=countries,
        land=land,
        throttle=throttle,
        resolver=resolver,
        generator=generator,
        scheduler=scheduler,
        stats=stats,
        profile=profile,
        saved_maps=SavedMaps(store),
        leaderboard=leaderboard,
        rounds=rounds,
    )


def get_services(request: Request) -> GameServices:
    """Dependency returning the services built in the app lifespan."""
    return request.app.state.services
