import asyncio
import logging
from typing import Optional

from ..exceptions import LeaderboardUnavailable
from ..models.daily import DailyGuessRequest, DailyGuessResponse, DailyResult
from ..models.game import Coordinate, GameResult, GuessRequest, GuessResponse, Puzzle
from .daily import DailyPuzzleScheduler
from .geocoding import LocationResolver
from .leaderboard import LeaderboardClient
from .profile import PlayerProfile
from .puzzles import PuzzleGenerator
from .scoring import distance_km, get_distance_band
from .stats import StatsAggregator
from .storage import CURRENT_PUZZLE_KEY, KeyValueStore, load_model

logger = logging.getLogger(__name__)


class RoundError(Exception):
    """A guess that cannot be accepted in the current game state."""


class NoActiveRound(RoundError):
    pass


class AlreadyPlayed(RoundError):
    pass


class MissingPlayerName(RoundError):
    pass


class InvalidZoom(RoundError):
    pass


class RoundService:
    """Runs practice and daily rounds from puzzle to recorded result."""

    def __init__(
        self,
        store: KeyValueStore,
        generator: PuzzleGenerator,
        scheduler: DailyPuzzleScheduler,
        resolver: LocationResolver,
        stats: StatsAggregator,
        profile: PlayerProfile,
        leaderboard: LeaderboardClient,
        max_zoom: int = 3
    ):
        self.store = store
        self.generator = generator
        self.scheduler = scheduler
        self.resolver = resolver
        self.stats = stats
        self.profile = profile
        self.leaderboard = leaderboard
        self.max_zoom = max_zoom

    def _check_zoom(self, zoom_level: int):
        if zoom_level > self.max_zoom:
            raise InvalidZoom(f"zoom_level must be between 0 and {self.max_zoom}")

    def _game_result(self, puzzle: Puzzle, guess, distance: float, day: str) -> GameResult:
        location = puzzle.location
        return GameResult(
            puzzle_id=puzzle.id,
            date=day,
            distance_km=distance,
            zoom_level=guess.zoom_level,
            max_zoom=self.max_zoom,
            guess_lat=guess.latitude,
            guess_lng=guess.longitude,
            actual_lat=location.lat,
            actual_lng=location.lng,
            country=location.country,
            city=location.city,
            state=location.state,
            landmark=location.landmark,
        )

    async def start_practice(self) -> Puzzle:
        """Generate a practice puzzle and make it the current round."""
        puzzle = await self.generator.practice()
        await self.store.set(CURRENT_PUZZLE_KEY, puzzle.model_dump(mode="json"))
        return puzzle

    async def current_practice(self) -> Optional[Puzzle]:
        return await load_model(self.store, CURRENT_PUZZLE_KEY, Puzzle)

    async def submit_practice(self, guess: GuessRequest) -> GuessResponse:
        self._check_zoom(guess.zoom_level)
        puzzle = await self.current_practice()
        if puzzle is None:
            raise NoActiveRound("No active round. Start a new puzzle first.")

        location = puzzle.location
        distance = distance_km(
            Coordinate(lat=guess.latitude, lng=guess.longitude),
            Coordinate(lat=location.lat, lng=location.lng),
        )
        band = get_distance_band(distance)

        await self.stats.record(self._game_result(puzzle, guess, distance, self.scheduler.today()))
        await self.store.remove(CURRENT_PUZZLE_KEY)

        return GuessResponse(
            puzzle_id=puzzle.id,
            distance_km=distance,
            band=band,
            zoom_used=guess.zoom_level,
            max_zoom=self.max_zoom,
            actual_latitude=location.lat,
            actual_longitude=location.lng,
            country=location.country,
        )

    async def submit_daily(self, guess: DailyGuessRequest) -> DailyGuessResponse:
        """
        Score today's daily guess, record it locally, then submit it to the leaderboard.

        A leaderboard failure is reported in the response; the local result
        is kept either way.
        """
        self._check_zoom(guess.zoom_level)
        player_name = await self.profile.get_name()
        if not player_name:
            raise MissingPlayerName("Set a player name before playing the daily puzzle.")

        today = self.scheduler.today()
        if await self.scheduler.has_played(today):
            raise AlreadyPlayed(f"The daily puzzle for {today} has already been played.")

        puzzle = await self.scheduler.puzzle_for(today)
        location = puzzle.location
        guess_point = Coordinate(lat=guess.latitude, lng=guess.longitude)
        actual_point = Coordinate(lat=location.lat, lng=location.lng)
        distance = distance_km(guess_point, actual_point)
        band = get_distance_band(distance)

        # Both lookups queue on the shared geocoder throttle
        actual_details, guess_details = await asyncio.gather(
            self.resolver.resolve(actual_point),
            self.resolver.resolve(guess_point),
        )

        result = DailyResult(
            date=today,
            player_name=player_name,
            distance_km=distance,
            zoom_level=guess.zoom_level,
            guess_lat=guess.latitude,
            guess_lng=guess.longitude,
            actual_lat=location.lat,
            actual_lng=location.lng,
            country=location.country,
            city=location.city,
            actual_display_name=actual_details.display_name,
            actual_state=actual_details.state,
            guess_country=guess_details.country,
            guess_state=guess_details.state,
            guess_city=guess_details.city,
            guess_display_name=guess_details.display_name,
        )
        await self.scheduler.record_result(result)
        await self.stats.record(self._game_result(puzzle, guess, distance, today))

        submitted = True
        error = None
        try:
            await self.leaderboard.create(result)
        except LeaderboardUnavailable as e:
            logger.error(f"Daily result for {today} kept locally only: {e}")
            submitted = False
            error = e.user_message

        return DailyGuessResponse(
            result=result,
            band=band,
            max_zoom=self.max_zoom,
            streak=await self.scheduler.streak(),
            leaderboard_submitted=submitted,
            leaderboard_error=error,
        )

    async def retry_leaderboard(self, date_str: Optional[str] = None):
        """
        Resubmit a stored daily result; the row id makes repeats harmless.

        Raises:
            NoActiveRound: no local result exists for that date
            LeaderboardUnavailable: the store is still unreachable
        """
        date_str = date_str or self.scheduler.today()
        result = await self.scheduler.result_for(date_str)
        if result is None:
            raise NoActiveRound(f"No daily result recorded for {date_str}.")
        return await self.leaderboard.create(result)
