import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from core.config_loader import AppConfig
from core.events import EventBus
from core.ranking import (
    BackgroundRunner,
    BulkRankingProcessor,
    CandidateRankingService,
    InvalidationController,
    RankingCalculator,
)
from core.utils import utcnow
from database.database import build_engine, build_session_factory

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    This eliminates duplicate wiring code and provides a single source
    of truth for service instantiation. DB access is obtained via
    ranking_uow(session_factory) inside each operation.
    """
    config: AppConfig
    engine: Engine
    session_factory: sessionmaker
    event_bus: EventBus
    runner: BackgroundRunner
    calculator: RankingCalculator
    bulk_processor: BulkRankingProcessor
    invalidation: InvalidationController
    ranking_service: CandidateRankingService

    @classmethod
    def build(
        cls,
        config: AppConfig,
        engine: Optional[Engine] = None,
        clock: Callable[[], datetime] = utcnow,
        sleep: Optional[Callable[[float], None]] = None
    ) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            engine: Existing engine to reuse (tests); built from config otherwise
            clock: Source of "now" for scoring
            sleep: Pause used between normal-priority bulk batches

        Returns:
            Fully wired AppContext with event handlers subscribed
        """
        if engine is None:
            engine = build_engine(config.database.url, echo=config.database.echo)
        session_factory = build_session_factory(engine)

        event_bus = EventBus()
        runner = BackgroundRunner(max_workers=config.ranking.background_workers)
        calculator = RankingCalculator(session_factory, event_bus=event_bus, clock=clock)

        bulk_kwargs = {'sleep': sleep} if sleep is not None else {}
        bulk_processor = BulkRankingProcessor(
            session_factory,
            calculator,
            config.bulk,
            config.ranking,
            clock=clock,
            **bulk_kwargs
        )
        invalidation = InvalidationController(session_factory, calculator, bulk_processor, runner)
        invalidation.subscribe(event_bus)

        ranking_service = CandidateRankingService(
            session_factory,
            calculator,
            bulk_processor,
            invalidation,
            runner,
            config.ranking,
            clock=clock
        )

        return cls(
            config=config,
            engine=engine,
            session_factory=session_factory,
            event_bus=event_bus,
            runner=runner,
            calculator=calculator,
            bulk_processor=bulk_processor,
            invalidation=invalidation,
            ranking_service=ranking_service
        )

    def drain(self) -> None:
        """Wait until queued events and the background work they caused are done."""
        # Handlers enqueue background work and background work publishes events
        for _ in range(3):
            self.event_bus.join()
            self.runner.wait_idle()
        self.event_bus.join()

    def shutdown(self) -> None:
        logger.info("Shutting down ranking services...")
        self.event_bus.close()
        self.runner.shutdown(wait=True)
        self.engine.dispose()
