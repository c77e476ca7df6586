"""BaseEngine ABC and EngineStatus constants for GEOConvergence.

Both cycle engines inherit from BaseEngine and implement the run() method.
The base class enforces the standard interface: run, validate_output, reset.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from config.settings import EngineConfig

if TYPE_CHECKING:
    from geoconvergence.models.pipeline import CycleSnapshot

logger = logging.getLogger(__name__)


class EngineStatus:
    """Status codes used in ConvergenceResult.status and GeofenceResult.status."""

    OK = "OK"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"


class BaseEngine(ABC):
    """Abstract base class for GEOConvergence cycle engines.

    Engines consume a complete CycleSnapshot and return a complete typed
    result with no internal suspension points. Any state an engine keeps
    across cycles is held by an injected collaborator and cleared via reset().

    Args:
        config: Engine thresholds; defaults are used when None.
    """

    name: str = "BaseEngine"
    version: str = "1.0.0"

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()

    @abstractmethod
    def run(self, snapshot: "CycleSnapshot", evaluated_at: Optional[datetime] = None) -> Any:
        """Execute the engine over a snapshot and return a typed result.

        Args:
            snapshot: Validated cycle input.
            evaluated_at: Cycle time (current UTC time when None).

        Returns:
            A typed engine result dataclass (subclass-specific).
        """

    def validate_output(self, result: Any) -> bool:
        """Post-run validation of structured output.

        Args:
            result: The typed result produced by run().

        Returns:
            True if output is valid, False if validation failed.
        """
        return result is not None

    def reset(self) -> None:
        """Clear any state carried between cycles."""

    def _run_timed(
        self,
        snapshot: "CycleSnapshot",
        evaluated_at: Optional[datetime] = None,
    ) -> Any:
        """Execute run() and log elapsed time.

        Args:
            snapshot: Validated cycle input.
            evaluated_at: Cycle time.

        Returns:
            Result from run().
        """
        start = time.monotonic()
        try:
            result = self.run(snapshot, evaluated_at)
            elapsed = time.monotonic() - start
            logger.info(
                "Engine %s completed in %.3fs (status=%s)",
                self.name,
                elapsed,
                getattr(result, "status", "?"),
            )
            return result
        except Exception as exc:
            elapsed = time.monotonic() - start
            logger.error(
                "Engine %s failed after %.3fs: %s",
                self.name,
                elapsed,
                exc,
                exc_info=True,
            )
            raise
