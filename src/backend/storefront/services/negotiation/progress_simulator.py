"""
Negotiation progress animation.

Walks through the configured stages at a fixed interval and publishes a
NegotiationProgress snapshot after each one.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..config.configuration_service import ConfigurationService, get_config_service
from ...models.negotiation import NegotiationProgress

logger = logging.getLogger(__name__)


def progress_for_stage(
    stage: Dict[str, Any],
    stage_index: int,
    previous: NegotiationProgress,
    estimated_time_remaining: str,
) -> NegotiationProgress:
    """Derive the full progress snapshot for one stage."""
    percent = int(stage["progress"])
    suppliers = int(stage.get("suppliers", 0))

    return NegotiationProgress(
        current_step=stage["label"],
        progress=percent,
        suppliers_contacted=suppliers,
        responses_received=min(suppliers, percent // 10),
        active_negotiations=percent // 20 if percent < 80 else 0,
        completed_deals=1 if percent >= 100 else 0,
        estimated_time_remaining="Complete" if percent >= 100 else estimated_time_remaining,
        status_messages=[*previous.status_messages, stage["label"]],
        stage_index=stage_index,
    )


class ProgressSimulator:
    def __init__(
        self,
        config_service: Optional[ConfigurationService] = None,
        interval_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.config_service = config_service or get_config_service()
        self.stages: List[Dict[str, Any]] = self.config_service.get_progress_stages()
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None else self.config_service.get_progress_interval()
        )
        self.estimated_time_remaining = self.config_service.get_estimated_time_remaining()
        self._sleep = sleep

    def initial_progress(self) -> NegotiationProgress:
        return NegotiationProgress(estimated_time_remaining=self.estimated_time_remaining)

    async def run(self, on_update: Callable[[NegotiationProgress], None]) -> NegotiationProgress:
        """
        Play every stage, calling on_update with each new snapshot.

        Returns:
            The final snapshot
        """
        progress = self.initial_progress()
        for index, stage in enumerate(self.stages):
            progress = progress_for_stage(stage, index, progress, self.estimated_time_remaining)
            on_update(progress)
            logger.debug(f"Negotiation progress {progress.progress}%: {progress.current_step}")
            await self._sleep(self.interval_seconds)

        return progress
