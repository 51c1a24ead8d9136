"""
In-process registry of live negotiation wizards.

Wizards own asyncio tasks, so they stay in memory instead of the session
store. Idle wizards are closed and dropped by a background cleanup loop.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from .wizard import NegotiationWizard

logger = logging.getLogger(__name__)


class WizardRegistry:
    def __init__(
        self,
        wizard_factory: Callable[[str], NegotiationWizard],
        ttl: int = 3600,
        cleanup_interval: float = 60,
    ):
        self._wizards: Dict[str, NegotiationWizard] = {}
        self._factory = wizard_factory
        self.ttl = ttl
        self.cleanup_interval = cleanup_interval
        self._cleanup_task: Optional[asyncio.Task] = None
        self._shutdown = False

        if self.ttl > 0:
            logger.info(f"Starting wizard cleanup task (TTL: {self.ttl}s)")
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def create(self) -> NegotiationWizard:
        wizard_id = str(uuid.uuid4())
        wizard = self._factory(wizard_id)
        self._wizards[wizard_id] = wizard
        logger.info(f"Created negotiation wizard {wizard_id}")
        return wizard

    def get(self, wizard_id: str) -> Optional[NegotiationWizard]:
        return self._wizards.get(wizard_id)

    async def remove(self, wizard_id: str) -> bool:
        wizard = self._wizards.pop(wizard_id, None)
        if wizard is None:
            return False
        await wizard.close()
        logger.info(f"Removed negotiation wizard {wizard_id}")
        return True

    def list_ids(self) -> List[str]:
        return sorted(self._wizards.keys())

    def __len__(self) -> int:
        return len(self._wizards)

    async def _cleanup_loop(self):
        """Background task to periodically drop idle wizards."""
        logger.info("Wizard cleanup loop started")
        try:
            while not self._shutdown:
                await asyncio.sleep(self.cleanup_interval)
                if self._shutdown:
                    break
                await self.cleanup_expired()
        except asyncio.CancelledError:
            logger.info("Wizard cleanup loop cancelled")
        except Exception as e:
            logger.error(f"Error in wizard cleanup loop: {e}", exc_info=True)

    async def cleanup_expired(self) -> int:
        """Close and remove wizards idle for longer than the TTL."""
        now = datetime.now(timezone.utc)
        expired = [
            wizard_id for wizard_id, wizard in self._wizards.items()
            if (now - wizard.last_activity).total_seconds() > self.ttl and not wizard.is_negotiating
        ]

        for wizard_id in expired:
            await self.remove(wizard_id)

        if expired:
            logger.info(f"Cleaned up {len(expired)} idle wizards")
        return len(expired)

    async def shutdown(self):
        """Stop the cleanup loop and close every wizard."""
        self._shutdown = True
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass

        for wizard_id in list(self._wizards):
            await self.remove(wizard_id)
        logger.info("Wizard registry shut down")
