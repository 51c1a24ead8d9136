"""
Local negotiation fallback used when the negotiation service fails
"""

import logging
import random
import zlib
from typing import Optional

from ..config.configuration_service import ConfigurationService, get_config_service
from ...models.negotiation import NegotiationOutcome, normalize_negotiation_response

logger = logging.getLogger(__name__)


class MockNegotiationService:
    """Generates a plausible negotiation outcome from the configured success/failure pools."""

    def __init__(self, config_service: Optional[ConfigurationService] = None):
        self.config_service = config_service or get_config_service()
        self._results = self.config_service.get_mock_negotiation_results()
        self.success_rate = float(self.config_service.get_negotiation_config().get("mock_success_rate", 0.7))

    def generate(self, text_input: str) -> NegotiationOutcome:
        """
        Pick an outcome for the given requirement text.

        The draw is seeded from the text so repeated requests for the same
        requirements get the same outcome.
        """
        rng = random.Random(zlib.crc32(text_input.encode("utf-8")))
        pool_name = "success" if rng.random() < self.success_rate else "failure"
        pool = self._results.get(pool_name) or self._results.get("success") or self._results.get("failure")
        if not pool:
            return NegotiationOutcome(status="NO_DEAL_REACHED", reason="No negotiation result available")

        outcome = normalize_negotiation_response(rng.choice(pool))
        logger.info(f"Mock negotiation outcome generated: {outcome.status}")
        return outcome
