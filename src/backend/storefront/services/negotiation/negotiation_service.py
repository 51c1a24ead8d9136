"""
Negotiation Service

Runs a negotiation for the buyer's requirement text on the external
negotiation service. One request, 120 s timeout, no retry. Network errors
and unusable responses are replaced by a locally generated outcome; callers
cannot tell the two apart, only the logs can.
"""

import logging
from typing import Optional

import httpx

from ..config.configuration_service import ConfigurationService, get_config_service
from .mock_negotiation import MockNegotiationService
from ...models.negotiation import (
    EmptyRequirementError,
    NegotiationOutcome,
    normalize_negotiation_response,
)

logger = logging.getLogger(__name__)


class NegotiationService:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        config_service: Optional[ConfigurationService] = None,
        mock_service: Optional[MockNegotiationService] = None,
    ):
        self.http_client = http_client
        self.config_service = config_service or get_config_service()
        self.mock_service = mock_service or MockNegotiationService(self.config_service)

        policy = self.config_service.get_negotiation_config()
        self.url = self.config_service.get_negotiation_api_base_url() + policy.get("path", "/api/negotiate")
        self.timeout = float(policy.get("timeout_seconds", 120))
        self.buyer_id = self.config_service.get_buyer_id()

    async def negotiate(self, text_input: str) -> NegotiationOutcome:
        """
        Negotiate on behalf of the buyer.

        Args:
            text_input: Requirement text (transcript or typed description)

        Returns:
            Normalised negotiation outcome (remote or locally generated)

        Raises:
            EmptyRequirementError: If text_input is empty or whitespace only
        """
        text = (text_input or "").strip()
        if not text:
            raise EmptyRequirementError("Requirement text must not be empty")

        try:
            response = await self.http_client.post(
                self.url,
                json={"text_input": text, "buyer_id": self.buyer_id},
                timeout=self.timeout,
            )
            response.raise_for_status()
            outcome = normalize_negotiation_response(response.json())
            logger.info(f"Negotiation completed remotely: {outcome.status}")
            return outcome

        except httpx.HTTPError as e:
            logger.warning(f"Negotiation service request failed, using local outcome: {e}")
        except ValueError as e:
            # NegotiationResponseError and JSON decode errors
            logger.warning(f"Negotiation service returned an invalid response, using local outcome: {e}")

        return self.mock_service.generate(text)
