"""
Unit tests for the negotiation progress animation
"""

import pytest

from storefront.models.negotiation import NegotiationProgress
from storefront.services.negotiation.progress_simulator import ProgressSimulator, progress_for_stage


@pytest.mark.unit
class TestProgressForStage:
    def test_counters_derived_from_percent(self):
        progress = progress_for_stage(
            {"label": "Identifying matching suppliers...", "progress": 20, "suppliers": 6},
            2,
            NegotiationProgress(status_messages=["a", "b"]),
            "2-3 minutes",
        )

        assert progress.suppliers_contacted == 6
        assert progress.responses_received == 2
        assert progress.active_negotiations == 1
        assert progress.completed_deals == 0
        assert progress.status_messages == ["a", "b", "Identifying matching suppliers..."]
        assert progress.estimated_time_remaining == "2-3 minutes"

    def test_responses_capped_by_suppliers(self):
        progress = progress_for_stage({"label": "x", "progress": 60, "suppliers": 3}, 0, NegotiationProgress(), "soon")

        assert progress.responses_received == 3

    def test_final_stage(self):
        progress = progress_for_stage(
            {"label": "Negotiation complete!", "progress": 100, "suppliers": 15}, 10, NegotiationProgress(), "soon"
        )

        assert progress.active_negotiations == 0
        assert progress.completed_deals == 1
        assert progress.estimated_time_remaining == "Complete"


@pytest.mark.unit
class TestProgressSimulator:
    @pytest.mark.asyncio
    async def test_run_plays_every_stage(self, config_service, no_sleep):
        simulator = ProgressSimulator(config_service, sleep=no_sleep)
        updates = []

        final = await simulator.run(updates.append)

        assert len(updates) == len(config_service.get_progress_stages())
        assert [u.progress for u in updates] == sorted(u.progress for u in updates)
        assert final.progress == 100
        assert final.completed_deals == 1
        assert len(final.status_messages) == len(updates)
        assert no_sleep.delays == [4.0] * len(updates)

    def test_initial_progress(self, config_service):
        progress = ProgressSimulator(config_service).initial_progress()

        assert progress.progress == 0
        assert progress.stage_index == -1
        assert progress.estimated_time_remaining == "2-3 minutes"
