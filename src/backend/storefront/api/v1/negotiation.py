"""
Negotiation Wizard API Endpoints
FastAPI router driving the five-step AI negotiation wizard
"""

import logging
from typing import Any, Awaitable, Dict, Literal

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from ...models.negotiation import EmptyRequirementError, InvalidTransitionError
from ...services.negotiation.registry import WizardRegistry
from ...services.negotiation.wizard import NegotiationWizard
from ...utils.logging_context import bind_wizard_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/negotiation", tags=["negotiation"])


# Dependency injection placeholder (overridden in main.py)
def get_wizard_registry_dep() -> WizardRegistry:
    """Dependency injection placeholder for the wizard registry - overridden in main.py"""
    raise RuntimeError("Wizard registry dependency not initialized")


class VoiceStartRequest(BaseModel):
    microphone_granted: bool = True


class TextInputRequest(BaseModel):
    text: str


class RequirementUpdateRequest(BaseModel):
    value: str


class StandardTermsRequest(BaseModel):
    apply_standard_terms: bool


class DecisionRequest(BaseModel):
    decision: Literal["approve", "decline"]


def _get_wizard(registry: WizardRegistry, wizard_id: str) -> NegotiationWizard:
    wizard = registry.get(wizard_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail=f"Negotiation session {wizard_id} not found")
    bind_wizard_context(wizard_id=wizard_id, wizard_step=int(wizard.step))
    return wizard


async def _run_action(wizard_id: str, action: Awaitable[Dict[str, Any]]) -> Dict[str, Any]:
    """Await a wizard action and map wizard errors to HTTP errors."""
    try:
        return await action
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except EmptyRequirementError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except KeyError as e:
        raise HTTPException(status_code=404, detail=f"Requirement {e.args[0]} not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error in negotiation session {wizard_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/sessions", status_code=201)
async def create_session(registry: WizardRegistry = Depends(get_wizard_registry_dep)):
    wizard = await registry.create()
    return wizard.snapshot()


@router.get("/sessions/{wizard_id}")
async def get_session(wizard_id: str, registry: WizardRegistry = Depends(get_wizard_registry_dep)):
    return _get_wizard(registry, wizard_id).snapshot()


@router.delete("/sessions/{wizard_id}")
async def delete_session(wizard_id: str, registry: WizardRegistry = Depends(get_wizard_registry_dep)):
    if not await registry.remove(wizard_id):
        raise HTTPException(status_code=404, detail=f"Negotiation session {wizard_id} not found")
    return {"wizard_id": wizard_id, "deleted": True}


@router.post("/sessions/{wizard_id}/voice/start")
async def start_voice(
    wizard_id: str,
    request: VoiceStartRequest,
    registry: WizardRegistry = Depends(get_wizard_registry_dep),
):
    wizard = _get_wizard(registry, wizard_id)
    return await _run_action(wizard_id, wizard.start_recording(request.microphone_granted))


@router.post("/sessions/{wizard_id}/voice/stop")
async def stop_voice(
    wizard_id: str,
    file: UploadFile = File(...),
    offline: bool = Form(False),
    registry: WizardRegistry = Depends(get_wizard_registry_dep),
):
    """
    Upload the recorded audio and transcribe it.

    The wizard moves to review on success; otherwise it stays on voice
    input and reports the error in `voice.error`.
    """
    wizard = _get_wizard(registry, wizard_id)
    audio = await file.read()
    if not audio:
        raise HTTPException(status_code=400, detail="Recorded audio is empty")

    return await _run_action(
        wizard_id,
        wizard.stop_recording(
            audio,
            filename=file.filename or "recording.wav",
            content_type=file.content_type or "audio/wav",
            offline=offline,
        ),
    )


@router.post("/sessions/{wizard_id}/continue-without-voice")
async def continue_without_voice(wizard_id: str, registry: WizardRegistry = Depends(get_wizard_registry_dep)):
    wizard = _get_wizard(registry, wizard_id)
    return await _run_action(wizard_id, wizard.continue_without_voice())


@router.post("/sessions/{wizard_id}/text")
async def submit_text(
    wizard_id: str,
    request: TextInputRequest,
    registry: WizardRegistry = Depends(get_wizard_registry_dep),
):
    wizard = _get_wizard(registry, wizard_id)
    return await _run_action(wizard_id, wizard.submit_text(request.text))


@router.post("/sessions/{wizard_id}/back")
async def go_back(wizard_id: str, registry: WizardRegistry = Depends(get_wizard_registry_dep)):
    wizard = _get_wizard(registry, wizard_id)
    return await _run_action(wizard_id, wizard.back())


@router.patch("/sessions/{wizard_id}/requirements/{requirement_id}")
async def update_requirement(
    wizard_id: str,
    requirement_id: str,
    request: RequirementUpdateRequest,
    registry: WizardRegistry = Depends(get_wizard_registry_dep),
):
    wizard = _get_wizard(registry, wizard_id)
    return await _run_action(wizard_id, wizard.update_requirement(requirement_id, request.value))


@router.delete("/sessions/{wizard_id}/requirements/{requirement_id}")
async def delete_requirement(
    wizard_id: str,
    requirement_id: str,
    registry: WizardRegistry = Depends(get_wizard_registry_dep),
):
    wizard = _get_wizard(registry, wizard_id)
    return await _run_action(wizard_id, wizard.delete_requirement(requirement_id))


@router.post("/sessions/{wizard_id}/standard-terms")
async def set_standard_terms(
    wizard_id: str,
    request: StandardTermsRequest,
    registry: WizardRegistry = Depends(get_wizard_registry_dep),
):
    wizard = _get_wizard(registry, wizard_id)
    return await _run_action(wizard_id, wizard.set_apply_standard_terms(request.apply_standard_terms))


@router.post("/sessions/{wizard_id}/negotiate", status_code=202)
async def start_negotiation(wizard_id: str, registry: WizardRegistry = Depends(get_wizard_registry_dep)):
    """Start the negotiation; poll the session until step 5 to read the result."""
    wizard = _get_wizard(registry, wizard_id)
    return await _run_action(wizard_id, wizard.start_negotiation())


@router.post("/sessions/{wizard_id}/decision")
async def decide(
    wizard_id: str,
    request: DecisionRequest,
    registry: WizardRegistry = Depends(get_wizard_registry_dep),
):
    wizard = _get_wizard(registry, wizard_id)
    action = wizard.approve_deal() if request.decision == "approve" else wizard.decline_deal()
    return await _run_action(wizard_id, action)


@router.post("/sessions/{wizard_id}/reset")
async def reset(wizard_id: str, registry: WizardRegistry = Depends(get_wizard_registry_dep)):
    wizard = _get_wizard(registry, wizard_id)
    return await _run_action(wizard_id, wizard.reset())
