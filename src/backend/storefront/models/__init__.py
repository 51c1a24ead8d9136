"""Models package - Products, accounts, session state and negotiation wizard"""

from .product import (
    ProductType,
    ExcavatorProduct,
    AluminumSheetProduct,
    ConsumerProduct,
    UnifiedProduct,
    FeaturedProductsResponse,
    transform_featured_response,
)

from .user import (
    UserRole,
    Company,
    User,
    LoginRequest,
    RegistrationRequest,
)

from .session import (
    UserState,
    CartItem,
    CartState,
    StorefrontSession,
)

from .negotiation import (
    WizardStep,
    DealDecision,
    ContractPosition,
    VoiceRecordingState,
    NegotiationProgress,
    NegotiationOutcome,
    NegotiationData,
    TranscriptionResult,
    EmptyRequirementError,
    NegotiationResponseError,
    TranscriptionUnavailableError,
    InvalidTransitionError,
)

__all__ = [
    "ProductType",
    "ExcavatorProduct",
    "AluminumSheetProduct",
    "ConsumerProduct",
    "UnifiedProduct",
    "FeaturedProductsResponse",
    "transform_featured_response",
    "UserRole",
    "Company",
    "User",
    "LoginRequest",
    "RegistrationRequest",
    "UserState",
    "CartItem",
    "CartState",
    "StorefrontSession",
    "WizardStep",
    "DealDecision",
    "ContractPosition",
    "VoiceRecordingState",
    "NegotiationProgress",
    "NegotiationOutcome",
    "NegotiationData",
    "TranscriptionResult",
    "EmptyRequirementError",
    "NegotiationResponseError",
    "TranscriptionUnavailableError",
    "InvalidTransitionError",
]
