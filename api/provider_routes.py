"""
Provider API Routes
Vibe Writer - Multi-Provider Support

Read-only catalogue of the supported vendors. Keys never reach the
server except inside a stage request.
"""

from typing import List

from fastapi import APIRouter, HTTPException

from ai_providers import AIProviderType, ProviderDispatcher
from ai_providers.manager import ProviderInfo
from core.models import ProviderListing


def to_listing(info: ProviderInfo) -> ProviderListing:
    return ProviderListing(
        id=info.type.value,
        name=info.name,
        description=info.description,
        models=info.models,
        default_model=info.default_model,
    )


# =========================================
# Router
# =========================================

router = APIRouter(prefix="/api/providers", tags=["AI Providers"])


@router.get("", response_model=List[ProviderListing])
async def list_providers():
    """
    List all supported AI providers.

    Each entry carries the provider tag used in stage requests, its
    models and the model selected by default.
    """
    return [to_listing(info) for info in ProviderDispatcher.list_providers()]


@router.get("/{provider_id}", response_model=ProviderListing)
async def get_provider(provider_id: str):
    """Get one provider by tag"""
    try:
        provider = AIProviderType(provider_id.lower())
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown provider: {provider_id}")
    return to_listing(ProviderDispatcher.get_provider_info(provider))
