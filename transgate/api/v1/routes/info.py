"""Provider info API routes."""

from fastapi import APIRouter

from transgate.api.dependencies import RegistryDep
from transgate.models.schemas import InfoResponse

router = APIRouter()


@router.get("/info", response_model=InfoResponse)
async def get_info(registry: RegistryDep) -> InfoResponse:
    """List the registered model types and the default one."""
    return InfoResponse(
        default_model=registry.default_model,
        available_models=registry.model_types,
    )
