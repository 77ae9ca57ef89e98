"""Health check endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from osintcafe import __version__
from osintcafe.analysis.diagnostics import run_probes
from osintcafe.api.app_state import AppState
from osintcafe.api.dependencies import get_state
from osintcafe.api.schemas import APIResponse
from osintcafe.constants import Capability

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Basic health check for load balancers."""
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/health/providers")
async def health_providers(
    state: AppState = Depends(get_state),
) -> APIResponse:
    """Probe every provider sequentially and report per-provider status."""
    results = await run_probes(state.providers)
    components = {
        r.name: {
            "capability": str(r.capability),
            "status": "operational" if r.ok else "unavailable",
            "message": r.message,
        }
        for r in results
    }
    chains = {str(c): state.settings.chain_for(c) for c in Capability}
    return APIResponse(
        success=True,
        data={"providers": components, "chains": chains},
        metadata={
            "status": "healthy" if all(r.ok for r in results) else "degraded",
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )
