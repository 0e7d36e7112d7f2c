# /callscript/routes/admin.py

import logging
from typing import Any, Dict
from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from callscript.config.settings import settings
from callscript.models.api import APIResponse
from callscript.navigation.importer import ScriptImportError, import_script
from callscript.navigation.validator import validate_script_graph
from callscript.services.product_resolver import InMemoryProductResolver
from callscript.services.session_service import OperatorSessionRegistry
from callscript.services.step_store import InMemoryStepStore
from callscript.utils.dependencies import get_product_resolver, get_session_registry, get_step_store
from callscript.utils.rate_limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
)


@router.post("/scripts/import", response_model=APIResponse)
@limiter.limit(settings.import_rate_limit)
async def import_scripts(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    store: InMemoryStepStore = Depends(get_step_store),
    resolver: InMemoryProductResolver = Depends(get_product_resolver),
):
    """Import a script export. Malformed steps are quarantined and reported back."""
    try:
        result = import_script(payload, store, resolver)
    except ScriptImportError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return APIResponse(
        success=True,
        message=f"{result.product_count} produto(s) e {result.step_count} tela(s) importados",
        data={
            "product_count": result.product_count,
            "step_count": result.step_count,
            "products": [product.id for product in result.products],
            "rejected": [entry.model_dump() for entry in result.rejected],
        },
        version=settings.api_version
    )


@router.get("/scripts/validate", response_model=APIResponse)
async def validate_scripts(
    store: InMemoryStepStore = Depends(get_step_store),
    resolver: InMemoryProductResolver = Depends(get_product_resolver),
):
    """Report broken entry points, dangling buttons and unreachable steps."""
    report = validate_script_graph(await store.get_all_steps(), await resolver.get_products())
    return APIResponse(
        success=report["is_valid"],
        message="Script graph is consistent" if report["is_valid"] else "Script graph has broken entry points",
        data=dict(report),
        version=settings.api_version
    )


@router.get("/sessions", response_model=APIResponse)
async def list_sessions(registry: OperatorSessionRegistry = Depends(get_session_registry)):
    return APIResponse(
        success=True,
        message="Sessions retrieved",
        data={"total": len(registry), "active": registry.active_count()},
        version=settings.api_version
    )


@router.post("/sessions/{operator_id}/force-logout", response_model=APIResponse)
async def force_logout(
    operator_id: str,
    registry: OperatorSessionRegistry = Depends(get_session_registry),
):
    if not registry.force_logout(operator_id):
        raise HTTPException(status_code=404, detail="No session for this operator")
    logger.info(f"Admin forced logout of operator {operator_id}.")
    return APIResponse(
        success=True,
        message="Operator logged out",
        version=settings.api_version
    )
