"""App lifecycle endpoints"""

from fastapi import APIRouter, HTTPException, Query, status

from portal.core.config import logger
from portal.core.dependencies import AppServiceDep, Operator
from portal.schemas.app import (
    AppBase,
    AppCreateRequest,
    AppDTO,
    AppImportRequest,
    AppPage,
    AppUpdateRequest,
)
from portal.schemas.provisioning import EnvProvisionResult

router = APIRouter()


@router.post("", response_model=AppDTO, status_code=status.HTTP_201_CREATED)
async def create_app(request: AppCreateRequest, app_service: AppServiceDep, operator: Operator):
    """
    Create an app with its default namespace and roles.

    The app is then pushed to every active environment; environments that
    fail can be retried through ``POST /apps/envs/{env}``.
    """
    app = AppBase.model_validate(request.model_dump(exclude={"admins"}))
    return await app_service.create_app_and_add_role_permission(app, request.admins, operator)


@router.get("", response_model=AppPage)
async def search_apps(
    app_service: AppServiceDep,
    query: str = "",
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=500),
):
    """Search live apps by app id or name"""
    return await app_service.search_by_app_id_or_name(query, page, size)


@router.post("/envs/{env}", response_model=EnvProvisionResult)
async def create_app_in_remote(env: str, app: AppDTO, app_service: AppServiceDep, operator: Operator):
    """Create the app in one environment"""
    result = await app_service.create_app_in_remote(env.upper(), app, operator)
    if not result.success:
        logger.warning(f"Create app {app.app_id} in env {env} failed: {result.error}")
    return result


@router.post("/import", response_model=AppDTO)
async def import_app(request: AppImportRequest, app_service: AppServiceDep, operator: Operator):
    """Import an app from its copy in an environment"""
    remote = await app_service.load_from_env(request.env.upper(), request.app_id)
    if remote is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"App {request.app_id} not found in env {request.env}",
        )

    logger.info(f"Importing app {request.app_id} from env {request.env} by {operator}")
    return await app_service.import_app_in_local(remote)


@router.get("/{app_id}", response_model=AppDTO)
async def get_app(app_id: str, app_service: AppServiceDep):
    app = await app_service.load(app_id)
    if app is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"App {app_id} not found")
    return app


@router.put("/{app_id}", response_model=AppDTO)
async def update_app(
    app_id: str,
    request: AppUpdateRequest,
    app_service: AppServiceDep,
    operator: Operator,
):
    """Update descriptive fields and owner. The app id in the path wins."""
    app = AppBase(app_id=app_id, **request.model_dump())
    return await app_service.update_app_in_local(app, operator)


@router.delete("/{app_id}", response_model=AppDTO)
async def delete_app(app_id: str, app_service: AppServiceDep, operator: Operator):
    """Delete an app together with its namespaces, favorites and roles"""
    return await app_service.delete_app_in_local(app_id, operator)


@router.get("/{app_id}/miss_envs", response_model=list[str])
async def find_missing_envs(app_id: str, app_service: AppServiceDep):
    """Active environments that do not have the app yet"""
    return await app_service.find_missing_envs(app_id)
