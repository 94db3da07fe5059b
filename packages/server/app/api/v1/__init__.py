"""
API v1 Router

All org-scoped endpoints are prefixed with /orgs/{org_id} and gated on
membership of that org.
"""

from fastapi import APIRouter

from app.core.errors import PROBLEM_RESPONSES
from . import auth, clients, members, projects, tasks
from .organizations import router_global as orgs_global_router
from .organizations import router_scoped as orgs_scoped_router

router = APIRouter(responses=PROBLEM_RESPONSES)

# Authentication (not org-scoped)
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Organization routes (non-org-scoped: list, create)
router.include_router(orgs_global_router)

# Organization routes (org-scoped: get, rename)
router.include_router(orgs_scoped_router, prefix="/orgs/{org_id}", tags=["Organizations"])

# Include resource routers
router.include_router(members.router, prefix="/orgs/{org_id}/members", tags=["Members"])
router.include_router(clients.router, prefix="/orgs/{org_id}/clients", tags=["Clients"])
router.include_router(projects.router, prefix="/orgs/{org_id}/projects", tags=["Projects"])
router.include_router(
    tasks.router,
    prefix="/orgs/{org_id}/projects/{project_id}/tasks",
    tags=["Tasks"],
)


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/auth",
            "/orgs",
            "/orgs/{org_id}/members",
            "/orgs/{org_id}/clients",
            "/orgs/{org_id}/projects",
            "/orgs/{org_id}/projects/{project_id}/tasks",
        ],
    }
