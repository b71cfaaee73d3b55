"""API v1 router configuration."""

from fastapi import APIRouter

from app.api.v1.endpoints import decision_tree, rules, scoring, simulation, versions

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    simulation.router,
    prefix="/simulation",
    tags=["simulation"],
)

api_router.include_router(
    decision_tree.router,
    prefix="/decision-tree",
    tags=["decision-tree"],
)

api_router.include_router(
    scoring.router,
    prefix="/scoring",
    tags=["scoring"],
)

api_router.include_router(
    rules.router,
    prefix="/rules",
    tags=["rules"],
)

api_router.include_router(
    versions.router,
    prefix="/versions",
    tags=["versions"],
)
