from fastapi import APIRouter

from sponta.api.challenges import router as challenges_router
from sponta.api.users import router as users_router

router = APIRouter()
router.include_router(challenges_router)
router.include_router(users_router)

__all__ = ["router"]
