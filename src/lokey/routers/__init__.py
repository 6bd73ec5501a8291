"""
API routers.

Everything here is mounted under /api:
- /api/auth/*            login / logout
- /api/project, /api/languages
- /api/keys*             key listing and creation (plain and streamed)
- /api/translate*        key and free-text translation
- /api/recommend-keys, /api/validate-source
- /api/screenshots*, /api/keys-with-screenshots
- /api/download-image
"""

from fastapi import APIRouter

from .assist import router as assist_router
from .auth import router as auth_router
from .images import router as images_router
from .keys import router as keys_router
from .project import router as project_router
from .screenshots import router as screenshots_router
from .translations import router as translations_router

router = APIRouter()
router.include_router(auth_router, prefix="/auth", tags=["auth"])
router.include_router(project_router, tags=["project"])
router.include_router(keys_router, tags=["keys"])
router.include_router(translations_router, tags=["translations"])
router.include_router(assist_router, tags=["assist"])
router.include_router(screenshots_router, tags=["screenshots"])
router.include_router(images_router, tags=["images"])

__all__ = ["router"]
