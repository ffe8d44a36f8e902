# Third-party imports
from fastapi import APIRouter

# Local application imports
from waterwatch.api.internal.main import router as internal_router
from waterwatch.settings import settings

router = APIRouter(prefix=settings.API_V1_STR)

# Include internal API routers
router.include_router(internal_router)
