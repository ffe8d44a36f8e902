# Third-party imports
from fastapi import APIRouter

# Local application imports
from waterwatch.api.internal.routes.v1.routes import router as v1_router

router = APIRouter()
router.include_router(v1_router)
