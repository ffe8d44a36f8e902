# Third-party imports
from fastapi import APIRouter

# Local application imports
from waterwatch.api.internal.routes.v1.action_plan import action_plan_router
from waterwatch.api.internal.routes.v1.auth import router as auth_router
from waterwatch.api.internal.routes.v1.chat import chat_router
from waterwatch.api.internal.routes.v1.issues import issue_router, map_router
from waterwatch.api.internal.routes.v1.notifications import notification_router

router = APIRouter()

# Include all internal v1 routers
router.include_router(auth_router)
router.include_router(issue_router)
router.include_router(map_router)
router.include_router(notification_router)
router.include_router(chat_router)
router.include_router(action_plan_router)
