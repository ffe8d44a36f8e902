# Third-party imports
from fastapi import APIRouter, Query

# Local application imports
from waterwatch.schemas.action_plan.action_plan_schemas import (
    ActionPlanResponse,
    BadgeResponse,
    TipSearchResponse,
    WaterTipResponse,
)
from waterwatch.schemas.common import BaseResponse
from waterwatch.services.action_plan import SUGGESTED_SEARCHES, TipCategory, find_tips, get_action_plan

router = APIRouter(prefix="/action-plan", tags=["Action Plan"])


@router.get("", response_model=BaseResponse[ActionPlanResponse])
async def read_action_plan() -> BaseResponse[ActionPlanResponse]:
    """Water score, recommended actions and badges."""
    plan = get_action_plan()
    return BaseResponse.success(
        ActionPlanResponse(
            water_score=plan.water_score,
            recommendations=list(plan.recommendations),
            badges_earned=[BadgeResponse.model_validate(badge) for badge in plan.badges_earned],
            upcoming_badges=[BadgeResponse.model_validate(badge) for badge in plan.upcoming_badges],
            suggested_searches=list(SUGGESTED_SEARCHES),
        )
    )


@router.get("/tips", response_model=BaseResponse[TipSearchResponse])
async def list_water_tips(
    category: TipCategory | None = Query(None),
    q: str | None = Query(None, max_length=200),
) -> BaseResponse[TipSearchResponse]:
    """Tips for one category, or search results across all categories when ``q`` is given."""
    query = (q or "").strip() or None
    tips = find_tips(category, query)
    return BaseResponse.success(
        TipSearchResponse(
            query=query,
            category=None if query else (category or TipCategory.EMERGENCY),
            tips=[
                WaterTipResponse(
                    id=tip.id, category=tip.category, title=tip.title, description=tip.description, tags=list(tip.tags)
                )
                for tip in tips
            ],
        )
    )
