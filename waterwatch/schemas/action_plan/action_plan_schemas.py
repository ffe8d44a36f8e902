# Third-party imports
from pydantic import BaseModel, ConfigDict

# Local application imports
from waterwatch.services.action_plan import TipCategory


class WaterTipResponse(BaseModel):
    id: int
    category: TipCategory
    title: str
    description: str
    tags: list[str]


class TipSearchResponse(BaseModel):
    query: str | None
    category: TipCategory | None
    tips: list[WaterTipResponse]


class BadgeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    icon: str


class ActionPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    water_score: int
    recommendations: list[str]
    badges_earned: list[BadgeResponse]
    upcoming_badges: list[BadgeResponse]
    suggested_searches: list[str]
