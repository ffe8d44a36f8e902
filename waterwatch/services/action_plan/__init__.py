# Local application imports
from waterwatch.services.action_plan.tips import (
    SUGGESTED_SEARCHES,
    PersonalActionPlan,
    TipCategory,
    WaterTip,
    find_tips,
    get_action_plan,
)

__all__ = ["SUGGESTED_SEARCHES", "PersonalActionPlan", "TipCategory", "WaterTip", "find_tips", "get_action_plan"]
