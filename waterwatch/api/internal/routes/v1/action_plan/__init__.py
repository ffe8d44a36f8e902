from .action_plan_routes import router as action_plan_router

__all__ = ["action_plan_router"]
