# Local application imports
from waterwatch.schemas.common.response_schemas import BaseResponse, ErrorDetails

__all__ = ["BaseResponse", "ErrorDetails"]
