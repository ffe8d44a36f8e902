# Standard library imports
from typing import Any

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field

# Local application imports
from waterwatch.schemas.issues.issue_schemas import IssueResponse

# ============================
# ----- Request schemas ------
# ============================


class MapSessionCreate(BaseModel):
    """Position the browser resolved, if any. Without one the server falls back to IP lookup."""

    latitude: float | None = None
    longitude: float | None = None
    location_denied: bool = False


class CenterUpdate(BaseModel):
    # Latitude first
    center: list[float] = Field(..., min_length=2, max_length=2)


class ZoomUpdate(BaseModel):
    zoom: float | None = None


class LayerToggle(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    visible: bool


class IssueSelection(BaseModel):
    issue_id: str | None = None


class StatusChange(BaseModel):
    status: str


# ============================
# ----- Response schemas -----
# ============================


class AuthorityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    location: tuple[float, float]
    type: str
    phone: str


class ReservoirResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    location: tuple[float, float]
    capacity: int
    current_level: int
    fill_percentage: float


class WeatherResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    location: tuple[float, float]
    temperature: float
    condition: str
    humidity: float
    rainfall: float
    alerts: list[str]
    updated_at: str


class MapSnapshotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_id: str
    state: str
    center: tuple[float, float]
    zoom: int
    visible_layers: dict[str, bool]
    selected_issue_id: str | None = None
    issues: list[IssueResponse]
    authorities: list[AuthorityResponse]
    reservoirs: list[ReservoirResponse]
    weather: WeatherResponse | None = None
    weather_error: str | None = None
    error: str | None = None
    is_loading: bool
    geolocation_failure: str | None = None


class MarkerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    layer: str
    position: tuple[float, float]
    title: str
    degraded: bool
    popup: dict[str, Any]


class MapRenderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    center: tuple[float, float]
    zoom: int
    layers: dict[str, list[MarkerResponse]]
    selected_issue_id: str | None = None
    error: str | None = None


class CenterUpdateResponse(BaseModel):
    accepted: bool
    center: tuple[float, float]
