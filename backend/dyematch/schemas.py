"""
DyeMatch API Schemas
Pydantic models for dye lookup, matching, harmony and image session routes.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from dyematch.services.colors.filters import FilterConfig

HEX_PATTERN = r"^#?[0-9A-Fa-f]{6}$"


class FilterOptions(BaseModel):
    """Dye exclusion switches; all off by default."""
    exclude_metallic: bool = Field(False, description="Skip dyes with 'Metallic' in the name")
    exclude_pastel: bool = Field(False, description="Skip dyes with 'Pastel' in the name")
    exclude_dark: bool = Field(False, description="Skip dyes whose name starts with 'Dark'")
    exclude_cosmic: bool = Field(False, description="Skip Cosmic Exploration / Cosmic Fortunes dyes")
    exclude_expensive: bool = Field(False, description="Skip market-board premium dyes")

    def to_config(self) -> FilterConfig:
        return FilterConfig(
            exclude_metallic=self.exclude_metallic,
            exclude_pastel=self.exclude_pastel,
            exclude_dark=self.exclude_dark,
            exclude_cosmic=self.exclude_cosmic,
            exclude_expensive=self.exclude_expensive,
        )


# ============================================================================
# DYE SCHEMAS
# ============================================================================

class HSVOut(BaseModel):
    h: float = Field(..., ge=0, lt=360, description="Hue in degrees")
    s: float = Field(..., ge=0, le=100, description="Saturation percent")
    v: float = Field(..., ge=0, le=100, description="Value percent")


class DyeOut(BaseModel):
    """A palette dye."""
    id: int
    item_id: Optional[int] = None
    name: str
    hex: str = Field(..., pattern=r"^#[0-9A-F]{6}$")
    category: str = ""
    acquisition: str = ""
    cost: int = 0
    hsv: HSVOut


class DyeListResponse(BaseModel):
    count: int
    dyes: List[DyeOut]


class CategoriesResponse(BaseModel):
    categories: List[str]


# ============================================================================
# MATCHING SCHEMAS
# ============================================================================

class QualityOut(BaseModel):
    tier: str = Field(..., description="excellent, good or poor")
    label: str
    color: str = Field(..., description="Display color for the tier")


class MatchOut(BaseModel):
    """A matched dye with distance and quality."""
    dye: DyeOut
    distance: float = Field(..., ge=0, description="Euclidean RGB distance")
    deviance: float = Field(..., ge=0, le=10, description="Distance rescaled to 0-10 in 0.5 steps")
    quality: QualityOut
    ideal_hsv: Optional[HSVOut] = Field(None, description="Target color before snapping (harmony only)")
    matched_hsv: Optional[HSVOut] = Field(None, description="HSV of the matched dye (harmony only)")


class MatchRequest(BaseModel):
    hex: str = Field(..., pattern=HEX_PATTERN, description="Color to match, #RRGGBB")
    filters: FilterOptions = Field(default_factory=FilterOptions)
    radius: Optional[float] = Field(None, ge=0, le=442, description="Similar-dye distance cutoff")
    limit: Optional[int] = Field(None, ge=0, le=100, description="Maximum similar dyes")


class MatchResponse(BaseModel):
    query_hex: str
    query_hsv: HSVOut
    best: MatchOut
    similar: List[MatchOut] = Field(default_factory=list)


class HarmonyRequest(BaseModel):
    """Base color given either as hex or as a dye id."""
    hex: Optional[str] = Field(None, pattern=HEX_PATTERN)
    dye_id: Optional[int] = Field(None, description="Palette dye id or item id")
    rule: str = Field(..., min_length=1, max_length=40, description="Harmony rule name")
    filters: FilterOptions = Field(default_factory=FilterOptions)


class HarmonyResponse(BaseModel):
    rule: str
    rule_recognized: bool
    base_hex: str
    base: Optional[MatchOut] = None
    matches: List[MatchOut] = Field(default_factory=list)


# ============================================================================
# IMAGE SESSION SCHEMAS
# ============================================================================

class ViewportOut(BaseModel):
    zoom: float = Field(..., description="Zoom percent")
    scale: float
    pan_x: float
    pan_y: float
    zoom_min: float
    zoom_max: float
    zoom_step: float


class SessionResponse(BaseModel):
    session_id: str
    width: int
    height: int
    viewport: ViewportOut
    extracting: bool = False


class ZoomRequest(BaseModel):
    """Exactly one gesture is applied, checked in field order."""
    zoom: Optional[float] = Field(None, description="Absolute zoom percent (clamped)")
    delta: Optional[float] = Field(None, description="Relative change in percentage points")
    wheel_delta_y: Optional[float] = Field(None, description="Wheel delta; only zooms with modifier")
    modifier: bool = Field(False, description="Whether the zoom modifier key was held")
    key: Optional[str] = Field(None, max_length=8, description="Keyboard shortcut: + = - 0")


class FitRequest(BaseModel):
    container_width: float = Field(..., gt=0)
    container_height: float = Field(..., gt=0)
    mode: str = Field("fit", pattern="^(fit|width)$")


class RegionOut(BaseModel):
    x: float
    y: float
    size: int


class SampleRequest(BaseModel):
    x: float = Field(..., description="Pointer x relative to the container")
    y: float = Field(..., description="Pointer y relative to the container")
    scroll_x: float = 0.0
    scroll_y: float = 0.0
    size: Optional[int] = Field(None, ge=1, description="Sample box side; 1 for a single pixel, default from config")
    match: bool = Field(True, description="Also match the sampled color")
    filters: FilterOptions = Field(default_factory=FilterOptions)


class SelectRequest(BaseModel):
    start_x: float
    start_y: float
    end_x: float
    end_y: float
    scroll_x: float = 0.0
    scroll_y: float = 0.0
    match: bool = True
    filters: FilterOptions = Field(default_factory=FilterOptions)


class SampleResponse(BaseModel):
    region: RegionOut
    hex: Optional[str] = None
    match: Optional[MatchResponse] = None


class PaletteRequest(BaseModel):
    k: Optional[int] = Field(None, ge=1, description="Number of colors to extract")
    filters: FilterOptions = Field(default_factory=FilterOptions)


class PositionOut(BaseModel):
    x: int
    y: int


class PaletteColorOut(BaseModel):
    hex: str
    ratio: float = Field(..., ge=0.0, le=1.0, description="Share of sampled pixels")
    position: Optional[PositionOut] = None
    match: Optional[MatchResponse] = None


class PaletteResponse(BaseModel):
    session_id: str
    colors: List[PaletteColorOut]
    overlay_png_b64: Optional[str] = None


# ============================================================================
# SERVICE SCHEMAS
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("dyematch", description="Service name")
    dyes_loaded: int = Field(0, description="Number of dyes in the palette")
