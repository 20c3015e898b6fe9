"""
DyeMatch v1 API Routes
Dye lookup, color matching, harmony and image session endpoints.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from dyematch.config import config
from dyematch.schemas import (
    CategoriesResponse, DyeListResponse, DyeOut, FitRequest, HSVOut, HarmonyRequest,
    HarmonyResponse, MatchOut, MatchRequest, MatchResponse, PaletteColorOut,
    PaletteRequest, PaletteResponse, PositionOut, RegionOut, SampleRequest,
    SampleResponse, SelectRequest, SessionResponse, ViewportOut, ZoomRequest,
)
from dyematch.services.colors.conversions import HSVColor
from dyematch.services.colors.filters import FilterConfig
from dyematch.services.colors.palette import PaletteEntry, SORT_KEYS
from dyematch.services.imaging import viewport
from dyematch.services.imaging.loading import read_image
from dyematch.services.orchestrator import (
    ColorMatchReport, HarmonyReport, MatchOrchestrator, ScoredMatch, get_orchestrator,
)
from dyematch.services.session import (
    ExtractionInProgressError, ImageSession, SampledColor, SessionNotFoundError,
    SessionStore, get_session_store,
)
from dyematch.utils.logging import get_logger
from dyematch.utils.metrics import get_metrics

router = APIRouter(prefix="/v1", tags=["DyeMatch v1"])
logger = get_logger()


# ============================================================================
# RESPONSE BUILDERS
# ============================================================================

def hsv_out(hsv: Optional[HSVColor]) -> Optional[HSVOut]:
    if hsv is None:
        return None
    return HSVOut(h=hsv.h, s=hsv.s, v=hsv.v)


def dye_out(entry: PaletteEntry) -> DyeOut:
    return DyeOut(
        id=entry.id,
        item_id=entry.item_id,
        name=entry.name,
        hex=entry.hex,
        category=entry.category,
        acquisition=entry.acquisition,
        cost=entry.cost,
        hsv=hsv_out(entry.hsv),
    )


def match_out(scored: ScoredMatch) -> MatchOut:
    return MatchOut(
        dye=dye_out(scored.match.entry),
        distance=scored.match.distance,
        deviance=scored.deviance,
        quality={
            "tier": scored.quality.tier,
            "label": scored.quality.label,
            "color": scored.quality.color,
        },
        ideal_hsv=hsv_out(scored.match.ideal_hsv),
        matched_hsv=hsv_out(scored.match.matched_hsv),
    )


def match_response(report: ColorMatchReport) -> Optional[MatchResponse]:
    if report.best is None:
        return None
    return MatchResponse(
        query_hex=report.query_hex,
        query_hsv=hsv_out(report.query_hsv),
        best=match_out(report.best),
        similar=[match_out(scored) for scored in report.similar],
    )


def harmony_response(report: HarmonyReport) -> HarmonyResponse:
    return HarmonyResponse(
        rule=report.rule,
        rule_recognized=report.rule_recognized,
        base_hex=report.base_hex,
        base=match_out(report.base) if report.base else None,
        matches=[match_out(scored) for scored in report.matches],
    )


def session_response(session: ImageSession) -> SessionResponse:
    state = session.viewport
    return SessionResponse(
        session_id=session.id,
        width=session.surface.width,
        height=session.surface.height,
        viewport=ViewportOut(
            zoom=state.zoom,
            scale=state.scale,
            pan_x=state.pan_x,
            pan_y=state.pan_y,
            zoom_min=state.zoom_min,
            zoom_max=state.zoom_max,
            zoom_step=state.zoom_step,
        ),
        extracting=session.extracting,
    )


def sample_response(sampled: SampledColor, orchestrator: MatchOrchestrator,
                    match: bool, filter_config: FilterConfig) -> SampleResponse:
    response = SampleResponse(
        region=RegionOut(x=sampled.region.x, y=sampled.region.y, size=sampled.region.size),
        hex=sampled.hex,
    )
    if match and sampled.hex:
        report = orchestrator.match_color(sampled.hex, filter_config)
        response.match = match_response(report) if report else None
    return response


def lookup_session(session_id: str, store: SessionStore) -> ImageSession:
    try:
        return store.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ============================================================================
# DYE ROUTES
# ============================================================================

@router.get("/dyes", response_model=DyeListResponse, summary="List dyes")
async def list_dyes(
    q: Optional[str] = Query(None, max_length=64, description="Case-insensitive name search"),
    category: Optional[str] = Query(None, max_length=32, description="Filter by category"),
    sort: Optional[str] = Query(None, pattern="^(hue|saturation|brightness)$", description="Sort key"),
    descending: bool = Query(False, description="Reverse the sort order"),
    orchestrator: MatchOrchestrator = Depends(get_orchestrator),
) -> DyeListResponse:
    """List palette dyes, optionally searched, filtered by category and sorted by HSV."""
    palette = orchestrator.palette
    entries = palette.sorted_by(sort, ascending=not descending) if sort in SORT_KEYS else list(palette)

    if q is not None:
        wanted = {entry.id for entry in palette.search_by_name(q)}
        entries = [entry for entry in entries if entry.id in wanted]
    if category is not None:
        in_category = {entry.id for entry in palette.by_category(category)}
        entries = [entry for entry in entries if entry.id in in_category]

    return DyeListResponse(count=len(entries), dyes=[dye_out(entry) for entry in entries])


@router.get("/dyes/categories", response_model=CategoriesResponse, summary="List dye categories")
async def list_categories(
    orchestrator: MatchOrchestrator = Depends(get_orchestrator),
) -> CategoriesResponse:
    return CategoriesResponse(categories=orchestrator.palette.categories())


@router.get("/dyes/{dye_id}", response_model=DyeOut, summary="Get a dye")
async def get_dye(
    dye_id: int,
    orchestrator: MatchOrchestrator = Depends(get_orchestrator),
) -> DyeOut:
    entry = orchestrator.palette.get_by_id(dye_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Dye not found: {dye_id}")
    return dye_out(entry)


# ============================================================================
# MATCHING ROUTES
# ============================================================================

@router.post("/match", response_model=MatchResponse, summary="Match a color to the closest dye")
async def match_color(
    request: MatchRequest,
    orchestrator: MatchOrchestrator = Depends(get_orchestrator),
) -> MatchResponse:
    """
    Find the closest eligible dye plus similar dyes for a hex color.

    Returns 422 for a malformed color and 404 when every dye is filtered out.
    """
    report = orchestrator.match_color(
        request.hex, request.filters.to_config(), radius=request.radius, limit=request.limit
    )
    if report is None:
        raise HTTPException(status_code=422, detail=f"Invalid hex color: {request.hex}")

    response = match_response(report)
    if response is None:
        raise HTTPException(status_code=404, detail="No dye matches the given filters")
    return response


@router.post("/harmony", response_model=HarmonyResponse, summary="Build a dye harmony set")
async def harmony(
    request: HarmonyRequest,
    orchestrator: MatchOrchestrator = Depends(get_orchestrator),
) -> HarmonyResponse:
    """
    Snap a harmony (complementary, analogous, triadic, split-complementary,
    tetradic, square) around a base color onto real dyes.

    The base is given as either `hex` or `dye_id`. Unknown rule names return
    the base match only with `rule_recognized` false.
    """
    if (request.hex is None) == (request.dye_id is None):
        raise HTTPException(status_code=400, detail="Provide exactly one of hex or dye_id")

    filter_config = request.filters.to_config()
    if request.dye_id is not None:
        report = orchestrator.harmony_for_dye(request.dye_id, request.rule, filter_config)
        if report is None:
            raise HTTPException(status_code=404, detail=f"Dye not found: {request.dye_id}")
    else:
        report = orchestrator.harmony(request.hex, request.rule, filter_config)
        if report is None:
            raise HTTPException(status_code=422, detail=f"Invalid hex color: {request.hex}")

    return harmony_response(report)


# ============================================================================
# IMAGE SESSION ROUTES
# ============================================================================

@router.post("/sessions", response_model=SessionResponse, status_code=201,
             summary="Upload an image and open a sampling session")
async def create_session(
    file: UploadFile = File(..., description="Image file (JPEG, PNG, WebP or GIF)"),
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    surface = await read_image(file)
    session = store.create(surface)
    return session_response(session)


@router.get("/sessions/{session_id}", response_model=SessionResponse, summary="Get session state")
async def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    return session_response(lookup_session(session_id, store))


@router.put("/sessions/{session_id}", response_model=SessionResponse,
            summary="Replace the image in a session")
async def replace_session_image(
    session_id: str,
    file: UploadFile = File(..., description="Image file (JPEG, PNG, WebP or GIF)"),
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    """Load a new image into an existing session; zoom, pan and drag start over."""
    session = lookup_session(session_id, store)
    surface = await read_image(file)
    try:
        session.load(surface)
    except ExtractionInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    get_metrics().increment("images_replaced_total")
    logger.info(
        "Replaced session image",
        extra={"session_id": session.id, "width": surface.width, "height": surface.height}
    )
    return session_response(session)


@router.delete("/sessions/{session_id}", status_code=204, summary="Close a session")
async def delete_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> None:
    try:
        store.delete(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/sessions/{session_id}/zoom", response_model=SessionResponse, summary="Zoom the viewport")
async def zoom_session(
    session_id: str,
    request: ZoomRequest,
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    """Apply one zoom gesture: absolute zoom, delta, modifier+wheel or key."""
    if request.zoom is not None and not config.validate_zoom(request.zoom):
        raise HTTPException(status_code=400, detail="zoom must be a positive percent")

    session = lookup_session(session_id, store)
    state = session.viewport

    if request.zoom is not None:
        viewport.set_zoom(state, request.zoom)
    elif request.delta is not None:
        viewport.zoom_by(state, request.delta)
    elif request.wheel_delta_y is not None:
        viewport.wheel_zoom(state, request.wheel_delta_y, request.modifier)
    elif request.key is not None:
        viewport.key_zoom(state, request.key)
    else:
        raise HTTPException(status_code=400, detail="Provide zoom, delta, wheel_delta_y or key")

    return session_response(session)


@router.post("/sessions/{session_id}/fit", response_model=SessionResponse,
             summary="Fit the image to a container")
async def fit_session(
    session_id: str,
    request: FitRequest,
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    session = lookup_session(session_id, store)
    viewport.fit_to_container(
        session.viewport, request.container_width, request.container_height, mode=request.mode
    )
    return session_response(session)


@router.post("/sessions/{session_id}/sample", response_model=SampleResponse,
             summary="Sample the color under a pointer")
async def sample_session(
    session_id: str,
    request: SampleRequest,
    store: SessionStore = Depends(get_session_store),
    orchestrator: MatchOrchestrator = Depends(get_orchestrator),
) -> SampleResponse:
    size = request.size if request.size is not None else config.DEFAULT_SAMPLE_SIZE
    if not config.validate_sample_size(size):
        raise HTTPException(status_code=400, detail=f"size must be between 1 and {config.MAX_SAMPLE_SIZE}")

    session = lookup_session(session_id, store)
    sampled = session.sample_at(request.x, request.y, request.scroll_x, request.scroll_y, size)
    get_metrics().increment("samples_total")
    return sample_response(sampled, orchestrator, request.match, request.filters.to_config())


@router.post("/sessions/{session_id}/select", response_model=SampleResponse,
             summary="Sample the region covered by a drag")
async def select_session(
    session_id: str,
    request: SelectRequest,
    store: SessionStore = Depends(get_session_store),
    orchestrator: MatchOrchestrator = Depends(get_orchestrator),
) -> SampleResponse:
    session = lookup_session(session_id, store)
    sampled = session.select(
        (request.start_x, request.start_y),
        (request.end_x, request.end_y),
        request.scroll_x,
        request.scroll_y,
    )
    get_metrics().increment("selections_total")
    return sample_response(sampled, orchestrator, request.match, request.filters.to_config())


@router.post("/sessions/{session_id}/palette", response_model=PaletteResponse,
             summary="Extract dominant colors and match them to dyes")
def extract_session_palette(
    session_id: str,
    request: PaletteRequest,
    store: SessionStore = Depends(get_session_store),
    orchestrator: MatchOrchestrator = Depends(get_orchestrator),
) -> PaletteResponse:
    """
    Cluster the image into k dominant colors, mark where each appears and
    match each to the closest eligible dye.

    Returns 409 while another extraction is running on the same session.
    """
    if request.k is not None and not config.validate_color_count(request.k):
        raise HTTPException(status_code=400, detail=f"k must be between 1 and {config.MAX_PALETTE_COLORS}")

    session = lookup_session(session_id, store)
    try:
        extraction = session.extract_and_match(orchestrator, k=request.k,
                                               filter_config=request.filters.to_config())
    except ExtractionInProgressError as e:
        get_metrics().increment("extractions_rejected_total")
        logger.warning("Rejected concurrent extraction", extra={"session_id": session_id})
        raise HTTPException(status_code=409, detail=str(e))

    colors = []
    for color in extraction.colors:
        position = color.position
        colors.append(PaletteColorOut(
            hex=color.extracted.hex,
            ratio=color.extracted.ratio,
            position=PositionOut(x=position.x, y=position.y) if position else None,
            match=match_response(color.report) if color.report else None,
        ))

    return PaletteResponse(
        session_id=session.id,
        colors=colors,
        overlay_png_b64=extraction.overlay_png_b64,
    )


# ============================================================================
# OBSERVABILITY
# ============================================================================

@router.get("/metrics", summary="In-process metrics")
async def metrics(store: SessionStore = Depends(get_session_store)) -> Dict[str, Any]:
    summary = get_metrics().get_summary()
    summary["sessions"] = store.stats()
    return summary
