"""Rounding routes — series tables, value rounding, tolerance view SVG."""

import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from eseries_api.models import (
    RoundRequest,
    RoundResponse,
    SeriesInfo,
    SeriesListResponse,
    ViewRequest,
    from_json_list,
    to_json_list,
)
from eseries.errors import InvalidInputError
from eseries.rounding import round_to_series
from eseries.series import ESeries
from eseries.view import SvgRenderer, render_tolerance_view, tolerance_view

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/series", response_model=SeriesListResponse)
async def list_series():
    """List the supported E-series and their base values."""
    return SeriesListResponse(
        series=[
            SeriesInfo(name=s.value, values_per_decade=len(s.digits), base_values=list(s.base_values))
            for s in ESeries
        ]
    )


@router.post("/round", response_model=RoundResponse)
async def round_values(request: RoundRequest):
    """Round values to the nearest preferred numbers of a series."""
    try:
        result = round_to_series(from_json_list(request.values), request.series, request.policy)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return RoundResponse(
        values=to_json_list(result.values),
        index=[None if i is None else int(i) for i in to_json_list(result.index)],
        pns=result.pns.tolist(),
        edges=result.edges.tolist(),
        policy=result.policy.value,
    )


@router.post("/view")
async def view_tolerance(request: ViewRequest):
    """Render the tolerance vs. bin edge comparison as SVG."""
    try:
        view = tolerance_view(from_json_list(request.values), request.series, request.policy)
        svg = render_tolerance_view(view, SvgRenderer(unit=request.unit))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.error("Tolerance view rendering failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Tolerance view rendering failed.")

    return Response(content=svg, media_type="image/svg+xml")
