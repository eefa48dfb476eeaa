"""Circuit route — equivalent series/parallel component search."""

import logging
import os

from fastapi import APIRouter, HTTPException

from eseries_api.models import (
    CircuitMatch,
    CircuitRequest,
    CircuitResponse,
    from_json_list,
    to_json_list,
)
from eseries.circuit import MAX_BATCH_ELEMENTS, equivalent_circuit, series_window
from eseries.errors import InvalidInputError
from eseries.series import engineering_notation

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_ELEMENTS = int(os.getenv("ESERIES_MAX_BATCH_ELEMENTS", str(MAX_BATCH_ELEMENTS)))

# Upper bound on multisets a single request may ask the iterative search to walk
MAX_SEARCH_SIZE = int(os.getenv("ESERIES_MAX_SEARCH_SIZE", str(2 ** 26)))


def _describe(components: list, reciprocal: bool) -> str:
    if any(c is None for c in components):
        return ""
    joiner = " ∥ " if reciprocal else " + "
    return joiner.join(engineering_notation(c) for c in components)


@router.post("/circuit", response_model=CircuitResponse)
def search_circuit(request: CircuitRequest):
    """Find component multisets whose combined value best matches each target.

    Declared sync so the search runs in the threadpool.
    """
    if request.count < 1 or request.count > 8:
        raise HTTPException(status_code=400, detail="count must be between 1 and 8.")

    try:
        window = series_window(request.series, request.bounds)
        if len(window) ** request.count > MAX_SEARCH_SIZE:
            raise HTTPException(
                status_code=400,
                detail="Search too large. Narrow the bounds, use fewer components or a coarser series.",
            )
        result = equivalent_circuit(
            from_json_list(request.targets),
            request.series,
            request.bounds,
            request.count,
            request.reciprocal,
            max_elements=MAX_ELEMENTS,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    matches = []
    for i, target in enumerate(request.targets):
        components = to_json_list(result.components[i])
        matches.append(CircuitMatch(
            target=target,
            equivalent=to_json_list(result.equivalent[i:i + 1])[0],
            components=components,
            index=[None if v is None else int(v) for v in to_json_list(result.index[i])],
            display=_describe(components, result.reciprocal),
        ))

    return CircuitResponse(
        matches=matches,
        pns=result.pns.tolist(),
        reciprocal=result.reciprocal,
        strategy=result.strategy,
    )
