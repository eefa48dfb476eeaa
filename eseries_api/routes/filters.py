"""Filter routes — MFB band-pass bank resistor design."""

from fastapi import APIRouter, HTTPException

from eseries_api.models import MfbRequest, MfbResponse, MfbStageResponse
from eseries.errors import InvalidInputError
from eseries.mfb import SPECTRUM_BANDS, design_mfb_bandpass
from eseries.series import ESeries, engineering_notation

router = APIRouter()


@router.get("/mfb/spectrum-bands")
async def spectrum_bands():
    """Default seven-band spectrum analyzer parameters."""
    return SPECTRUM_BANDS


@router.post("/mfb", response_model=MfbResponse)
async def design_mfb(request: MfbRequest):
    """Design and snap the resistors of an MFB band-pass filter bank."""
    try:
        series = ESeries.parse(request.series)
        stages = design_mfb_bandpass(
            request.center_frequencies,
            request.capacitance,
            gain=request.gain,
            q=request.q,
            series=series,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return MfbResponse(
        series=series.value,
        stages=[
            MfbStageResponse(
                fm=s.fm,
                capacitance=s.capacitance,
                r1=s.r1,
                r2=s.r2,
                r3=s.r3,
                bandwidth=s.bandwidth,
                r1_snapped=s.r1_snapped,
                r2_snapped=s.r2_snapped,
                r3_snapped=s.r3_snapped,
                fm_snapped=s.fm_snapped,
                gain_snapped=s.gain_snapped,
                fm_error_pct=s.fm_error_pct,
                description=(
                    f'{s.fm:g} Hz band: C={engineering_notation(s.capacitance, "F")}, '
                    f'R1={engineering_notation(s.r1_snapped, "Ω")}, '
                    f'R2={engineering_notation(s.r2_snapped, "Ω")}, '
                    f'R3={engineering_notation(s.r3_snapped, "Ω")}'
                ),
            )
            for s in stages
        ],
    )
