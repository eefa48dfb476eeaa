"""
Component tolerance vs. rounding bin edge comparison.

tolerance_view() gathers what a comparison figure needs: the rounding of
some sample values, the bin edges, and the tolerance band of every nominal
value. Drawing is left to a renderer passed in by the caller; SvgRenderer
produces a standalone SVG document.
"""

import math
from dataclasses import dataclass
from html import escape as html_escape
from typing import List, Optional, Union

import numpy as np

from eseries.errors import InvalidInputError
from eseries.rounding import RoundResult, round_to_series
from eseries.series import ESeries, RoundingPolicy, engineering_notation


@dataclass
class ToleranceView:
    """Data behind one tolerance/bin-edge figure."""
    series: ESeries
    inputs: np.ndarray
    rounding: RoundResult
    tolerance: float
    lower_limits: np.ndarray
    upper_limits: np.ndarray

    @property
    def title(self) -> str:
        return f"Component Tolerance and Bin Edge Comparison ({self.rounding.policy.value})"


def estimate_tolerance(pns: np.ndarray) -> float:
    """
    Tolerance implied by the spacing of adjacent series values.

    The mean of (b - a)/(b + a) over neighbours, snapped to a 1-2-5 step
    (E3 → 0.5 (50 %) ... E192 → 0.005 (0.5 %)).
    """
    pns = np.asarray(pns, dtype=float)
    if len(pns) < 2:
        raise InvalidInputError("At least two series values are needed to estimate a tolerance")
    tol = float(np.mean((pns[1:] - pns[:-1]) / (pns[1:] + pns[:-1])))
    scale = 10.0 ** -math.floor(math.log10(tol))
    return round(10 ** (round(3 * math.log10(tol * scale)) / 3)) / scale


def tolerance_view(
    x,
    series: Union[str, ESeries],
    policy: Union[str, RoundingPolicy] = RoundingPolicy.HARMONIC,
) -> ToleranceView:
    """Round x and attach the tolerance band of every nominal value used."""
    series = ESeries.parse(series)
    result = round_to_series(x, series, policy)
    if len(result.pns) < 2:
        raise InvalidInputError("Increase the input value range: it must cover multiple E-series values")
    tol = estimate_tolerance(result.pns)
    return ToleranceView(
        series=series,
        inputs=np.asarray(x, dtype=float),
        rounding=result,
        tolerance=tol,
        lower_limits=result.pns * (1 - tol),
        upper_limits=result.pns * (1 + tol),
    )


class Renderer:
    """Draws a ToleranceView. Subclasses return whatever their medium uses."""

    def render(self, view: ToleranceView):
        raise NotImplementedError


def _safe(text: str) -> str:
    """Escape text for safe SVG embedding."""
    return html_escape(str(text), quote=True)


class SvgRenderer(Renderer):
    """Renders the view as an SVG document string.

    The x axis is logarithmic in value; the y axis has one row per nominal
    series value, lowest at the bottom.
    """

    def __init__(self, width: int = 720, height: Optional[int] = None, unit: str = ''):
        self.width = width
        self.height = height
        self.unit = unit

    def render(self, view: ToleranceView) -> str:
        pns = view.rounding.pns
        edges = view.rounding.edges
        rows = len(pns)
        margin_left, margin_right, margin_top, margin_bottom = 80, 30, 50, 70
        row_height = 28
        width = self.width
        height = self.height or margin_top + margin_bottom + (rows + 1) * row_height
        plot_w = width - margin_left - margin_right
        plot_h = height - margin_top - margin_bottom

        finite_inputs = view.inputs[np.isfinite(view.inputs) & (view.inputs > 0)]
        span = np.concatenate([edges, view.lower_limits, view.upper_limits, finite_inputs.ravel()])
        lo = math.log10(span.min())
        hi = math.log10(span.max())
        if hi == lo:
            hi = lo + 1

        def px(value: float) -> float:
            return round(margin_left + (math.log10(value) - lo) / (hi - lo) * plot_w, 2)

        def py(row: float) -> float:
            # row 0 is the lowest series value, drawn at the bottom
            return round(margin_top + plot_h - (row + 1) * plot_h / (rows + 1), 2)

        parts: List[str] = [
            f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width} {height}" '
            f'width="{width}" height="{height}">',
            f'  <rect width="{width}" height="{height}" fill="#0f172a" rx="8"/>',
            f'  <text x="{width / 2}" y="25" text-anchor="middle" fill="#64748b" '
            f'font-size="13" font-family="monospace">{_safe(view.title)}</text>',
        ]

        parts.append('  <g class="edges">')
        for edge in edges:
            x = px(edge)
            parts.append(
                f'    <line x1="{x}" y1="{margin_top}" x2="{x}" y2="{margin_top + plot_h}" '
                f'stroke="#22c55e" stroke-width="1.5"/>'
            )
        parts.append('  </g>')

        parts.append('  <g class="tolerance">')
        for row, (low, high) in enumerate(zip(view.lower_limits, view.upper_limits)):
            y = py(row)
            parts.append(
                f'    <line x1="{px(low)}" y1="{y}" x2="{px(high)}" y2="{y}" stroke="#ef4444" stroke-width="1.5"/>'
            )
            parts.append(f'    <circle cx="{px(low)}" cy="{y}" r="3" fill="none" stroke="#ef4444"/>')
            parts.append(f'    <circle cx="{px(high)}" cy="{y}" r="3" fill="none" stroke="#ef4444"/>')
        parts.append('  </g>')

        parts.append('  <g class="nominal">')
        for row, value in enumerate(pns):
            x, y = px(value), py(row)
            parts.append(
                f'    <path d="M {x} {y - 5} L {x + 5} {y} L {x} {y + 5} L {x - 5} {y} Z" fill="#3B82F6"/>'
            )
            parts.append(
                f'    <text x="{margin_left - 8}" y="{y + 4}" text-anchor="end" fill="#94a3b8" '
                f'font-size="10" font-family="monospace">{_safe(engineering_notation(value, self.unit))}</text>'
            )
        parts.append('  </g>')

        parts.append('  <g class="inputs">')
        for value, row in zip(view.inputs.ravel(), view.rounding.index.ravel()):
            if np.isnan(row):
                continue
            x, y = px(value), py(row)
            parts.append(
                f'    <path d="M {x - 5} {y} L {x + 5} {y} M {x} {y - 5} L {x} {y + 5}" '
                f'stroke="#e2e8f0" stroke-width="2"/>'
            )
        parts.append('  </g>')

        legend_y = height - 25
        parts.append(
            f'  <text x="{margin_left}" y="{legend_y}" fill="#64748b" font-size="11" font-family="monospace">'
            f'green: bin edges | blue: nominal {_safe(view.series.value)} values | '
            f'red: tolerance ({view.tolerance * 100:.9g}%) | white: inputs</text>'
        )
        parts.append('</svg>')
        return '\n'.join(parts)


def render_tolerance_view(view: ToleranceView, renderer: Optional[Renderer] = None):
    """Draw the view with the given renderer (SVG when none is given)."""
    if renderer is None:
        renderer = SvgRenderer()
    return renderer.render(view)
