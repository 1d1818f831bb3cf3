from __future__ import annotations

from ..models.run_result import RandomizationSuccess

"""SUMMARY line rendering.

Format:
SUMMARY rows={rows} units={units} strata={strata} treatment={t} control={c} elapsed_sec={elapsed}
"""

__all__ = [
    "format_elapsed",
    "render_summary_line",
]


def format_elapsed(seconds: float) -> str:
    """Render seconds without scientific notation, integers without decimals."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return str(round(seconds, 3))


def render_summary_line(result: RandomizationSuccess, elapsed_seconds: float) -> str:
    """Render the SUMMARY line for a successful run.

    Examples:
        >>> from stratassign.models import RandomizationSuccess
        >>> result = RandomizationSuccess(
        ...     output_headers=("id", "arm"), assignments={"1": "C", "2": "C"},
        ...     unit_column="id", assignment_column="arm",
        ...     unit_count=2, stratum_count=1, row_count=2,
        ... )
        >>> render_summary_line(result, 0.5)
        'SUMMARY rows=2 units=2 strata=1 treatment=0 control=2 elapsed_sec=0.5'
    """
    return (
        f"SUMMARY rows={result.row_count} "
        f"units={result.unit_count} "
        f"strata={result.stratum_count} "
        f"treatment={result.treated_count} "
        f"control={result.control_count} "
        f"elapsed_sec={format_elapsed(elapsed_seconds)}"
    )
