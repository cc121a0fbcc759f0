"""Rich/JSON output selection.

The CLI renders a ServiceResult for humans (rich tables) or machines
(``--json``); ``--quiet`` reduces human output to the bare payload.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from feeld.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from feeld.services.result import ServiceResult


def format_result(
    result: ServiceResult,
    *,
    json_output: bool = False,
    quiet: bool = False,
    verbose: bool = False,
) -> str:
    """Format a ServiceResult for display."""
    if json_output:
        return result.model_dump_json(indent=2)
    if quiet:
        return render_quiet(result)
    return render_result(result, verbose=verbose)
