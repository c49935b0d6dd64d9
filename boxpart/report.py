"""Text and JSON reports for check results.

The text report is rendered from ``templates/check_report.j2``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

from .check import CheckResult
from .serialization import box_to_json

_TEMPLATE_DIR = Path(__file__).parent / "templates"
_ENV = jinja2.Environment(
    loader=jinja2.FileSystemLoader(_TEMPLATE_DIR),
    autoescape=False,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render(template_name: str, **kwargs: Any) -> str:
    return _ENV.get_template(template_name).render(**kwargs)


def format_report(result: CheckResult, source: str | None = None) -> str:
    """Human-readable report for terminal output."""
    return render("check_report.j2", result=result, source=source)


def report_json(result: CheckResult) -> dict[str, Any]:
    """Machine-readable report for pipeline integration."""
    return {
        "root": box_to_json(result.root),
        "box_count": result.box_count,
        "well_formed": result.is_well_formed,
        "is_partition": result.is_partition,
        "error_count": len(result.errors),
        "warning_count": len(result.warnings),
        "diagnostics": [
            {
                "check": d.check,
                "severity": d.severity.value,
                "message": d.message,
                "boxes": [box_to_json(b) for b in d.boxes],
            }
            for d in result.diagnostics
        ],
    }
