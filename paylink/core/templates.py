"""
Jinja2 template environment shared by pages and email bodies.
"""
from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates

from paylink.models.schemas import Outcome
from paylink.utils.formatting import format_amount

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["amount"] = format_amount


def render_outcome(request: Request, outcome: Outcome, status_code: int = 200):
    """Render an outcome page."""
    return templates.TemplateResponse(
        request,
        "outcome.html",
        {
            "outcome": outcome,
            "timestamp": datetime.now().strftime("%d/%m/%Y %H:%M:%S"),
        },
        status_code=status_code,
    )


def render_email(template_name: str, **context: Any) -> str:
    """Render an email body to an HTML string."""
    return templates.get_template(template_name).render(**context)
