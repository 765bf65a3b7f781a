"""
Payment collection endpoints: entry page, submission and provider callback.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, PlainTextResponse

from paylink.core.config import settings
from paylink.core.dependencies import get_orchestrator
from paylink.core.exceptions import ValidationError
from paylink.core.logging import get_logger
from paylink.core.templates import render_outcome, templates
from paylink.models.schemas import CallbackParams
from paylink.services.orchestrator import CollectionOrchestrator
from paylink.utils.validation import parse_collection_submission

router = APIRouter()
logger = get_logger(__name__)


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    orchestrator: CollectionOrchestrator = Depends(get_orchestrator),
):
    """
    Serve the submission form.

    Also records the callback URL from the Host header, unless a public
    base URL is configured.
    """
    callback_url = orchestrator.links.update_callback_from_host(
        request.headers.get("host"), scheme=request.url.scheme
    )
    logger.info("Serving entry page", callback_url=callback_url)

    return templates.TemplateResponse(
        request,
        "home.html",
        {"default_currency": settings.default_currency},
    )


@router.post("/start", response_class=HTMLResponse)
async def start_collection(
    request: Request,
    email_verification: Optional[str] = Form(None, alias="emailVerification"),
    email_payment: Optional[str] = Form(None, alias="emailPayment"),
    amount: Optional[str] = Form(None),
    currency: Optional[str] = Form(None),
    orchestrator: CollectionOrchestrator = Depends(get_orchestrator),
):
    """Validate a payment request and email the verification link."""
    try:
        collection_request = parse_collection_submission(
            email_verification,
            email_payment,
            amount,
            currency,
            default_currency=settings.default_currency,
        )
    except ValidationError as e:
        logger.warning("Submission rejected", **e.to_dict())
        return PlainTextResponse(f"Error: {e.detail}", status_code=e.status_code)

    logger.info(
        "Submission accepted",
        amount=str(collection_request.amount),
        currency=collection_request.currency,
    )

    result = await orchestrator.start_collection(collection_request)
    return render_outcome(request, result.outcome, result.status_code)


@router.get("/callback", response_class=HTMLResponse)
async def callback(
    request: Request,
    orchestrator: CollectionOrchestrator = Depends(get_orchestrator),
):
    """Resume a collection when the payer returns from Tink Link."""
    params = CallbackParams.model_validate(dict(request.query_params))
    result = await orchestrator.handle_callback(params)
    return render_outcome(request, result.outcome, result.status_code)
