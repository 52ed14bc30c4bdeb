"""
Webhook handlers for form and chat-widget submissions.

Every variant goes through the same steps: parse the body, normalize it
into records, write the records to Supabase and then Google Sheets, and
map the outcome to a JSON response.
"""

from functools import lru_cache
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from src.api.variants import VARIANTS, Variant
from src.services.normalizer import MalformedBody, PayloadValidationError
from src.services.sheets import SheetsService
from src.services.store import SupabaseStore
from src.services.writer import DualSinkWriter, WriteOutcome
from src.utils.config import Settings, get_settings
from src.utils.logger import logger

webhook_router = APIRouter()

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST",
    "Access-Control-Allow-Headers": "Content-Type",
}


@lru_cache
def get_writer() -> DualSinkWriter:
    """Writer shared by all requests; sink clients connect on first use."""
    settings = get_settings()
    return DualSinkWriter(
        SupabaseStore.from_settings(),
        SheetsService.from_settings(),
        settings.spreadsheet_id,
    )


def _respond(variant: Variant, status_code: int, content: Dict[str, Any]) -> JSONResponse:
    if variant.success_flag:
        content = {"success": status_code == 200, **content}
    headers = CORS_HEADERS if variant.preflight else None
    return JSONResponse(content, status_code=status_code, headers=headers)


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        raise MalformedBody("Invalid JSON body") from e


async def handle_submission(
    variant: Variant,
    request: Request,
    writer: DualSinkWriter,
    settings: Settings,
) -> JSONResponse:
    """Run one submission through normalization and both sinks."""
    with structlog.contextvars.bound_contextvars(variant=variant.name):
        try:
            raw = await _read_json(request)
            logger.info("submission_received", body=raw)

            records = variant.normalize(raw)
        except PayloadValidationError as e:
            message = variant.error_message(e)
            logger.warning("payload_rejected", error=message)
            return _respond(variant, 400, {"error": message})

        try:
            report = await run_in_threadpool(
                writer.write,
                variant.table(settings),
                records,
                settings.sheet_range,
            )
        except Exception as e:
            logger.error("submission_failed", error=str(e))
            return _respond(variant, 500, {"error": str(e) or "Unknown error occurred"})

        if report.outcome is WriteOutcome.FATAL:
            return _respond(
                variant,
                500,
                {"error": variant.store_error_message, "details": report.error.details},
            )

        if report.outcome is WriteOutcome.PARTIAL_SUCCESS:
            return _respond(
                variant,
                500,
                {
                    "error": variant.mirror_error_message,
                    "details": report.error.details,
                    "partial": True,
                    "stored": report.record_count,
                },
            )

        logger.info(
            "submission_saved",
            records=report.record_count,
            sheet_range=report.updated_range,
        )
        if variant.success_flag:
            return _respond(variant, 200, {"message": variant.success_message})
        return _respond(variant, 200, {"message": variant.success_message, "data": report.stored})


def _make_endpoint(variant: Variant):
    async def endpoint(
        request: Request,
        writer: DualSinkWriter = Depends(get_writer),
        settings: Settings = Depends(get_settings),
    ):
        return await handle_submission(variant, request, writer, settings)

    endpoint.__name__ = f"{variant.name}_webhook"
    endpoint.__doc__ = f"Receive a {variant.name} submission."
    return endpoint


async def preflight():
    """CORS preflight; never touches the sinks."""
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)


for _variant in VARIANTS:
    # POST first, so other methods answer 405 with Allow: POST
    webhook_router.add_api_route(
        _variant.path,
        _make_endpoint(_variant),
        methods=["POST"],
        name=f"{_variant.name}_webhook",
    )
    if _variant.preflight:
        webhook_router.add_api_route(
            _variant.path,
            preflight,
            methods=["OPTIONS"],
            name=f"{_variant.name}_preflight",
            include_in_schema=False,
        )
