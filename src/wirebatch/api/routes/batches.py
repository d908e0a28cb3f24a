"""Wire batch endpoints: preview, execute, retry, reconcile and publish.

Stateless adapters over the pipeline; the caller keeps the upload and the
returned results between calls.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from wirebatch.core.config import AppSettings
from wirebatch.core.exceptions import FileStoreError
from wirebatch.execution.executor import PayoutExecutor, generate_batch_id
from wirebatch.ingest.parser import parse_export
from wirebatch.models.execution import BatchPayoutRequest, BatchPayoutResult, PayoutResult
from wirebatch.models.outputs import BatchMetadata, ReconciliationFile
from wirebatch.models.payout import ParseResult
from wirebatch.models.validation import ValidationSummary
from wirebatch.reconciliation.generator import ReconciliationGenerator
from wirebatch.validation.validator import validate_batch

router = APIRouter(tags=["batches"])


class UploadBody(BaseModel):
    file_name: str
    content: str


class ExecuteBody(UploadBody):
    funding_source_id: str
    source_currency: str = "usdb"
    dry_run: bool = False
    batch_id: Optional[str] = None


class RetryBody(UploadBody):
    prior: BatchPayoutResult
    funding_source_id: str
    source_currency: str = "usdb"


class ReconcileBody(BaseModel):
    batch_id: str
    results: list[PayoutResult]
    metadata: Optional[BatchMetadata] = None
    publish: bool = False


class ReconcileResponse(BaseModel):
    files: list[ReconciliationFile]
    published: list[str] = []


class PreviewResponse(BaseModel):
    parse: ParseResult
    validation: ValidationSummary


def _parse_or_400(body: UploadBody) -> ParseResult:
    parsed = parse_export(body.content, body.file_name)
    if parsed.is_document_failure:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Failed to parse file",
                "file_type": str(parsed.file_type),
                "errors": [e.model_dump() for e in parsed.errors],
            },
        )
    return parsed


def _executor(request: Request) -> PayoutExecutor:
    settings: AppSettings = request.app.state.settings
    return PayoutExecutor(request.app.state.provider, settings)


@router.post("/preview")
def preview(body: UploadBody, request: Request) -> PreviewResponse:
    parsed = _parse_or_400(body)
    summary = validate_batch(parsed.items, request.app.state.settings.routing)
    return PreviewResponse(parse=parsed, validation=summary)


@router.post("/execute")
def execute(body: ExecuteBody, request: Request) -> BatchPayoutResult:
    parsed = _parse_or_400(body)
    return _executor(request).execute(BatchPayoutRequest(
        batch_id=body.batch_id or generate_batch_id(),
        funding_source_id=body.funding_source_id,
        source_currency=body.source_currency,
        items=parsed.items,
        dry_run=body.dry_run,
    ))


@router.post("/retry")
def retry(body: RetryBody, request: Request) -> BatchPayoutResult:
    parsed = _parse_or_400(body)
    return _executor(request).retry(
        body.prior, parsed.items, body.funding_source_id, body.source_currency,
    )


@router.post("/reconciliation")
def reconciliation(body: ReconcileBody, request: Request) -> ReconcileResponse:
    settings: AppSettings = request.app.state.settings
    generator = ReconciliationGenerator(settings.reconciliation)
    files = generator.all_files(body.results, body.batch_id, body.metadata)
    if not body.publish:
        return ReconcileResponse(files=files)
    try:
        paths = generator.publish(files, request.app.state.file_store, body.batch_id)
    except FileStoreError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return ReconcileResponse(files=files, published=paths)
