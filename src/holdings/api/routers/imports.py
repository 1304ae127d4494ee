"""Import endpoints: preview, reconcile and apply brokerage CSV uploads."""

from fastapi import APIRouter, Depends, File, UploadFile

from holdings.api.deps import get_app_settings, get_import_service, get_owner_id
from holdings.api.schemas.imports import (
    ApplyResponse,
    ApplyResultResponse,
    ChangeSummaryResponse,
    ParseResultResponse,
    ReconcileResponse,
)
from holdings.config.settings import Settings
from holdings.core.exceptions import ValidationError
from holdings.services import ImportService

router = APIRouter(prefix="/imports", tags=["imports"])


def read_uploads(files: list[UploadFile], max_bytes: int) -> list[tuple[str, str]]:
    """Read uploads into (file name, text) pairs in upload order."""
    if not files:
        raise ValidationError("No files uploaded")

    contents: list[tuple[str, str]] = []
    for upload in files:
        name = upload.filename or f"file{len(contents) + 1}.csv"
        raw = upload.file.read(max_bytes + 1)
        if len(raw) > max_bytes:
            raise ValidationError(f"{name} exceeds the {max_bytes} byte upload limit")
        if not raw.strip():
            raise ValidationError(f"{name} is empty")
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise ValidationError(f"{name} is not valid UTF-8 text")
        contents.append((name, text))
    return contents


@router.post("/preview", response_model=ParseResultResponse)
def preview_import(
    files: list[UploadFile] = File(...),
    service: ImportService = Depends(get_import_service),
    settings: Settings = Depends(get_app_settings),
):
    """Parse uploaded exports without comparing or saving anything."""
    parse_result = service.preview(read_uploads(files, settings.max_upload_bytes))
    return ParseResultResponse.model_validate(parse_result)


@router.post("/reconcile", response_model=ReconcileResponse)
def reconcile_import(
    files: list[UploadFile] = File(...),
    owner_id: str = Depends(get_owner_id),
    service: ImportService = Depends(get_import_service),
    settings: Settings = Depends(get_app_settings),
):
    """Parse uploaded exports and diff them against the stored portfolio."""
    parse_result = service.preview(read_uploads(files, settings.max_upload_bytes))
    summary = service.reconcile(owner_id, parse_result)
    return ReconcileResponse(
        parse_result=ParseResultResponse.model_validate(parse_result),
        summary=ChangeSummaryResponse.model_validate(summary),
    )


@router.post("/apply", response_model=ApplyResponse, status_code=201)
def apply_import(
    files: list[UploadFile] = File(...),
    owner_id: str = Depends(get_owner_id),
    service: ImportService = Depends(get_import_service),
    settings: Settings = Depends(get_app_settings),
):
    """
    Parse, reconcile and save an import.

    The stored portfolio is left unchanged if any write step fails.
    """
    outcome = service.import_files(owner_id, read_uploads(files, settings.max_upload_bytes))
    return ApplyResponse(
        summary=ChangeSummaryResponse.model_validate(outcome.summary),
        result=ApplyResultResponse.model_validate(outcome.result),
    )
