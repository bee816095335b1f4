from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile

from shopdesk.app.api.deps import get_log_sink, get_storage
from shopdesk.app.schemas.dashboard import UploadOut
from shopdesk.app.services.activity_log import LogSink
from shopdesk.app.services.file_service import FileStorageService, store_uploads

router = APIRouter()


@router.post("/", response_model=UploadOut)
def upload_files(
    files: list[UploadFile] = File(...),
    storage: FileStorageService = Depends(get_storage),
    sink: LogSink = Depends(get_log_sink),
) -> UploadOut:
    batch = [(f.filename, f.file) for f in files]
    return UploadOut(files=store_uploads(storage, batch, sink=sink))
