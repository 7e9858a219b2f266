from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from context_assistant.uploads import BlobMissingError, BlobStorageError, FileCatalog, RecordNotFoundError

from api.dependencies import get_catalog

router = APIRouter(prefix="/files", tags=["files"])


@router.post("/upload")
async def upload_file(file: UploadFile = File(...), catalog: FileCatalog = Depends(get_catalog)):
    payload = await file.read()
    filename = file.filename or "unnamed"
    return catalog.upload(payload, filename).to_dict()


@router.post("/upload-from-path")
def upload_file_from_path(
    file_path: str = Form(...),
    filename: str = Form(...),
    file_type: Optional[str] = Form(None),
    catalog: FileCatalog = Depends(get_catalog),
):
    try:
        record = catalog.upload_from_path(file_path, filename, file_type)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return record.to_dict()


@router.get("")
def list_files(catalog: FileCatalog = Depends(get_catalog)):
    return [record.to_dict() for record in catalog.list()]


@router.delete("")
def wipe_files(catalog: FileCatalog = Depends(get_catalog)):
    catalog.wipe_all()
    return {"status": "wiped"}


@router.get("/{file_id}")
def get_file(file_id: str, catalog: FileCatalog = Depends(get_catalog)):
    try:
        return catalog.get(file_id).to_dict()
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.delete("/{file_id}")
def delete_file(file_id: str, catalog: FileCatalog = Depends(get_catalog)):
    try:
        catalog.delete(file_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except BlobStorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return {"status": "deleted", "id": file_id}


@router.post("/{file_id}/toggle")
def toggle_file_context(file_id: str, catalog: FileCatalog = Depends(get_catalog)):
    try:
        return catalog.toggle_context(file_id).to_dict()
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/{file_id}/content")
def extract_file_content(file_id: str, catalog: FileCatalog = Depends(get_catalog)):
    try:
        result = catalog.extract_result(file_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except BlobMissingError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return {"id": file_id, "status": result.status.value, "content": result.as_text()}
