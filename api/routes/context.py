from __future__ import annotations

from fastapi import APIRouter, Depends

from context_assistant.uploads import FileCatalog

from api.dependencies import get_catalog

router = APIRouter(prefix="/context", tags=["context"])


@router.get("")
def get_file_context(catalog: FileCatalog = Depends(get_catalog)):
    return {"blocks": catalog.get_context()}


@router.get("/optimized")
def get_optimized_file_context(catalog: FileCatalog = Depends(get_catalog)):
    return {"blocks": catalog.get_optimized_context()}
