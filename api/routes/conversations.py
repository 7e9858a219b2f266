from __future__ import annotations

from fastapi import APIRouter, Depends

from context_assistant.uploads import FileCatalog

from api.dependencies import get_catalog

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.delete("/{conversation_id}/files")
def delete_files_by_conversation(conversation_id: str, catalog: FileCatalog = Depends(get_catalog)):
    return {"conversation_id": conversation_id, "deleted": catalog.delete_by_conversation(conversation_id)}


@router.get("/{conversation_id}/files/count")
def count_files_by_conversation(conversation_id: str, catalog: FileCatalog = Depends(get_catalog)):
    return {"conversation_id": conversation_id, "count": catalog.count_by_conversation(conversation_id)}


@router.post("/{conversation_id}/files/link")
def link_enabled_files_to_conversation(conversation_id: str, catalog: FileCatalog = Depends(get_catalog)):
    return {"conversation_id": conversation_id, "linked": catalog.link_enabled_to_conversation(conversation_id)}
