"""
Document endpoints for the Job Tracker API

Uploads arrive as multipart form data: the file plus its metadata fields.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from job_tracker.api.deps import get_current_user, get_db
from job_tracker.api.schemas.models import (
    DocumentEnvelope, DocumentListResponse, DocumentUpdate, MessageResponse, Pagination,
)
from job_tracker.config import config
from job_tracker.core.field_mapper import DocumentType
from job_tracker.database.db import User
from job_tracker.services import documents as document_service

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.post("", response_model=DocumentEnvelope, status_code=201)
def upload_document(
    file: UploadFile = File(...),
    name: Optional[str] = Form(None, max_length=255),
    document_type: DocumentType = Form(DocumentType.RESUME, alias="type"),
    description: Optional[str] = Form(None, max_length=1000),
    tags: Optional[str] = Form(None),
    category: Optional[str] = Form(None, max_length=100),
    application_id: Optional[int] = Form(None, alias="applicationId"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Upload a file and record it.

    The document name defaults to the uploaded file name.
    """
    # Read one byte past the limit so oversize uploads are detectable
    content = file.file.read(config.uploads.max_upload_bytes + 1)
    document = document_service.create_document(
        session, user.id,
        original_filename=file.filename or "",
        content=content,
        mime_type=file.content_type,
        data={
            "name": name or file.filename or "Untitled document",
            "type": document_type.value,
            "description": description or None,
            "tags": tags,
            "category": category or None,
            "application_id": application_id,
        },
    )
    return {"message": "Document uploaded successfully", "document": document}


@router.get("", response_model=DocumentListResponse)
def list_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=document_service.MAX_PAGE_SIZE),
    search: Optional[str] = None,
    doc_type: Optional[str] = Query(None, alias="type"),
    category: Optional[str] = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    documents, total = document_service.list_documents(
        session, user.id,
        page=page, limit=limit, search=search, doc_type=doc_type, category=category,
    )
    return {"documents": documents, "pagination": Pagination.build(page, limit, total)}


@router.get("/{document_id}", response_model=DocumentEnvelope)
def get_document(
    document_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    return {"document": document_service.get_owned_document(session, user.id, document_id)}


@router.patch("/{document_id}", response_model=DocumentEnvelope)
def update_document(
    document_id: int,
    payload: DocumentUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Update metadata; relinking to an application re-checks ownership"""
    document = document_service.update_document(
        session, user.id, document_id, payload.model_dump(exclude_unset=True)
    )
    return {"message": "Document updated successfully", "document": document}


@router.delete("/{document_id}", response_model=MessageResponse)
def delete_document(
    document_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Delete the record and its stored file"""
    document_service.delete_document(session, user.id, document_id)
    return {"message": "Document deleted successfully"}
