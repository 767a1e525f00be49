"""
Document service - uploaded files and their metadata

Files are written under the configured upload directory with a unique
name and served back from /uploads/<name>.
"""
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from job_tracker.config import config
from job_tracker.core.errors import NotFoundError, ValidationError
from job_tracker.core.field_mapper import DocumentType
from job_tracker.database.db import Application, Document

UPLOAD_URL_PREFIX = "/uploads"
MAX_PAGE_SIZE = 100


def upload_dir() -> Path:
    path = Path(config.uploads.upload_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def parse_tags(raw: Optional[str]) -> List[str]:
    """Split a comma-separated tag string, dropping blanks"""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def validate_upload(mime_type: Optional[str], size: int):
    if mime_type not in config.uploads.allowed_mime_types:
        raise ValidationError.for_field("file", "File type not allowed")
    if size > config.uploads.max_upload_bytes:
        raise ValidationError.for_field(
            "file", f"File exceeds the {config.uploads.max_upload_mb}MB limit"
        )
    if size == 0:
        raise ValidationError.for_field("file", "Uploaded file is empty")


def store_file(original_filename: str, content: bytes) -> Tuple[str, Path]:
    """Write upload bytes under a unique name; returns (stored name, path)"""
    extension = Path(original_filename or "").suffix.lower()
    stored_name = f"{uuid.uuid4().hex}{extension}"
    path = upload_dir() / stored_name
    path.write_bytes(content)
    return stored_name, path


def remove_stored_file(stored_filename: Optional[str]):
    """Delete a stored file; a file that is already gone is only logged"""
    if not stored_filename:
        return
    path = Path(config.uploads.upload_dir) / stored_filename
    try:
        path.unlink()
    except FileNotFoundError:
        logger.warning(f"[Documents] Stored file already missing: {stored_filename}")
    except OSError as e:
        logger.error(f"[Documents] Could not delete {stored_filename}: {e}")


def _require_owned_application(session: Session, user_id: int, application_id: int) -> Application:
    application = session.query(Application).filter_by(id=application_id, user_id=user_id).first()
    if application is None:
        raise ValidationError.for_field("applicationId", "Application not found or does not belong to user")
    return application


def get_owned_document(session: Session, user_id: int, document_id: int) -> Document:
    document = (
        session.query(Document)
        .options(joinedload(Document.application).joinedload(Application.company))
        .filter(Document.id == document_id, Document.user_id == user_id)
        .first()
    )
    if document is None:
        raise NotFoundError.for_resource("Document")
    return document


def create_document(
    session: Session,
    user_id: int,
    original_filename: str,
    content: bytes,
    mime_type: Optional[str],
    data: Dict[str, Any],
) -> Document:
    """Validate and store an upload, then record it; the file is removed again if the insert fails"""
    validate_upload(mime_type, len(content))

    application_id = data.get("application_id")
    if application_id:
        _require_owned_application(session, user_id, application_id)

    stored_name, path = store_file(original_filename, content)
    document = Document(
        user_id=user_id,
        application_id=application_id or None,
        name=data["name"],
        original_filename=original_filename,
        stored_filename=stored_name,
        url=f"{UPLOAD_URL_PREFIX}/{stored_name}",
        type=data.get("type") or DocumentType.RESUME.value,
        mime_type=mime_type,
        size=len(content),
        file_extension=path.suffix.lstrip(".") or None,
        description=data.get("description"),
        tags=parse_tags(data.get("tags")),
        category=data.get("category"),
    )

    try:
        session.add(document)
        session.commit()
    except Exception:
        session.rollback()
        remove_stored_file(stored_name)
        raise

    logger.info(f"[Documents] User {user_id} uploaded document {document.id} ({document.size} bytes)")
    return get_owned_document(session, user_id, document.id)


def list_documents(
    session: Session,
    user_id: int,
    page: int = 1,
    limit: int = 20,
    search: Optional[str] = None,
    doc_type: Optional[str] = None,
    category: Optional[str] = None,
) -> Tuple[List[Document], int]:
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    query = session.query(Document).filter(Document.user_id == user_id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Document.name.ilike(pattern),
            Document.original_filename.ilike(pattern),
            Document.description.ilike(pattern),
        ))
    if doc_type and doc_type != "all":
        query = query.filter(Document.type == doc_type)
    if category and category != "all":
        query = query.filter(Document.category == category)

    total = query.with_entities(func.count(Document.id)).scalar() or 0
    documents = (
        query.options(joinedload(Document.application).joinedload(Application.company))
        .order_by(Document.uploaded_at.desc(), Document.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return documents, total


def update_document(session: Session, user_id: int, document_id: int, data: Dict[str, Any]) -> Document:
    """Update metadata; only keys present in ``data`` are touched"""
    document = get_owned_document(session, user_id, document_id)

    if data.get("name"):
        document.name = data["name"]
    if data.get("type"):
        document.type = data["type"]
    for field in ("description", "category"):
        if field in data:
            setattr(document, field, data[field])
    if "tags" in data:
        document.tags = parse_tags(data["tags"])
    if "application_id" in data:
        application_id = data["application_id"]
        if application_id:
            _require_owned_application(session, user_id, application_id)
        document.application_id = application_id or None

    session.commit()
    return get_owned_document(session, user_id, document.id)


def delete_document(session: Session, user_id: int, document_id: int):
    document = get_owned_document(session, user_id, document_id)
    stored_name = document.stored_filename

    session.delete(document)
    session.commit()

    remove_stored_file(stored_name)
    logger.info(f"[Documents] User {user_id} deleted document {document_id}")
