from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.app.api.deps import current_user, get_db
from backoffice.app.core.config import get_settings
from backoffice.app.db.models.models_v1 import Document, User
from backoffice.app.schemas.system import DocumentRead
from backoffice.services.documents import delete_document, document_path, save_document

router = APIRouter(prefix="/documents")


def _get_document(db: Session, document_id: int) -> Document:
    doc = db.get(Document, document_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")
    return doc


@router.get("", response_model=list[DocumentRead])
def list_documents(entity_type: str | None = None, entity_id: int | None = None, db: Session = Depends(get_db)):
    stmt = select(Document).order_by(Document.created_at.desc(), Document.id.desc())
    if entity_type:
        stmt = stmt.where(Document.entity_type == entity_type)
    if entity_id is not None:
        stmt = stmt.where(Document.entity_id == entity_id)
    return db.execute(stmt).scalars().all()


@router.post("", response_model=DocumentRead)
def upload_document(
    file: UploadFile = File(...),
    entity_type: str = Form("general"),
    entity_id: int | None = Form(None),
    db: Session = Depends(get_db),
    user: User | None = Depends(current_user),
):
    doc = save_document(
        db,
        file.file,
        filename=file.filename,
        content_type=file.content_type,
        base_dir=get_settings().documents_dir,
        entity_type=entity_type,
        entity_id=entity_id,
        uploaded_by=user.id if user else None,
    )
    db.commit()
    db.refresh(doc)
    return doc


@router.get("/{document_id}/download")
def download_document(document_id: int, db: Session = Depends(get_db)):
    doc = _get_document(db, document_id)
    return FileResponse(
        document_path(doc),
        media_type=doc.content_type or "application/octet-stream",
        filename=doc.filename,
    )


@router.delete("/{document_id}")
def remove_document(document_id: int, db: Session = Depends(get_db)):
    doc = _get_document(db, document_id)
    delete_document(db, doc)
    db.commit()
    return {"deleted": document_id}
