"""
Documents API – payslips and tax documents (base64 PDF payloads).
"""
import uuid

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from workforce.api.deps import DB, AdminUser, CurrentUser, ensure_self_or_admin
from workforce.models.document import Document
from workforce.models.user import User
from workforce.schemas.document import DocumentCreate, DocumentOut, DocumentSummaryOut
from workforce.services.notification_service import notify_document_uploaded

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("", response_model=list[DocumentSummaryOut])
async def list_documents(
    current_user: CurrentUser,
    db: DB,
    type: str | None = None,
    user_id: uuid.UUID | None = None,
):
    query = select(Document)
    if current_user.role != "admin":
        query = query.where(Document.user_id == current_user.id)
    elif user_id:
        query = query.where(Document.user_id == user_id)
    if type:
        query = query.where(Document.type == type)
    result = await db.execute(query.order_by(Document.uploaded_at.desc()))
    return result.scalars().all()


@router.get("/{document_id}", response_model=DocumentOut)
async def get_document(document_id: uuid.UUID, current_user: CurrentUser, db: DB):
    document = await db.get(Document, document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    ensure_self_or_admin(current_user, document.user_id)
    return document


@router.post("", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
async def upload_document(payload: DocumentCreate, current_user: AdminUser, db: DB):
    if not await db.get(User, payload.user_id):
        raise HTTPException(status_code=404, detail="User not found")

    document = Document(**payload.model_dump(), uploaded_by=current_user.id)
    db.add(document)
    await db.commit()
    await db.refresh(document)

    await notify_document_uploaded(document, db)
    return document


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(document_id: uuid.UUID, current_user: AdminUser, db: DB):
    document = await db.get(Document, document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    await db.delete(document)
    await db.commit()
