from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from anonqa.database import get_db
from anonqa.dependencies import get_email_transport, get_optional_identity
from anonqa.permissions import Identity
from anonqa.schemas.notification import NotificationRequest, NotificationSummary
from anonqa.services.email import EmailTransport
from anonqa.services.notifications import notify_department_admins

router = APIRouter()


@router.post("/department-admins", response_model=NotificationSummary, response_model_by_alias=True)
async def notify_admins(
    data: NotificationRequest,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_optional_identity),
    transport: Optional[EmailTransport] = Depends(get_email_transport)
):
    return await notify_department_admins(db, identity, data.question_id, transport)
