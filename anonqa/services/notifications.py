"""
部門管理員通知

問題指定部門後，寄送郵件給該部門所有管理員。
每位收件者獨立寄送，單一失敗不影響其他收件者，也不會重試。
"""
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional
import asyncio
import logging

from anonqa.database import SessionLocal
from anonqa.errors import DependencyFailed, Forbidden, NotFound, Unauthenticated
from anonqa.models.department import Department, DepartmentAdmin
from anonqa.models.question import Question
from anonqa.models.user import User
from anonqa.permissions import Identity
from anonqa.schemas.notification import NotificationSummary, RecipientResult
from anonqa.services.email import EmailTransport
from anonqa.templates import render

logger = logging.getLogger(__name__)

ANONYMOUS_AUTHOR = "Anonymous"


def _author_name(db: Session, question: Question) -> str:
    if question.is_anonymous or question.author_id is None:
        return ANONYMOUS_AUTHOR
    row = db.execute(
        select(User.full_name, User.email).where(User.id == question.author_id)
    ).first()
    if row is None:
        return ANONYMOUS_AUTHOR
    return row.full_name or row.email


async def _send_one(transport: EmailTransport, admin, subject: str, context: dict) -> RecipientResult:
    logger.info(f"寄送通知給管理員 user_id={admin.id}")
    try:
        html = render("new_question.html", admin_name=admin.full_name or "Admin", **context)
        await transport.send(admin.email, subject, html)
    except Exception as e:
        logger.error(f"寄送通知給管理員 user_id={admin.id} 失敗: {e}")
        return RecipientResult(user_id=admin.id, success=False, error=str(e))
    return RecipientResult(user_id=admin.id, success=True)


async def notify_department_admins(
    db: Session,
    identity: Optional[Identity],
    question_id: int,
    transport: Optional[EmailTransport],
    verify_author: bool = True,
) -> NotificationSummary:
    """
    通知問題所屬部門的管理員

    Args:
        db: 資料庫會話
        identity: 呼叫者身分
        question_id: 問題 ID
        transport: 郵件傳送介面
        verify_author: 是否要求呼叫者為問題作者，伺服器端自動觸發時為 False

    Returns:
        NotificationSummary: 寄送結果摘要
    """
    if verify_author and identity is None:
        raise Unauthenticated()

    # 以資料庫內容為準，不信任呼叫端傳入的問題資料
    try:
        question = db.get(Question, question_id)
    except SQLAlchemyError as e:
        logger.error(f"查詢問題失敗: {e}")
        raise DependencyFailed(detail="查詢問題失敗") from e
    if question is None:
        raise NotFound(detail=f"問題 {question_id} 不存在")

    if verify_author and question.author_id != identity.user_id:
        logger.warning(f"用戶 {identity.user_id} 不是問題 {question_id} 的作者，拒絕寄送通知")
        raise Forbidden(detail="只有問題作者可以發送通知", reason="not_question_author")

    if question.department_id is None:
        logger.info(f"問題 {question_id} 未指定部門，略過通知")
        return NotificationSummary(message="No department assigned, skipping")

    try:
        department = db.get(Department, question.department_id)
        if department is None:
            raise DependencyFailed(detail="查詢部門失敗")
        admin_ids = db.execute(
            select(DepartmentAdmin.user_id).where(DepartmentAdmin.department_id == department.id)
        ).scalars().all()
        if not admin_ids:
            logger.info(f"部門 {department.name} 沒有管理員，略過通知")
            return NotificationSummary(message="No admins for this department")

        admins = db.execute(
            select(User.id, User.email, User.full_name).where(User.id.in_(admin_ids))
        ).all()
        if not admins:
            logger.info(f"部門 {department.name} 的管理員沒有個人資料，略過通知")
            return NotificationSummary(message="No profiles for department admins")

        author_name = _author_name(db, question)
    except SQLAlchemyError as e:
        logger.error(f"查詢通知收件者失敗: {e}")
        raise DependencyFailed(detail="查詢通知收件者失敗") from e

    if transport is None:
        raise DependencyFailed(detail="未設定郵件服務", reason="email_not_configured")

    subject = f"New Question in {department.name} Department"
    context = {
        "department_name": department.name,
        "title": question.title,
        "content": question.content,
        "author_name": author_name,
    }
    results = await asyncio.gather(*[_send_one(transport, admin, subject, context) for admin in admins])

    success_count = sum(1 for r in results if r.success)
    logger.info(f"問題 {question_id} 通知寄送完成: {success_count}/{len(results)}")
    return NotificationSummary(
        message=f"Notifications sent to {success_count}/{len(results)} admins",
        success_count=success_count,
        total=len(results),
        results=list(results),
    )


def notify_in_background(question_id: int, transport: EmailTransport) -> None:
    """新問題建立後由背景任務呼叫，在執行緒池中以獨立的資料庫會話執行"""
    db = SessionLocal()
    try:
        asyncio.run(notify_department_admins(db, None, question_id, transport, verify_author=False))
    except Exception as e:
        logger.error(f"問題 {question_id} 背景通知失敗: {e}")
    finally:
        db.close()
