from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from anonqa.errors import ConflictFailed, NotFound, ValidationFailed

logger = logging.getLogger(__name__)


def get_or_404(db: Session, model, object_id, detail: str = None):
    obj = db.get(model, object_id)
    if obj is None:
        raise NotFound(detail=detail or f"{model.__name__} {object_id} 不存在")
    return obj


def clean_text(value, field_name: str, max_length: int) -> str:
    """去除前後空白並檢查長度，空字串視為格式錯誤"""
    text = (value or "").strip()
    if not text:
        raise ValidationFailed(detail=f"{field_name} 不可為空", reason=f"{field_name}_required")
    if len(text) > max_length:
        raise ValidationFailed(
            detail=f"{field_name} 長度不可超過 {max_length} 字",
            reason=f"{field_name}_too_long"
        )
    return text


def commit_or_conflict(db: Session, detail: str, reason: str = "conflict"):
    """提交交易，唯一性衝突時回滾並轉為 ConflictFailed"""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"資料衝突: {detail} ({e.orig})")
        raise ConflictFailed(detail=detail, reason=reason) from e
