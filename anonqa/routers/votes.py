from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from anonqa.database import get_db
from anonqa.dependencies import get_current_identity
from anonqa.permissions import Identity
from anonqa.schemas.vote import Vote
from anonqa.services import votes as vote_service

router = APIRouter()


@router.get("/me", response_model=List[Vote])
def my_votes(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return vote_service.list_my_votes(db, identity)
