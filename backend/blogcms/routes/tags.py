"""
Tag routes.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blogcms.database import get_db
from blogcms.schemas import TagResponse
from blogcms.services.tags import list_live_tags

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=List[TagResponse])
def list_tags(db: Session = Depends(get_db)):
    """List tags currently used by at least one post, sorted by name."""
    return list_live_tags(db)
