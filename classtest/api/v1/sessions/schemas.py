"""Session (test unit) schemas."""

from typing import List, Optional

from pydantic import BaseModel


class SessionResponse(BaseModel):
    id: str
    title: str
    # Answer key; omitted for students
    answers: Optional[List[str]] = None
    has_document: bool = False
    created_at: int
