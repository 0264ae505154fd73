from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ScoreColumn(BaseModel):
    session_id: str
    title: str


class ScoreRow(BaseModel):
    student_id: str
    class_group: str
    hakbun: str
    name: str
    total: int
    # session id -> score; None where the student has not submitted
    scores: Dict[str, Optional[int]] = Field(default_factory=dict)


class ScoreTableResponse(BaseModel):
    class_group: Optional[str] = None
    classes: List[str]
    sessions: List[ScoreColumn]
    rows: List[ScoreRow]
