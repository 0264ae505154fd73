"""Student roster schemas."""

from typing import Dict, List

from pydantic import BaseModel, Field


class StudentResponse(BaseModel):
    id: str
    class_group: str
    hakbun: str
    name: str
    code: str
    # session id -> score, for sessions this student has submitted
    scores: Dict[str, int] = Field(default_factory=dict)


class BulkImportRequest(BaseModel):
    text: str = Field(..., description="One student per line: classGroup hakbun name code")


class BulkImportResponse(BaseModel):
    added: List[StudentResponse]
    skipped_lines: int = 0
    skipped_duplicates: List[str] = Field(default_factory=list)
    new_classes: List[str] = Field(default_factory=list)
