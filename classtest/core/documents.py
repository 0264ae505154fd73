"""
Stored document shapes.

Field names on disk keep their camelCase form (classGroup, submittedAt, pdfUrl,
createdAt); attributes are snake_case and documents are written with by_alias.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from classtest.core.enums import TeacherStatus

ANSWER_COUNT = 5


class StoredModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class Submission(StoredModel):
    score: int
    submitted_at: str = Field("", alias="submittedAt")
    # Absent on submissions recorded before answers were kept
    answers: Optional[List[str]] = None

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class StudentDocument(StoredModel):
    id: str
    class_group: str = Field(..., alias="classGroup")
    hakbun: str
    name: str
    code: str
    scores: Dict[str, Submission] = Field(default_factory=dict)

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(by_alias=True, mode="json", exclude={"scores"})
        doc["scores"] = {sid: sub.to_document() for sid, sub in self.scores.items()}
        return doc


class SessionDocument(StoredModel):
    id: str
    title: str
    answers: List[str]
    # Inline data: URL of the attached worksheet, if any
    pdf_url: Optional[str] = Field(None, alias="pdfUrl")
    created_at: int = Field(0, alias="createdAt")


class TeacherDocument(StoredModel):
    email: str = ""
    status: TeacherStatus = TeacherStatus.PENDING
    created_at: int = Field(0, alias="createdAt")


class TeacherIndexDocument(StoredModel):
    tenant_id: Optional[str] = Field(None, alias="tenantId")
    email: str = ""
    updated_at: int = Field(0, alias="updatedAt")


class AccountDocument(StoredModel):
    uid: str
    email: str
    password_hash: str = Field(..., alias="passwordHash")
    created_at: int = Field(0, alias="createdAt")
