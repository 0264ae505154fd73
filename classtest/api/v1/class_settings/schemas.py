from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from classtest.core.class_settings import DEFAULT_SCOPE


class ClassSwitch(BaseModel):
    class_group: str
    open: bool


class ClassSettingsResponse(BaseModel):
    scope: str
    classes: List[ClassSwitch]
    # Normalized (version 2) form of the stored document
    document: Dict[str, Any]


class ToggleRequest(BaseModel):
    class_group: str = Field(..., min_length=1)
    scope: str = DEFAULT_SCOPE


class SetAllRequest(BaseModel):
    value: bool
    scope: str = DEFAULT_SCOPE
    # Defaults to every class known from the roster and the stored settings
    classes: Optional[List[str]] = None
