from datetime import datetime
from typing import List, Literal, Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from agentlogic.schemas.test_execution import SUPPORTED_LANGUAGES, CamelModel, TestCase


class ExerciseCreate(CamelModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10, max_length=5000)
    language: str
    difficulty: Literal["easy", "medium", "hard"]
    function_name: Optional[str] = Field(None, pattern=r"^[A-Za-z_$][\w$]*$")
    test_cases: List[TestCase] = Field(default_factory=list)

    @field_validator('title', 'description', mode='before')
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('difficulty', mode='before')
    def lowercase_difficulty(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator('language')
    def supported_language(cls, v):
        v = v.strip().lower()
        if v not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language: {v}. Currently supports: {', '.join(SUPPORTED_LANGUAGES)}")
        return v


class ExerciseOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    title: str
    description: str
    language: str
    difficulty: str
    function_name: Optional[str] = None
    test_cases: List[TestCase]
    created_at: Optional[datetime] = None


class ExerciseResponse(CamelModel):
    success: bool = True
    data: ExerciseOut


class ExerciseListResponse(CamelModel):
    success: bool = True
    data: List[ExerciseOut]
