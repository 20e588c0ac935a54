from __future__ import annotations
"""
Configuration for the UPSC prep portal core.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Paths
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = Path(os.getenv("PORTAL_DATA_DIR", str(PROJECT_ROOT / "data")))
SUBJECTS_PATH = DATA_DIR / "subjects.json"
PREVIOUS_YEARS_PATH = DATA_DIR / "previous-years.json"

# Search policy
SEARCH_MIN_QUERY_LENGTH = 2
SEARCH_RESULT_CAP = 20
DEFAULT_DEBOUNCE_MS = 300
SEARCH_DEBOUNCE_SECONDS = int(os.getenv("PORTAL_DEBOUNCE_MS", str(DEFAULT_DEBOUNCE_MS))) / 1000.0

# Server
SERVER_HOST = os.getenv("PORTAL_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("PORTAL_PORT", "3000"))
PORTAL_URL = os.getenv("PORTAL_URL", f"http://localhost:{SERVER_PORT}")

# HTTP client hardening
HTTP_CONNECT_TIMEOUT = 3.0
HTTP_READ_TIMEOUT = 7.0
HTTP_USER_AGENT = "upsc-portal-client/1.0"

# Logging
LOG_LEVEL = os.getenv("PORTAL_LOG_LEVEL", "INFO")


class Section(str, Enum):
    HOME = "home"
    SUBJECTS = "subjects"
    SUBJECT_DETAIL = "subject-detail"
    PREVIOUS_YEARS = "previous-years"
    YEAR_DETAIL = "year-detail"
    VIEWER = "viewer"


INITIAL_SECTION = Section.HOME
INITIAL_RETURN_TARGET = Section.SUBJECTS

# Top-level nav entries that stay highlighted while a nested section is shown
NAV_PARENTS = {
    Section.SUBJECT_DETAIL: (Section.SUBJECTS,),
    Section.YEAR_DETAIL: (Section.PREVIOUS_YEARS,),
    Section.VIEWER: (Section.SUBJECTS, Section.PREVIOUS_YEARS),
}

# Where the generic back action goes from sections other than the viewer
BACK_TARGETS = {
    Section.SUBJECT_DETAIL: Section.SUBJECTS,
    Section.YEAR_DETAIL: Section.PREVIOUS_YEARS,
}

Difficulty = Literal["easy", "medium", "hard"]


# Pydantic schemas
class Topic(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    file: str = ""
    difficulty: Difficulty = "medium"
    tags: Tuple[str, ...] = ()

    @field_validator("difficulty", mode="before")
    @classmethod
    def _lower_difficulty(cls, v):
        if v is None or v == "":
            return "medium"
        return str(v).strip().lower()


class Subject(BaseModel):
    model_config = ConfigDict(frozen=True)

    slug: str
    name: str
    description: str = ""
    color: str = ""
    icon: str = ""
    topics: Tuple[Topic, ...] = ()


class Paper(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    file: str = ""
    category: str = ""


class ExamYear(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    papers: Tuple[Paper, ...] = ()


class TopicResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["topic"] = "topic"
    id: str
    title: str
    file: str = ""
    difficulty: Difficulty = "medium"
    tags: Tuple[str, ...] = ()
    subject_name: str = Field(alias="subjectName")
    subject_slug: str = Field(alias="subjectSlug")

    @property
    def context_label(self) -> str:
        return self.subject_name


class PaperResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["previous-year"] = "previous-year"
    id: str
    title: str
    file: str = ""
    category: str = ""
    year: int

    @property
    def context_label(self) -> str:
        return f"Previous Year - {self.year}"


class ViewCountResponse(BaseModel):
    views: int = Field(ge=0)


class HealthResponse(BaseModel):
    status: str
    subjects: int = 0
    previous_years: int = 0

