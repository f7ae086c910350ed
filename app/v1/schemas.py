"""
Request bodies validated at the API boundary
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DocumentStatusName = Literal["draft", "analyzing", "optimized"]

# Columns a client may clear by sending null
NULLABLE_FIELDS = frozenset({"sector", "position", "company_name"})


class ApiModel(BaseModel):
    """Accepts both snake_case and the camelCase names the web client sends"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CvCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str
    sector: Optional[str] = None
    position: Optional[str] = None
    status: DocumentStatusName = "draft"


class CvUpdate(ApiModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = None
    sector: Optional[str] = None
    position: Optional[str] = None
    score: Optional[int] = Field(None, ge=0, le=100)
    suggestions: Optional[List[Dict[str, Any]]] = None
    status: Optional[DocumentStatusName] = None

    def changes(self) -> Dict[str, Any]:
        """Fields sent by the client, minus nulls for required columns"""
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if v is not None or k in NULLABLE_FIELDS}


class CoverLetterCreate(CvCreate):
    company_name: Optional[str] = None


class CoverLetterUpdate(CvUpdate):
    company_name: Optional[str] = None


class GenerateCoverLetterRequest(ApiModel):
    cv_id: str
    company_name: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    job_description: Optional[str] = None
    sector: Optional[str] = None


class ConversationCreate(ApiModel):
    title: Optional[str] = Field(None, max_length=255)


class MessageCreate(ApiModel):
    content: str = Field(..., min_length=1)


class TrackClickRequest(ApiModel):
    ref: Optional[str] = None


class ConversionRequest(ApiModel):
    plan: str
    ref: Optional[str] = None


# --- CV wizard and AI generation ---

class PersonalInfo(ApiModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    linkedin: Optional[str] = Field(None, alias="linkedIn")
    summary: Optional[str] = None


class ExperienceEntry(ApiModel):
    company: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    current: bool = False
    duration: Optional[str] = None
    description: Optional[str] = None


class EducationEntry(ApiModel):
    institution: str = Field(..., min_length=1)
    degree: str = Field(..., min_length=1)
    field: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    current: bool = False


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


class CvWizardRequest(ApiModel):
    """All steps of the CV wizard, posted at once"""
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    experiences: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    sector: Optional[str] = None
    target_position: Optional[str] = None
    save: bool = False

    def missing_required(self) -> bool:
        info = self.personal_info
        return any(_blank(v) for v in (info.first_name, info.last_name, self.sector, self.target_position))


class CoverLetterWizardRequest(ApiModel):
    company_name: Optional[str] = None
    position: Optional[str] = None
    sector: Optional[str] = None
    personal_info: Optional[PersonalInfo] = None
    experience: List[ExperienceEntry] = Field(default_factory=list)
    motivations: Optional[str] = None
    save: bool = False

    def missing_required(self) -> bool:
        return _blank(self.company_name) or _blank(self.position)


class AdvancedAnalysisRequest(ApiModel):
    cv_id: Optional[str] = None
    target_sector: Optional[str] = None
    target_position: Optional[str] = None


class CareerAdviceRequest(ApiModel):
    current_sector: Optional[str] = None
    target_sector: Optional[str] = None
    experience: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    goals: Optional[str] = None
