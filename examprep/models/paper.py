from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ExtractionStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Paper(BaseModel):
    id: str
    paper_file_url: Optional[str] = None
    marking_scheme_file_url: Optional[str] = None
    title: Optional[str] = None
    year: Optional[int] = None
    paper_number: Optional[str] = None
    subject_id: Optional[str] = None
    paper_extracted_text: Optional[str] = None
    marking_scheme_extracted_text: Optional[str] = None
    text_extraction_status: ExtractionStatus = ExtractionStatus.PENDING
    text_extracted_at: Optional[datetime] = None
    extraction_error: Optional[str] = None


class ExtractionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Optional here so a missing id maps to 400 instead of FastAPI's 422
    paper_id: Optional[str] = Field(None, alias="paperId")


class ExtractionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    paper_id: str = Field(..., alias="paperId")
    message: str
    paper_text_length: int = Field(0, alias="paperTextLength")
    marking_scheme_text_length: int = Field(0, alias="markingSchemeTextLength")


class PaperContext(BaseModel):
    """Extraction state plus chat-ready context for one paper"""

    model_config = ConfigDict(populate_by_name=True)

    paper_id: str = Field(..., alias="paperId")
    status: ExtractionStatus
    extracted_at: Optional[datetime] = Field(None, alias="extractedAt")
    error: Optional[str] = None
    paper_content: str = Field(..., alias="paperContent")
    marking_scheme_content: str = Field(..., alias="markingSchemeContent")
