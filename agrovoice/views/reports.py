"""Schemas for report generation and narration endpoints."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NarrationRequest(BaseModel):
    """Trigger payload for narrating an already stored report."""

    user_id: str = Field(alias="userId", min_length=1)
    report_id: str = Field(alias="reportId", min_length=1)
    parcelle_name: str = Field(alias="parcelleName")
    status: Literal["normal", "vigilance", "alerte"]
    summary: str
    recommendations: List[str]
    weather: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


class NarrationResponse(BaseModel):
    success: bool
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")
    darija_script: Optional[str] = Field(default=None, alias="darijaScript")
    error: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class ReportDiagnostics(BaseModel):
    """Stored report plus audio presence flags."""

    success: bool = True
    report_id: str = Field(alias="reportId")
    data: Dict[str, Any]
    has_audio_url: bool = Field(alias="hasAudioUrl")
    has_darija_script: bool = Field(alias="hasDarijaScript")

    model_config = ConfigDict(populate_by_name=True)


class VoiceSummary(BaseModel):
    voice_id: str
    name: Optional[str] = None
    category: Optional[str] = None
    labels: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @field_validator("labels", mode="before")
    @classmethod
    def _labels_default(cls, value: Any) -> Any:
        return {} if value is None else value
