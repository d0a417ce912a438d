from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from enum import Enum


class ReportStatus(str, Enum):
    NORMAL = "normal"
    VIGILANCE = "vigilance"
    ALERTE = "alerte"


class DiseaseRisk(BaseModel):
    """Disease pressure estimated by the report model"""
    level: str = "low"
    diseases: List[str] = Field(default_factory=list)
    preventive_actions: List[str] = Field(default_factory=list, alias="preventiveActions")

    model_config = ConfigDict(populate_by_name=True)


class NextAction(BaseModel):
    """A prioritised field action"""
    action: str
    priority: str = "medium"
    timing: str = ""


class Report(BaseModel):
    """Canonical agronomic report entity.

    ``status``, ``summary`` and ``recommendations`` are always populated once a
    report exists. ``audio_url`` and ``darija_script`` stay empty until a
    narration run patches them onto the persisted record.
    """
    id: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")
    parcelle_id: str = Field(alias="parcelleId")
    parcelle_name: Optional[str] = Field(default=None, alias="parcelleName")
    generated_at: Optional[datetime] = Field(default=None, alias="generatedAt")
    status: ReportStatus
    summary: str = Field(min_length=1)
    recommendations: List[str] = Field(min_length=1)
    weather: Dict[str, Any] = Field(default_factory=dict)
    weather_analysis: Optional[str] = Field(default=None, alias="weatherAnalysis")
    soil_analysis: Optional[str] = Field(default=None, alias="soilAnalysis")
    disease_risk: Optional[DiseaseRisk] = Field(default=None, alias="diseaseRisk")
    irrigation_advice: Optional[str] = Field(default=None, alias="irrigationAdvice")
    next_actions: Optional[List[NextAction]] = Field(default=None, alias="nextActions")
    weekly_forecast: Optional[str] = Field(default=None, alias="weeklyForecast")
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")
    darija_script: Optional[str] = Field(default=None, alias="darijaScript")

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )

    @property
    def is_narrated(self) -> bool:
        return bool(self.audio_url)

    def to_payload(self) -> Dict[str, Any]:
        """Serialise with API field names, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
