from pydantic import BaseModel, ConfigDict
from typing import Any, Optional


class UploadedDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: bytes
    filename: str
    extension: str  # lowercase, "" when the filename has no dot

    @property
    def size(self) -> int:
        return len(self.content)


class AnalysisPrompt(BaseModel):
    model_config = ConfigDict(frozen=True)

    system_instruction: str
    user_instruction: str


class ExecutiveSummary(BaseModel):
    current_premium: Optional[str] = None
    overall_assessment: str
    savings_potential: str  # e.g. "15-25%"
    confidence_score: int  # 0-100


class SavingsOpportunities(BaseModel):
    immediate_actions: list[str]
    estimated_savings_range: str


class CoverageAnalysis(BaseModel):
    key_details: list[str] = []
    gaps: list[str] = []
    compliance_status: Optional[str] = None


class RiskAssessment(BaseModel):
    classification_accuracy: Optional[str] = None
    recommendations: list[str] = []


class AnalysisResult(BaseModel):
    """Shape the model is asked for. Only the first two sections are guaranteed."""

    executive_summary: ExecutiveSummary
    savings_opportunities: SavingsOpportunities
    coverage_analysis: Optional[CoverageAnalysis] = None
    risk_assessment: Optional[RiskAssessment] = None
    priority_recommendations: Optional[list[str]] = None
    full_analysis_text: Optional[str] = None  # set only on fallback


class AnalysisMetadata(BaseModel):
    file_name: str
    file_type: str
    processed_at: str
    model_used: str


class AnalysisEnvelope(BaseModel):
    success: bool = True
    analysis_id: str
    # Kept as a plain dict so whatever the model returned passes through untouched
    data: dict[str, Any]
    metadata: AnalysisMetadata


class ErrorEnvelope(BaseModel):
    success: bool = False
    error: str
    details: Optional[str] = None
