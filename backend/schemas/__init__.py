from schemas.insurance_policy import (
    UploadedDocument, AnalysisPrompt,
    ExecutiveSummary, SavingsOpportunities, CoverageAnalysis, RiskAssessment, AnalysisResult,
    AnalysisMetadata, AnalysisEnvelope, ErrorEnvelope
)
