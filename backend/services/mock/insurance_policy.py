import json
import re

from schemas.insurance_policy import UploadedDocument
from services.llm import IMAGE_EXTENSIONS


def mock_policy_completion(document: UploadedDocument) -> str:
    """Generate a mock model reply for a Workers' Comp policy upload"""
    name_lower = document.filename.lower()
    tokens = set(re.split(r"[^a-z0-9]+", name_lower))

    # The model can actually read images, so it sounds more sure of itself
    if document.extension in IMAGE_EXTENSIONS:
        confidence_score = 80
        assessment = f"Policy image '{document.filename}' reviewed. Coverage appears standard for a small employer."
    else:
        confidence_score = 60
        assessment = f"'{document.filename}' could not be read directly. Assessment is based on typical Workers' Compensation policy structures."

    actions = [
        "Review classification codes for accuracy",
        "Verify payroll calculations",
        "Check experience modification factor",
    ]
    gaps = []

    if "renewal" in tokens:
        actions.append("Compare renewal premium against at least two competing quotes")
    if "ny" in tokens or ("new" in tokens and "york" in tokens):
        gaps.append("Confirm NY disability (DBL) and paid family leave riders are attached")
    if tokens & {"contractor", "contractors", "construction"}:
        actions.append("Audit subcontractor certificates to avoid uninsured-sub premium charges")
        gaps.append("Check for an uninsured subcontractor exposure on the last audit")

    result = {
        "executive_summary": {
            "current_premium": None,
            "overall_assessment": assessment,
            "savings_potential": "10-20%",
            "confidence_score": confidence_score
        },
        "savings_opportunities": {
            "immediate_actions": actions,
            "estimated_savings_range": "10-20%"
        },
        "coverage_analysis": {
            "key_details": [
                "Part One: statutory Workers' Compensation benefits",
                "Part Two: Employers' Liability limits"
            ],
            "gaps": gaps,
            "compliance_status": "Unable to confirm without the declarations page"
        },
        "risk_assessment": {
            "classification_accuracy": "Not verifiable from the upload",
            "recommendations": [
                "Document a written return-to-work program",
                "Hold quarterly safety meetings and keep sign-in sheets"
            ]
        },
        "priority_recommendations": actions[:3]
    }

    # Real replies usually come fenced, so the mock does too
    return "```json\n" + json.dumps(result, indent=2) + "\n```"
