from schemas.insurance_policy import AnalysisPrompt

SYSTEM_PROMPT = """You are an expert insurance analyst specializing in Workers' Compensation policies. Analyze insurance policies and provide actionable insights to help businesses save money and optimize coverage."""

# Template string with <<FILE_NAME>> placeholder; braces in the JSON block stay literal.
POLICY_ANALYSIS_PROMPT = """I have uploaded a Workers' Compensation insurance policy document named "<<FILE_NAME>>". Please analyze this policy and provide:

1. **Executive Summary**:
   - Current annual premium (if visible in the document)
   - Overall policy assessment
   - Estimated savings potential (as a percentage range, e.g., "15-25%")
   - Confidence score (0-100) for your analysis

2. **Savings Opportunities**:
   - List 3-5 specific immediate actions that could reduce premiums
   - Estimated savings range

3. **Coverage Analysis**:
   - Key coverage details found in the policy
   - Any gaps or redundancies identified
   - Compliance with NY state requirements

4. **Risk Assessment**:
   - Industry classification accuracy
   - Experience modification factors (if mentioned)
   - Safety program recommendations

5. **Recommendations**:
   - Priority actions to take immediately
   - Timeline for implementation

Please respond with a JSON object in this exact format:
{
  "executive_summary": {
    "current_premium": "string or null",
    "overall_assessment": "string",
    "savings_potential": "string (e.g., '15-25%')",
    "confidence_score": number
  },
  "savings_opportunities": {
    "immediate_actions": ["action1", "action2", "action3"],
    "estimated_savings_range": "string"
  },
  "coverage_analysis": {
    "key_details": ["detail1", "detail2"],
    "gaps": ["gap1", "gap2"],
    "compliance_status": "string"
  },
  "risk_assessment": {
    "classification_accuracy": "string",
    "recommendations": ["rec1", "rec2"]
  },
  "priority_recommendations": ["rec1", "rec2", "rec3"]
}"""

UNRENDERED_DOCUMENT_NOTE = """Note: This document could not be rendered for you to read directly. Please analyze based on typical Workers' Compensation policy structures."""


def build_analysis_prompt(file_name: str) -> AnalysisPrompt:
    return AnalysisPrompt(
        system_instruction=SYSTEM_PROMPT,
        user_instruction=POLICY_ANALYSIS_PROMPT.replace("<<FILE_NAME>>", file_name),
    )
