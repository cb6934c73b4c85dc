import json

import pytest

from services.errors import ParseError
from services.normalizer import (
    DEFAULT_CONFIDENCE_SCORE,
    DEFAULT_SAVINGS_POTENTIAL,
    find_json_object,
    normalize_analysis,
    strip_code_fences,
)

FULL_ANALYSIS = {
    "executive_summary": {
        "current_premium": "$48,200",
        "overall_assessment": "Class codes look inflated for clerical staff.",
        "savings_potential": "10-18%",
        "confidence_score": 72,
    },
    "savings_opportunities": {
        "immediate_actions": ["Reclassify office staff to 8810", "Request a payroll audit"],
        "estimated_savings_range": "$4,800-$8,700",
    },
    "coverage_analysis": {
        "key_details": ["Employers' Liability 100/500/100"],
        "gaps": [],
        "compliance_status": "Compliant with NY requirements",
    },
    "risk_assessment": {
        "classification_accuracy": "Partially accurate",
        "recommendations": ["Formal safety committee"],
    },
    "priority_recommendations": ["Reclassify office staff"],
}


def test_clean_json_passes_through_verbatim():
    raw = json.dumps(FULL_ANALYSIS)

    assert normalize_analysis(raw) == FULL_ANALYSIS


def test_fenced_reply_is_parsed():
    raw = "```json\n{\"executive_summary\":{\"confidence_score\":90}}\n```"

    result = normalize_analysis(raw)

    assert result["executive_summary"]["confidence_score"] == 90
    assert "full_analysis_text" not in result


def test_prose_around_json_is_ignored():
    raw = "Here is the analysis you asked for:\n" + json.dumps(FULL_ANALYSIS) + "\nLet me know if you need more."

    assert normalize_analysis(raw) == FULL_ANALYSIS


def test_stray_braces_in_prose_are_skipped():
    raw = "Placeholders like {premium} were not filled in. " + json.dumps(FULL_ANALYSIS) + " Thanks {again}."

    assert normalize_analysis(raw) == FULL_ANALYSIS


def test_braces_inside_strings_do_not_confuse_the_scanner():
    payload = {"executive_summary": {"overall_assessment": "Uses {curly} and \"quoted }\" text", "confidence_score": 50}}

    result = normalize_analysis(json.dumps(payload))

    assert result["executive_summary"]["overall_assessment"] == "Uses {curly} and \"quoted }\" text"


def test_missing_guaranteed_fields_are_filled_without_touching_others():
    raw = json.dumps({"executive_summary": {"confidence_score": 40}, "priority_recommendations": ["a"]})

    result = normalize_analysis(raw)

    assert result["executive_summary"]["confidence_score"] == 40
    assert result["executive_summary"]["savings_potential"] == DEFAULT_SAVINGS_POTENTIAL
    assert len(result["savings_opportunities"]["immediate_actions"]) == 3
    assert result["priority_recommendations"] == ["a"]


def test_non_object_sections_are_wrapped():
    raw = json.dumps({"executive_summary": "Looks fine", "savings_opportunities": ["Shop the renewal"]})

    result = normalize_analysis(raw)

    assert result["executive_summary"]["overall_assessment"] == "Looks fine"
    assert result["executive_summary"]["confidence_score"] == DEFAULT_CONFIDENCE_SCORE
    assert result["savings_opportunities"]["immediate_actions"] == ["Shop the renewal"]


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "Sorry, I cannot process this.",
        "{\"executive_summary\": {\"confidence_score\": 90}, \"savings_opportunities\": {",
        "{not json at all}",
        "[1, 2, 3]",
    ],
)
def test_unparseable_replies_fall_back(raw):
    result = normalize_analysis(raw)

    assert result["full_analysis_text"] == raw
    assert result["executive_summary"]["confidence_score"] == DEFAULT_CONFIDENCE_SCORE
    assert result["executive_summary"]["savings_potential"] == DEFAULT_SAVINGS_POTENTIAL
    assert result["savings_opportunities"]["immediate_actions"]
    assert "coverage_analysis" not in result


def test_fallback_assessment_is_truncated():
    raw = "x" * 1000

    result = normalize_analysis(raw)

    assert result["executive_summary"]["overall_assessment"] == "x" * 300
    assert result["full_analysis_text"] == raw


def test_strip_code_fences():
    assert strip_code_fences("```json\n{\"a\": 1}\n```") == "{\"a\": 1}"
    assert strip_code_fences("```\n{\"a\": 1}```") == "{\"a\": 1}"


def test_find_json_object_raises_when_nothing_parses():
    with pytest.raises(ParseError):
        find_json_object("no braces here")


@pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
def test_non_json_constants_are_rejected(constant):
    raw = '{"executive_summary": {"confidence_score": ' + constant + ', "savings_potential": "5%"}}'

    result = normalize_analysis(raw)

    assert result["executive_summary"]["confidence_score"] == DEFAULT_CONFIDENCE_SCORE
    assert result["full_analysis_text"] == raw


def test_unclosed_stray_brace_before_json_is_stepped_over():
    raw = "Rating :{ not great. Here you go: " + json.dumps(FULL_ANALYSIS)

    assert normalize_analysis(raw) == FULL_ANALYSIS


def test_stray_brace_closed_after_json_does_not_hide_it():
    raw = "Summary { see below " + json.dumps(FULL_ANALYSIS) + " }"

    assert normalize_analysis(raw) == FULL_ANALYSIS


def test_inner_object_of_truncated_reply_is_not_returned():
    raw = '{"executive_summary": {"confidence_score": 90}, "savings_opportunities": {"immediate_actions": ['

    result = normalize_analysis(raw)

    assert result["full_analysis_text"] == raw
