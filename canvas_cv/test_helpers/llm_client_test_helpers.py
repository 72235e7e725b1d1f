# llm_client_test_helpers.py

from typing import Literal
import json
import random
import uuid

from langchain_core.messages import AIMessage

LLM_FUNCTION_NAMES = Literal["rewrite_text", "complete_sentence", "analyze_ats", "generate_summary"]

expected_test_responses = {
    "rewrite_text": {
        "success": (
            "Spearheaded the redesign of the core SaaS platform, lifting user retention by 25% "
            "within two quarters."
        ),
        "failed": "",
        "unexpected_json": {"rewrite": "Led the redesign."},
        "not_json": "Led the redesign of the platform.",
    },
    "complete_sentence": {
        "success": "5 engineers to ship the platform 2 weeks ahead of schedule.",
        "failed": "",
        "unexpected_json": {"completion": "5 engineers"},
        "not_json": "Input: Led a team of Output: 5 engineers",
    },
    "analyze_ats": {
        "success": {
            "score": 72,
            "criticalIssues": [
                "Summary does not mention the target role.",
                "Few bullets quantify impact.",
            ],
            "missingKeywords": ["Kubernetes", "A/B testing", "stakeholder management"],
            "positiveFeedback": [
                "Strong action verbs throughout experience.",
                "Clear, single-column layout.",
            ],
        },
        "failed": {"score": "unknown"},
        "unexpected_json": {"analysis": "Looks fine"},
        "not_json": "I could not analyze this resume.",
    },
    "generate_summary": {
        "success": (
            "Product designer with 6 years of experience shipping user-centric SaaS products, "
            "known for data-informed design systems and cross-functional leadership."
        ),
        "failed": "",
        "unexpected_json": {"summary": "Designer."},
        "not_json": "Designer.",
    },
}

def create_mock_llm_response(
    function_name: LLM_FUNCTION_NAMES,
    provider: Literal["anthropic"],
    response_type: Literal["success", "failed", "unexpected_json", "not_json"] = "success"
) -> AIMessage:
    """
    Create a simulated AIMessage to mimic LLM responses with realistic structure per provider.
    """
    try:
        content_value = expected_test_responses[function_name][response_type]
    except KeyError:
        content_value = "Generic response"

    # Convert dict responses to JSON string; leave strings as-is
    content = json.dumps(content_value) if isinstance(content_value, dict) else content_value

    # --- token counts ---
    input_tokens = random.randint(50, 150)
    output_tokens = random.randint(20, 100)
    total_tokens = input_tokens + output_tokens

    # --- build response metadata depending on provider ---
    if provider == "anthropic":
        response_metadata = {
            "id": str(uuid.uuid4()),
            "model": "claude-haiku-4-5",
            "stop_reason": "end_turn",
            "usage": {
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
                "total_tokens": total_tokens
            }
        }
    else:
        raise ValueError(f"Unknown llm provider: {provider}")

    return AIMessage(
        content=content,
        additional_kwargs={},
        response_metadata=response_metadata,
        id=str(uuid.uuid4()),
        usage_metadata={
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": total_tokens
        }
    )
