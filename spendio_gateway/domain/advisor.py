"""Prompt assembly for the AI financial advisor"""

import json
import re
from typing import Any, Dict, List, Sequence

CHAT_SYSTEM_PROMPT = """\
You are a friendly and expert financial advisor AI. Help the user with their financial questions and advice.

IMPORTANT LIMITATIONS:
- You are READ-ONLY. You CANNOT modify any financial data.
- You CANNOT add transactions, update income, create expenses, or change any data.
- You can only analyze and provide advice on their existing financial data.

EMPTY ACCOUNT DETECTION:
If the user's financial data is mostly empty (income = 0, expenses = 0, savings = 0, no transactions), you MUST:
1. Recognize the account is empty/uninitialized
2. Say: "Your financial account appears to be empty. To get started, please go to the Financial Data page to:"
3. List the key things they need to set up:
   - Add your current account balances (cash, savings, emergency fund, investments)
   - Enter your monthly income
   - Add your monthly expenses
   - (Optionally) Set savings and investing targets
4. Say: "Once you've set up your financial data, I can provide personalized analysis and advice."
5. Do NOT give recommendations about improving metrics that are currently zero

When users ask you to add/modify transactions, you MUST:
1. Clearly state: "I cannot directly modify your financial data. I'm a read-only advisor."
2. Tell them: "Please go to the Financial Data page to manually make these changes"
3. Offer to analyze their updated data once they've made the changes

User: {user_name} ({user_email})

Their Financial Summary:
{financial_context}

Remember to:
- Be specific and data-driven
- Provide actionable advice
- Be honest about your limitations
- Always direct data modifications to the Financial Data page
- Recognize when accounts are empty and suggest setup first
- Ask clarifying questions if needed
- Be supportive and encouraging"""

HEALTH_SCORE_SYSTEM_PROMPT = """\
You are an expert financial advisor with deep knowledge of personal finance, behavioral economics, and wealth building. Analyze the provided financial data comprehensively and return a JSON response with:
{
  "score": number (0-100),
  "rating": string ("Poor" | "Fair" | "Good" | "Excellent"),
  "summary": string (brief overview of financial health),
  "strengths": [strings] (up to 3 key strengths based on data),
  "weaknesses": [strings] (up to 3 areas needing improvement),
  "recommendations": [strings] (up to 5 specific, actionable recommendations),
  "insights": string (detailed analysis of trends, patterns, and financial health),
  "benchmarkComparison": string (how they compare to typical users),
  "trendAnalysis": string (month-over-month changes and direction),
  "personalizedGoals": [strings] (up to 3 smart financial goals tailored to their situation),
  "riskFactors": [strings] (potential risks to monitor),
  "opportunityAreas": [strings] (areas with greatest potential for improvement)
}"""

CHAT_ROLES = ("user", "assistant")

ADJUSTMENT_KEYWORDS = ("adjust", "change", "add transaction", "delete", "modify", "update")

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def build_chat_messages(
    message: str,
    user_name: str,
    user_email: str,
    financial_context: str,
    history: Sequence[Dict[str, str]] = (),
) -> List[Dict[str, str]]:
    """System prompt, prior user/assistant turns, then the new question"""
    system = CHAT_SYSTEM_PROMPT.format(
        user_name=user_name,
        user_email=user_email,
        financial_context=financial_context,
    )
    messages = [{"role": "system", "content": system}]
    messages.extend(
        {"role": turn["role"], "content": turn["content"]}
        for turn in history
        if turn.get("role") in CHAT_ROLES
    )
    messages.append({"role": "user", "content": message})
    return messages


def build_health_score_messages(prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": HEALTH_SCORE_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


def extract_json_object(content: str) -> Dict[str, Any]:
    """
    Parse the JSON object out of a model reply that may wrap it in prose.

    Raises:
        ValueError: when no valid JSON object can be parsed
    """
    match = _JSON_OBJECT.search(content)
    parsed = json.loads(match.group(0) if match else content)
    if not isinstance(parsed, dict):
        raise ValueError("Analysis is not a JSON object")
    return parsed


def detect_transaction_intent(message: str) -> Dict[str, Any]:
    """Flag questions that ask the read-only advisor to change data"""
    lowered = message.lower()
    if any(keyword in lowered for keyword in ADJUSTMENT_KEYWORDS):
        return {"is_adjustment": True, "intent": "The user is asking to modify financial data."}
    return {"is_adjustment": False, "intent": "The user is asking for advice or information."}
