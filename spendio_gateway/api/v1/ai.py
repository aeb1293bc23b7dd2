"""AI advisor endpoints: chat and health-score proxies plus the stored-history health analysis"""

import time
import logging
from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from spendio_gateway.api.v1.schemas import ChatRequest, ChatResponse, HealthScoreRequest
from spendio_gateway.api.dependencies import get_chat_client, get_request_id, get_user_profile
from spendio_gateway.config import settings
from spendio_gateway.domain.advisor import (
    build_chat_messages,
    build_health_score_messages,
    detect_transaction_intent,
    extract_json_object,
)
from spendio_gateway.domain.analysis import (
    build_analysis_prompt,
    fallback_health_analysis,
    normalize_analysis,
    prepare_financial_data,
)
from spendio_gateway.domain.metrics import compute_month_totals
from spendio_gateway.domain.exceptions import AIServiceError
from spendio_gateway.infrastructure.clients.chat import ChatCompletionClient
from spendio_gateway.infrastructure.database.models import UserProfile
from spendio_gateway.infrastructure.database.repositories import (
    DebtRepository,
    SnapshotRepository,
    TargetsRepository,
    TransactionRepository,
    to_debt,
    to_snapshot,
    to_transaction,
)
from spendio_gateway.infrastructure.database.session import get_db
from spendio_gateway.infrastructure.observability.logging import log_ai_request
from spendio_gateway.infrastructure.observability.metrics import record_ai_request

router = APIRouter()


@router.post("/ai/chat", response_model=ChatResponse)
async def chat(
    request_body: ChatRequest,
    request: Request,
    chat_client: ChatCompletionClient = Depends(get_chat_client),
):
    """
    Forward a question to the chat-completion API with the user's financial context.

    Flow:
    1. Build system prompt embedding the financial context block
    2. Append prior user/assistant turns and the new question
    3. Relay the assistant reply text
    """
    start_time = time.time()
    request_id = get_request_id(request)
    intent = detect_transaction_intent(request_body.message)

    messages = build_chat_messages(
        message=request_body.message,
        user_name=request_body.user_name,
        user_email=request_body.user_email,
        financial_context=request_body.financial_context,
        history=[turn.model_dump() for turn in request_body.conversation_history],
    )

    try:
        reply = await chat_client.complete(
            messages,
            temperature=settings.chat_temperature,
            max_tokens=settings.chat_max_tokens,
        )
    except AIServiceError as e:
        record_ai_request("chat", ok=False)
        logging.error(f"AI chat error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=e.status_code, detail=e.public_message)

    record_ai_request("chat", ok=True)
    log_ai_request(
        request_id,
        endpoint="chat",
        outcome="ok",
        duration_ms=(time.time() - start_time) * 1000,
        history_turns=len(request_body.conversation_history),
        adjustment_request=intent["is_adjustment"],
    )
    return ChatResponse(response=reply)


@router.post("/ai/health-score")
async def health_score(
    request_body: HealthScoreRequest,
    request: Request,
    chat_client: ChatCompletionClient = Depends(get_chat_client),
) -> Dict[str, Any]:
    """
    Ask the chat-completion API for a structured financial health analysis.

    Returns:
        The JSON object found in the model reply (score, rating, summary, ...)
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        content = await chat_client.complete(
            build_health_score_messages(request_body.prompt),
            temperature=settings.health_score_temperature,
            max_tokens=settings.health_score_max_tokens,
        )
    except AIServiceError as e:
        record_ai_request("health_score", ok=False)
        logging.error(f"Health score error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=e.status_code, detail=e.public_message)

    try:
        analysis = extract_json_object(content)
    except ValueError as e:
        record_ai_request("health_score", ok=False)
        logging.error(
            f"Failed to parse analysis JSON: {e}",
            extra={"request_id": request_id, "content_preview": content[:200]},
        )
        raise HTTPException(status_code=500, detail="Failed to parse AI analysis")

    record_ai_request("health_score", ok=True)
    log_ai_request(
        request_id,
        endpoint="health_score",
        outcome="ok",
        duration_ms=(time.time() - start_time) * 1000,
    )
    return analysis


@router.post("/users/{user_id}/health-analysis")
async def health_analysis(
    request: Request,
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
    chat_client: ChatCompletionClient = Depends(get_chat_client),
) -> Dict[str, Any]:
    """
    AI health analysis built from the user's stored history.

    Flow:
    1. Summarize every month, balances, debts and targets
    2. Ask the model for an analysis and fill in missing fields
    3. Fall back to a rule-based score when the model fails or replies badly

    Returns:
        The analysis plus `source`: "ai" or "fallback"
    """
    start_time = time.time()
    request_id = get_request_id(request)

    transactions_by_month = {
        month: [to_transaction(r) for r in records]
        for month, records in TransactionRepository(db).get_by_months(profile.id).items()
    }
    snapshot = to_snapshot(SnapshotRepository(db).get_latest(profile.id))
    debts = [to_debt(r) for r in DebtRepository(db).get_debts(profile.id)]
    targets = TargetsRepository(db).get_targets(profile.id)

    financial_data = prepare_financial_data(transactions_by_month, snapshot, debts, targets, profile.currency)
    prompt = build_analysis_prompt(financial_data, profile.name or profile.email)

    try:
        content = await chat_client.complete(
            build_health_score_messages(prompt),
            temperature=settings.health_score_temperature,
            max_tokens=settings.health_score_max_tokens,
        )
        analysis = normalize_analysis(extract_json_object(content))
    except (AIServiceError, ValueError) as e:
        record_ai_request("health_analysis", ok=False)
        logging.warning(
            f"Health analysis falling back to rule-based score: {e}",
            extra={"request_id": request_id, "user_id": profile.id},
        )
        month_totals = [compute_month_totals(txns) for txns in transactions_by_month.values()]
        return {**fallback_health_analysis(month_totals, snapshot, debts), "source": "fallback"}

    record_ai_request("health_analysis", ok=True)
    log_ai_request(
        request_id,
        endpoint="health_analysis",
        outcome="ok",
        duration_ms=(time.time() - start_time) * 1000,
    )
    return {**analysis, "source": "ai"}
