"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date
from typing import Any, Dict, List, Literal, Optional


class ChatMessage(BaseModel):
    """Prior turn of the advisor conversation"""

    role: str
    content: str


class ChatRequest(BaseModel):
    """Request body for POST /api/ai/chat"""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(None, validate_default=True)
    user_email: str = Field("", alias="userEmail")
    user_name: str = Field("", alias="userName")
    financial_context: str = Field("", alias="financialContext")
    conversation_history: List[ChatMessage] = Field(default_factory=list, alias="conversationHistory")

    @field_validator("message", mode="before")
    @classmethod
    def message_not_blank(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Message is required and must be a non-empty string")
        return value


class ChatResponse(BaseModel):
    """Response for POST /api/ai/chat"""

    response: str


class HealthScoreRequest(BaseModel):
    """Request body for POST /api/ai/health-score"""

    model_config = ConfigDict(populate_by_name=True)

    financial_data: Dict[str, Any] = Field(default_factory=dict, alias="financialData")
    prompt: str = Field(None, validate_default=True)

    @field_validator("prompt", mode="before")
    @classmethod
    def prompt_present(cls, value: Any) -> str:
        if not value or not isinstance(value, str):
            raise ValueError("Prompt is required")
        return value


class UserCreate(BaseModel):
    """Request body for POST /api/users"""

    user_id: str = Field(..., min_length=1, description="Auth provider user identifier")
    email: str = Field(..., min_length=3)
    name: str = ""
    currency: str = Field("EUR", min_length=3, max_length=3)
    subscription_status: Optional[Literal["free", "pro"]] = "free"


class UserResponse(BaseModel):
    user_id: str
    email: str
    name: str
    currency: str
    plan: str


class SubscriptionUpdate(BaseModel):
    """Request body for PUT /api/users/{user_id}/subscription; null drops the record"""

    status: Optional[Literal["free", "pro"]] = None


class SnapshotSchema(BaseModel):
    cash: float = 0
    savings: float = 0
    emergency: float = 0
    investing: float = 0
    debt: float = 0


class TargetsSchema(BaseModel):
    savings: float = 0
    investing: float = 0


class DebtCreate(BaseModel):
    name: str = Field(..., min_length=1)
    total: float = Field(..., ge=0)
    monthly: float = Field(..., ge=0)
    type: str = "other"


class DebtSchema(DebtCreate):
    debt_id: str


class TransactionCreate(BaseModel):
    """Request body for POST /api/users/{user_id}/transactions"""

    type: str = Field(..., min_length=1, description="income, expense, savings, investing, debt_payment or emergency_fund")
    amount: float = Field(..., gt=0)
    date: date
    category: str = ""
    sub_category: Optional[str] = None
    name: str = ""


class TransactionSchema(BaseModel):
    transaction_id: str
    type: str
    amount: float
    date: date
    category: str
    sub_category: Optional[str] = None
    name: str


class TransactionListResponse(BaseModel):
    user_id: str
    month: str
    transactions: List[TransactionSchema]


class TotalsSchema(BaseModel):
    income: float
    expenses: float
    savings: float
    investing: float
    debt_pay: float
    net: float


class DerivedMetricsSchema(BaseModel):
    cashflow_ratio: float
    wealth_rate: float
    debt_ratio: float
    emergency_fund_months: float


class CategoryCountsSchema(BaseModel):
    income: int
    expenses: int
    savings: int
    investing: int
    debts: int


class HealthComponentsSchema(BaseModel):
    cashflow: int
    discipline: int
    debt: int
    trend: int


class HealthBreakdownSchema(BaseModel):
    cashflow_ratio: float
    cashflow_explanation: str
    wealth_rate: int
    wealth_explanation: str
    debt_ratio: int
    debt_explanation: str
    trend_explanation: str
    emergency_fund_months: float


class RecommendedActionSchema(BaseModel):
    priority: str
    title: str
    description: str


class HealthScoreSchema(BaseModel):
    score: int
    label: str
    components: HealthComponentsSchema
    breakdown: HealthBreakdownSchema


class MonthMetricsResponse(BaseModel):
    """Response for GET /api/users/{user_id}/months/{month}/metrics"""

    user_id: str
    month: str
    totals: TotalsSchema
    metrics: DerivedMetricsSchema
    counts: CategoryCountsSchema
    health: HealthScoreSchema
    actions: List[RecommendedActionSchema]


class FinancialContextResponse(BaseModel):
    user_id: str
    month: str
    financial_context: str


class QuotaResponse(BaseModel):
    """Response for GET /api/users/{user_id}/months/{month}/quota"""

    user_id: str
    month: str
    plan: str
    limit: Optional[int] = None  # None for unlimited plans
    counts: CategoryCountsSchema
    can_add: Dict[str, bool]


class MonthHealthSchema(BaseModel):
    income_score: int
    expense_score: int
    savings_score: int
    debt_score: int
    adherence_score: int
    total: int
    explanation: str


class MetricChangeSchema(BaseModel):
    current: int
    previous: int
    change: int


class HealthTrendSchema(BaseModel):
    current_score: int
    previous_score: int
    change_points: int
    trend: str
    current_period: str
    previous_period: str
    income_stability: MetricChangeSchema
    expense_control: MetricChangeSchema
    savings_rate: MetricChangeSchema
    debt_management: MetricChangeSchema


class HealthTipSchema(BaseModel):
    category: str
    priority: str
    title: str
    description: str
    actionable: str


class MonthHealthResponse(BaseModel):
    """Response for GET /api/users/{user_id}/months/{month}/health"""

    user_id: str
    month: str
    health: MonthHealthSchema
    trend: Optional[HealthTrendSchema] = None  # None until both 3-month windows hold data
    tips: List[HealthTipSchema]


class TransactionAssessRequest(BaseModel):
    """Request body for POST /api/users/{user_id}/transactions/assess"""

    type: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    date: date


class TransactionAssessmentSchema(BaseModel):
    risk_level: str
    title: str
    message: str
    recommendation: str
    should_warn: bool
