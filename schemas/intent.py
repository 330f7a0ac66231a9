"""Intent classification schemas."""

from enum import Enum
from pydantic import BaseModel, Field


class Intent(str, Enum):
    """Closed set of intents the assistant understands."""
    PRODUCT_SEARCH = "product_search"
    PRODUCT_RECOMMENDATION = "product_recommendation"
    PRODUCT_INQUIRY = "product_inquiry"
    CODE_HELP = "code_help"
    BUSINESS_ANALYTICS = "business_analytics"
    GENERAL_QUESTION = "general_question"


class IntentPattern(BaseModel):
    """One row of the keyword classification table."""
    intent: Intent
    keywords: list[str] = Field(min_length=1)
    weight: float = Field(gt=0.0)


class IntentResult(BaseModel):
    """Classified intent with confidence and extracted entities."""
    intent: Intent = Intent.GENERAL_QUESTION
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    entities: list[str] = Field(default_factory=list)
