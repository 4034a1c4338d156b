from enum import Enum

from pydantic import BaseModel, ConfigDict

from tappr.schemas.base import CamelModel


class QuestionCategory(str, Enum):
    # Declaration order drives balanced sampling.
    LIFESTYLE = "lifestyle"
    VALUES = "values"
    ENTERTAINMENT = "entertainment"
    FOOD = "food"
    SOCIAL = "social"
    GOALS = "goals"
    PERSONALITY = "personality"
    PREFERENCES = "preferences"


class CompatibilityQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    category: QuestionCategory
    options: tuple[str, ...]
    emoji: str


class BankValidation(CamelModel):
    is_valid: bool
    errors: list[str] = []


class BankStats(CamelModel):
    total: int
    categories: dict[str, int]
    average_options_per_question: float
