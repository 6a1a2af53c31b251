"""Optimization report types."""

from dataclasses import dataclass, field
from enum import Enum


class SuggestionCategory(str, Enum):
    MODEL = "model"
    PROMPT = "prompt"
    CACHE = "cache"
    OUTPUT = "output"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class PromptPattern:
    pattern: str            # first 100 trimmed chars
    full_prompt: str        # first occurrence, untruncated
    count: int = 0
    total_cost: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    sessions: list[str] = field(default_factory=list)  # distinct, first-seen order
    model: str = ""

    @property
    def avg_cost_per_use(self) -> float:
        return self.total_cost / self.count if self.count else 0.0

    def to_dict(self) -> dict:
        return {
            "pattern": self.pattern,
            "fullPrompt": self.full_prompt,
            "count": self.count,
            "totalCost": self.total_cost,
            "avgCostPerUse": self.avg_cost_per_use,
            "totalInputTokens": self.total_input_tokens,
            "totalOutputTokens": self.total_output_tokens,
            "sessions": list(self.sessions),
            "model": self.model,
        }


@dataclass
class OptimizationSuggestion:
    id: str
    category: SuggestionCategory
    priority: Priority
    title: str
    description: str
    potential_savings: float
    implementation: str
    affected_sessions: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.category.value,
            "priority": self.priority.value,
            "title": self.title,
            "description": self.description,
            "potentialSavings": self.potential_savings,
            "implementation": self.implementation,
            "affectedSessions": self.affected_sessions,
        }


@dataclass
class ModelSuggestion:
    current_model: str
    suggested_model: str
    current_cost: float
    projected_cost: float
    savings: float
    sessions_affected: int

    def to_dict(self) -> dict:
        return {
            "currentModel": self.current_model,
            "suggestedModel": self.suggested_model,
            "currentCost": self.current_cost,
            "projectedCost": self.projected_cost,
            "savings": self.savings,
            "sessionsAffected": self.sessions_affected,
        }


@dataclass
class ModelUsage:
    model: str
    sessions: int = 0
    cost: float = 0.0
    percentage: float = 0.0

    def to_dict(self) -> dict:
        return {
            "model": self.model,
            "sessions": self.sessions,
            "cost": self.cost,
            "percentage": self.percentage,
        }


@dataclass
class CacheAnalysis:
    total_cache_read: int = 0
    total_cache_write: int = 0
    total_input_tokens: int = 0
    cache_hit_rate: float = 0.0
    potential_savings: float = 0.0

    def to_dict(self) -> dict:
        return {
            "totalCacheRead": self.total_cache_read,
            "totalCacheWrite": self.total_cache_write,
            "totalInputTokens": self.total_input_tokens,
            "cacheHitRate": self.cache_hit_rate,
            "potentialSavings": self.potential_savings,
        }


@dataclass
class OptimizationAnalysis:
    total_current_cost: float = 0.0
    total_potential_savings: float = 0.0
    savings_percentage: float = 0.0
    suggestions: list[OptimizationSuggestion] = field(default_factory=list)
    top_expensive_patterns: list[PromptPattern] = field(default_factory=list)
    model_usage: list[ModelUsage] = field(default_factory=list)
    model_suggestions: list[ModelSuggestion] = field(default_factory=list)
    cache_analysis: CacheAnalysis = field(default_factory=CacheAnalysis)
    average_output_ratio: float = 0.0

    def to_dict(self) -> dict:
        return {
            "totalCurrentCost": self.total_current_cost,
            "totalPotentialSavings": self.total_potential_savings,
            "savingsPercentage": self.savings_percentage,
            "suggestions": [s.to_dict() for s in self.suggestions],
            "topExpensivePatterns": [p.to_dict() for p in self.top_expensive_patterns],
            "modelUsage": [m.to_dict() for m in self.model_usage],
            "modelSuggestions": [m.to_dict() for m in self.model_suggestions],
            "cacheAnalysis": self.cache_analysis.to_dict(),
            "averageOutputRatio": self.average_output_ratio,
        }
