"""Cost optimization analysis over raw session entries.

Session-level token totals are not enough here: prompt patterns need each
user prompt paired with the assistant reply that paid for it, so this module
works from decoded entries rather than from SessionSummary alone.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from claude_usage_analytics.types.messages import EntryKind, LogEntry, TokenUsage
from claude_usage_analytics.types.optimization import (
    CacheAnalysis,
    ModelSuggestion,
    ModelUsage,
    OptimizationAnalysis,
    OptimizationSuggestion,
    Priority,
    PromptPattern,
    SuggestionCategory,
)
from claude_usage_analytics.types.sessions import SessionSummary
from claude_usage_analytics.utils.content_text import get_message_text
from claude_usage_analytics.utils.pricing import PricingTable, format_cost

logger = logging.getLogger(__name__)

# Prompt patterns
MIN_PROMPT_CHARS = 10
PATTERN_KEY_CHARS = 100
TOP_PATTERNS = 10
CONSOLIDATION_MIN_COUNT = 3          # fires when count exceeds this
CONSOLIDATION_SAVINGS_RATE = 0.30
CONSOLIDATION_HIGH_PRIORITY_COST = 30.0

# Model downgrades
OPUS_COST_THRESHOLD = 10.0
OPUS_SAVINGS_RATE = 0.80
OPUS_ALTERNATIVE = "claude-sonnet-4-5-20250929"
SONNET_COST_THRESHOLD = 5.0
SONNET_SAVINGS_RATE = 0.67
SONNET_ALTERNATIVE = "claude-haiku-4-5-20250514"
MODEL_HIGH_PRIORITY_SAVINGS = 50.0

# Cache
CACHE_HIT_RATE_FLOOR = 0.30
CACHE_MIN_INPUT_TOKENS = 100_000
CACHE_TARGET_HIT_RATE = 0.50
CACHE_DISCOUNT = 0.90
REFERENCE_INPUT_PRICE = 3.00         # USD per 1M input tokens
CACHE_HIGH_PRIORITY_SAVINGS = 20.0

# Output length
OUTPUT_RATIO_THRESHOLD = 3.0
OUTPUT_SAVINGS_RATE = 0.15


@dataclass
class PromptPair:
    """A user prompt and the usage of the assistant reply that followed it."""
    session_id: str
    prompt: str
    usage: TokenUsage
    model: str


def extract_prompt_pairs(session_id: str, entries: list[LogEntry]) -> list[PromptPair]:
    """Pair each user prompt (>= 10 chars) with the next assistant entry carrying usage.

    Prompts with no later usage-bearing reply are dropped.
    """
    # next_reply[i]: first assistant entry with usage strictly after i
    next_reply: list[LogEntry | None] = [None] * len(entries)
    upcoming = None
    for i in range(len(entries) - 1, -1, -1):
        next_reply[i] = upcoming
        entry = entries[i]
        if entry.kind == EntryKind.ASSISTANT and entry.usage is not None:
            upcoming = entry

    pairs = []
    for i, entry in enumerate(entries):
        if entry.kind != EntryKind.USER or entry.message is None:
            continue
        text = get_message_text(entry.message.content).strip()
        if len(text) < MIN_PROMPT_CHARS:
            continue
        reply = next_reply[i]
        if reply is None:
            continue
        pairs.append(PromptPair(session_id, text, reply.usage, reply.model))
    return pairs


class OptimizationAnalyzer:
    """Derives ranked, priced cost-saving suggestions.

    All thresholds and percentages are fixed heuristics (see module
    constants); they are not derived from the pricing table.
    """

    def __init__(self, pricing: PricingTable | None = None):
        self._pricing = pricing or PricingTable()

    def analyze(
        self,
        session_entries: Iterable[tuple[SessionSummary, list[LogEntry]]],
    ) -> OptimizationAnalysis:
        sessions: list[SessionSummary] = []
        pairs: list[PromptPair] = []
        cache = CacheAnalysis()
        sessions_with_usage = 0

        for summary, entries in session_entries:
            sessions.append(summary)
            pairs.extend(extract_prompt_pairs(summary.id, entries))
            if self._accumulate_cache(cache, entries):
                sessions_with_usage += 1

        total_cost = sum(s.cost for s in sessions)
        cache.cache_hit_rate = cache_hit_rate(cache.total_cache_read, cache.total_input_tokens)

        patterns = self.build_patterns(pairs)
        model_usage = build_model_usage(sessions, total_cost)
        model_suggestions = build_model_suggestions(model_usage)
        average_ratio = average_output_ratio(pairs)

        suggestions: list[OptimizationSuggestion] = []
        suggestions.extend(_model_suggestion(ms) for ms in model_suggestions)

        cache_suggestion = _cache_suggestion(cache, sessions_with_usage)
        if cache_suggestion is not None:
            cache.potential_savings = cache_suggestion.potential_savings
            suggestions.append(cache_suggestion)

        if patterns and patterns[0].count > CONSOLIDATION_MIN_COUNT:
            suggestions.append(_consolidation_suggestion(patterns[0]))

        if average_ratio > OUTPUT_RATIO_THRESHOLD:
            affected = len({p.session_id for p in pairs})
            suggestions.append(_output_suggestion(average_ratio, total_cost, affected))

        suggestions.sort(key=lambda s: s.potential_savings, reverse=True)
        total_savings = sum(s.potential_savings for s in suggestions)

        logger.debug(
            "Optimization analysis: %d sessions, %d prompt pairs, %d suggestions",
            len(sessions), len(pairs), len(suggestions),
        )
        return OptimizationAnalysis(
            total_current_cost=total_cost,
            total_potential_savings=total_savings,
            savings_percentage=total_savings / total_cost * 100 if total_cost > 0 else 0.0,
            suggestions=suggestions,
            top_expensive_patterns=patterns,
            model_usage=model_usage,
            model_suggestions=model_suggestions,
            cache_analysis=cache,
            average_output_ratio=average_ratio,
        )

    def build_patterns(self, pairs: list[PromptPair]) -> list[PromptPattern]:
        """Group pairs by 100-char prompt prefix; top 10 by total cost."""
        patterns: dict[str, PromptPattern] = {}
        models: dict[str, Counter] = {}
        for pair in pairs:
            key = pair.prompt[:PATTERN_KEY_CHARS]
            pattern = patterns.get(key)
            if pattern is None:
                pattern = patterns[key] = PromptPattern(pattern=key, full_prompt=pair.prompt)
                models[key] = Counter()
            pattern.count += 1
            pattern.total_cost += self._pricing.cost(pair.usage, pair.model)
            pattern.total_input_tokens += pair.usage.input_tokens
            pattern.total_output_tokens += pair.usage.output_tokens
            if pair.session_id not in pattern.sessions:
                pattern.sessions.append(pair.session_id)
            models[key][pair.model or "unknown"] += 1

        for key, pattern in patterns.items():
            counts = models[key]
            # max() keeps the first-seen model among equal counts
            pattern.model = max(counts, key=counts.get)

        ranked = sorted(patterns.values(), key=lambda p: p.total_cost, reverse=True)
        return ranked[:TOP_PATTERNS]

    @staticmethod
    def _accumulate_cache(cache: CacheAnalysis, entries: list[LogEntry]) -> bool:
        seen_usage = False
        for entry in entries:
            if entry.kind != EntryKind.ASSISTANT or entry.usage is None:
                continue
            seen_usage = True
            cache.total_cache_read += entry.usage.cache_read_input_tokens
            cache.total_cache_write += entry.usage.cache_creation_input_tokens
            cache.total_input_tokens += entry.usage.input_tokens
        return seen_usage


def cache_hit_rate(cache_read: int, input_tokens: int) -> float:
    denominator = cache_read + input_tokens
    return cache_read / denominator if denominator > 0 else 0.0


def average_output_ratio(pairs: list[PromptPair]) -> float:
    """Mean output/input ratio across pairs; input floored at 1."""
    if not pairs:
        return 0.0
    ratios = [p.usage.output_tokens / max(p.usage.input_tokens, 1) for p in pairs]
    return sum(ratios) / len(ratios)


def build_model_usage(sessions: list[SessionSummary], total_cost: float) -> list[ModelUsage]:
    usage: dict[str, ModelUsage] = {}
    session_ids: dict[str, set[str]] = {}
    for session in sessions:
        entry = usage.get(session.model)
        if entry is None:
            entry = usage[session.model] = ModelUsage(model=session.model)
            session_ids[session.model] = set()
        session_ids[session.model].add(session.id)
        entry.cost += session.cost

    for model, entry in usage.items():
        entry.sessions = len(session_ids[model])
        entry.percentage = entry.cost / total_cost * 100 if total_cost > 0 else 0.0

    return sorted(usage.values(), key=lambda m: m.cost, reverse=True)


def build_model_suggestions(model_usage: list[ModelUsage]) -> list[ModelSuggestion]:
    """Opus over $10 → Sonnet (80% cheaper); Sonnet over $5 → Haiku (67% cheaper)."""
    suggestions = []
    for usage in model_usage:
        name = usage.model.lower()
        if "opus" in name and usage.cost > OPUS_COST_THRESHOLD:
            suggestions.append(_downgrade(usage, OPUS_ALTERNATIVE, OPUS_SAVINGS_RATE))
        if "sonnet" in name and usage.cost > SONNET_COST_THRESHOLD:
            suggestions.append(_downgrade(usage, SONNET_ALTERNATIVE, SONNET_SAVINGS_RATE))
    return suggestions


def _downgrade(usage: ModelUsage, alternative: str, rate: float) -> ModelSuggestion:
    return ModelSuggestion(
        current_model=usage.model,
        suggested_model=alternative,
        current_cost=usage.cost,
        projected_cost=usage.cost * (1 - rate),
        savings=usage.cost * rate,
        sessions_affected=usage.sessions,
    )


def _model_suggestion(ms: ModelSuggestion) -> OptimizationSuggestion:
    return OptimizationSuggestion(
        id=f"model-{ms.current_model}",
        category=SuggestionCategory.MODEL,
        priority=Priority.HIGH if ms.savings > MODEL_HIGH_PRIORITY_SAVINGS else Priority.MEDIUM,
        title=f"Use {ms.suggested_model} for simpler tasks",
        description=(
            f"{ms.current_model} cost {format_cost(ms.current_cost)} across "
            f"{ms.sessions_affected} sessions. Routine edits, searches and "
            f"summaries rarely need it."
        ),
        potential_savings=ms.savings,
        implementation=(
            f"Switch to {ms.suggested_model} with /model for exploratory and "
            f"mechanical work; keep {ms.current_model} for complex reasoning."
        ),
        affected_sessions=ms.sessions_affected,
    )


def _cache_suggestion(cache: CacheAnalysis, affected: int) -> OptimizationSuggestion | None:
    if cache.cache_hit_rate >= CACHE_HIT_RATE_FLOOR:
        return None
    if cache.total_input_tokens <= CACHE_MIN_INPUT_TOKENS:
        return None

    gap = CACHE_TARGET_HIT_RATE - cache.cache_hit_rate
    savings = (gap * cache.total_input_tokens / 1_000_000
               * REFERENCE_INPUT_PRICE * CACHE_DISCOUNT)
    return OptimizationSuggestion(
        id="cache-efficiency",
        category=SuggestionCategory.CACHE,
        priority=Priority.HIGH if savings > CACHE_HIGH_PRIORITY_SAVINGS else Priority.MEDIUM,
        title="Improve prompt cache utilization",
        description=(
            f"Only {cache.cache_hit_rate * 100:.1f}% of input is served from cache. "
            f"Reaching {CACHE_TARGET_HIT_RATE * 100:.0f}% would cut fresh input costs."
        ),
        potential_savings=savings,
        implementation=(
            "Keep system prompts and CLAUDE.md stable across sessions and continue "
            "related work in the same session instead of starting new ones."
        ),
        affected_sessions=affected,
    )


def _consolidation_suggestion(pattern: PromptPattern) -> OptimizationSuggestion:
    high = pattern.total_cost > CONSOLIDATION_HIGH_PRIORITY_COST
    return OptimizationSuggestion(
        id="prompt-consolidation",
        category=SuggestionCategory.PROMPT,
        priority=Priority.HIGH if high else Priority.LOW,
        title="Consolidate a repeated prompt",
        description=(
            f'"{pattern.pattern[:60]}" was sent {pattern.count} times for a total of '
            f"{format_cost(pattern.total_cost)}."
        ),
        potential_savings=pattern.total_cost * CONSOLIDATION_SAVINGS_RATE,
        implementation=(
            "Turn the repeated request into a custom slash command or a CLAUDE.md "
            "instruction so the context is set up once."
        ),
        affected_sessions=len(pattern.sessions),
    )


def _output_suggestion(ratio: float, total_cost: float, affected: int) -> OptimizationSuggestion:
    return OptimizationSuggestion(
        id="output-length",
        category=SuggestionCategory.OUTPUT,
        priority=Priority.LOW,
        title="Ask for more concise responses",
        description=(
            f"Responses average {ratio:.1f}x the tokens of their prompts. Output "
            f"tokens are the most expensive category."
        ),
        potential_savings=total_cost * OUTPUT_SAVINGS_RATE,
        implementation=(
            "Request diffs or brief answers instead of full file rewrites and "
            "long explanations."
        ),
        affected_sessions=affected,
    )
