"""Advisory agents package."""

from financeai.agents.advisor import (
    GREETING,
    NO_CATEGORY_TEXT,
    AdvisoryResponder,
    AdvisoryRule,
    AdvisoryTopic,
    format_amount,
)

__all__ = [
    "GREETING",
    "NO_CATEGORY_TEXT",
    "AdvisoryResponder",
    "AdvisoryRule",
    "AdvisoryTopic",
    "format_amount",
]
