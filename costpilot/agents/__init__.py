"""AI Agents package."""

from costpilot.agents.ai_agents import (
    AgentResult,
    InsightAgent,
    OptimizationAgent,
    WealthAgent,
)

__all__ = [
    "AgentResult",
    "InsightAgent",
    "OptimizationAgent",
    "WealthAgent",
]
