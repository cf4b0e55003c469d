"""
Free-text notes analysis.

Two strategies behind one interface:
- Keyword rules: always available, deterministic, no network
- A pydantic-ai agent with structured output, used only when enabled

Any agent failure (timeout, provider error, bad output) falls back to the
keyword rules, so analysis always returns findings.
"""

from dataclasses import dataclass
from typing import Any, Literal, Protocol, cast

import structlog
from pydantic import BaseModel, Field
from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings

from healthlog.config import AnalysisConfig
from healthlog.errors import ValidationError

logger = structlog.get_logger(__name__)

NO_TRIGGERS_FINDING = "No obvious triggers found. Everything looks normal."


@dataclass(frozen=True)
class KeywordRule:
    keywords: tuple[str, ...]
    finding: str

    def matches(self, text: str) -> bool:
        lowered = text.lower()
        return any(keyword in lowered for keyword in self.keywords)


KEYWORD_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        keywords=("pressure", "давлени"),
        finding="Blood pressure mentioned. It may be worth checking your stress level.",
    ),
    KeywordRule(
        keywords=("sleep", "slept", "insomnia", "сон", "спал"),
        finding="Sleep remarks found. Make sure your sleep was restful.",
    ),
    KeywordRule(
        keywords=("spasm", "спазм"),
        finding="Neck spasm mentioned. Relaxing neck exercises are recommended.",
    ),
)


class NotesFindings(BaseModel):
    """Structured output requested from the agent."""

    findings: list[str] = Field(
        min_length=1, max_length=5, description="Short observations about possible triggers"
    )


class NotesAnalysis(BaseModel):
    findings: list[str]
    source: Literal["rules", "ai"]


class NotesAgent(Protocol):
    """The slice of `pydantic_ai.Agent` the analyzer uses."""

    def run_sync(self, user_prompt: str) -> Any: ...


SYSTEM_PROMPT = """You read short personal health journal notes written by someone
tracking blood pressure, pulse, sleep and neck problems.

List up to five short observations about likely triggers mentioned in the notes:
blood pressure remarks, poor sleep, neck spasms, stress, weather or temperature.
Never diagnose and never recommend medication changes. If nothing stands out,
return a single finding saying no obvious triggers were found."""


def analyze_with_rules(text: str) -> list[str]:
    findings = [rule.finding for rule in KEYWORD_RULES if rule.matches(text)]
    return findings or [NO_TRIGGERS_FINDING]


def build_agent(config: AnalysisConfig) -> NotesAgent:
    """Create the pydantic-ai agent with structured output."""
    return cast(
        NotesAgent,
        Agent(
            config.model_name,
            output_type=NotesFindings,
            system_prompt=SYSTEM_PROMPT,
            model_settings=ModelSettings(timeout=config.timeout_seconds, temperature=0.1),
        ),
    )


class NotesAnalyzer:
    """Analyzes notes with the agent when configured, with keyword rules otherwise."""

    def __init__(self, config: AnalysisConfig, agent: NotesAgent | None = None) -> None:
        self.config = config
        self.logger = logger.bind(component="notes_analyzer")
        if agent is None and config.enabled:
            agent = build_agent(config)
        self.agent = agent

    def analyze(self, text: str) -> NotesAnalysis:
        if not text.strip():
            raise ValidationError("Notes text is empty", fields=["notes"])

        if self.agent is not None:
            try:
                result = self.agent.run_sync(text)
                output = cast(NotesFindings, result.output)
                self.logger.info("notes_analyzed", source="ai", findings=len(output.findings))
                return NotesAnalysis(findings=list(output.findings), source="ai")
            except Exception as e:
                self.logger.warning("notes_agent_failed_using_rules", error=str(e))

        findings = analyze_with_rules(text)
        self.logger.info("notes_analyzed", source="rules", findings=len(findings))
        return NotesAnalysis(findings=findings, source="rules")
