"""
services/llm_service.py
-----------------------
Drafting assistant: clause generation and risk analysis.

Every inference is:
  1. Executed (mock or real OpenAI)
  2. Tracked in MLflow (latency, length estimates, organization/user context)

Without OPENAI_API_KEY the service runs in mock mode and answers from
deterministic templates, so the rest of the product works offline.
"""

import json
import time

from lexcorp.core.config import settings
from lexcorp.core.exceptions import UpstreamServiceError
from lexcorp.core.logging import get_logger
from lexcorp.models.agreement import RiskLevel
from lexcorp.schemas.ai import ClauseContext, RiskAnalysis
from lexcorp.services.mlflow_service import track_ai_call

logger = get_logger(__name__)

# Shorter texts are not worth a model call.
MIN_RISK_TEXT_LENGTH = 50

CLAUSE_SYSTEM_PROMPT = (
    "You are a senior commercial lawyer drafting contract clauses. "
    "Write one clause in plain, enforceable legal English. "
    "Return only the clause text, without headings or commentary."
)

RISK_SYSTEM_PROMPT = (
    "You review contract language for legal and commercial risk. "
    'Answer with a JSON object {"level": "Low" | "Medium" | "High", '
    '"reason": "<one sentence>"}.'
)

_HIGH_RISK_TERMS = (
    "unlimited liability",
    "indemnify",
    "indemnification",
    "liquidated damages",
    "perpetual",
    "irrevocable",
    "exclusive",
    "non-compete",
)
_MEDIUM_RISK_TERMS = (
    "terminate",
    "termination",
    "penalty",
    "automatically renew",
    "auto-renew",
    "warranty",
    "governing law",
)


class LLMService:

    def __init__(self, api_key: str | None = None) -> None:
        api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self._use_mock = not bool(api_key)
        if not self._use_mock:
            import openai
            self._client = openai.AsyncOpenAI(api_key=api_key)
        else:
            logger.info("LLMService in MOCK mode, set OPENAI_API_KEY for real LLM")

    @property
    def mock(self) -> bool:
        return self._use_mock

    # ── Clause drafting ──────────────────────────────────────────────────────

    async def generate_clause(
        self,
        section_title: str,
        context: ClauseContext,
        organization_id: str = "unknown",
        user_id: str = "unknown",
    ) -> str:
        prompt = (
            f"Draft the '{section_title}' clause for the agreement "
            f"'{context.title or 'Untitled'}'"
            f" with counterparty '{context.counterparty or 'the Counterparty'}'"
            f"{f' ({context.type})' if context.type else ''}."
        )
        start = time.monotonic()

        if self._use_mock:
            text = self._mock_clause(section_title, context)
        else:
            text = await self._openai_complete(CLAUSE_SYSTEM_PROMPT, prompt)

        self._track("generate_clause", prompt, text, start, organization_id, user_id)
        return text.strip()

    # ── Risk analysis ────────────────────────────────────────────────────────

    async def analyze_risk(
        self,
        text: str,
        organization_id: str = "unknown",
        user_id: str = "unknown",
    ) -> RiskAnalysis:
        if len(text.strip()) < MIN_RISK_TEXT_LENGTH:
            return RiskAnalysis(level=RiskLevel.low, reason="Text too short to analyze.")

        start = time.monotonic()
        if self._use_mock:
            analysis = self._mock_risk(text)
            raw = analysis.model_dump_json()
        else:
            raw = await self._openai_complete(RISK_SYSTEM_PROMPT, text, json_mode=True)
            analysis = self._parse_risk(raw)

        self._track("analyze_risk", text, raw, start, organization_id, user_id)
        return analysis

    # ── Internals ────────────────────────────────────────────────────────────

    def _track(
        self,
        operation: str,
        prompt: str,
        response: str,
        start: float,
        organization_id: str,
        user_id: str,
    ) -> None:
        latency_ms = round((time.monotonic() - start) * 1000, 1)
        logger.info(
            "LLM response generated",
            operation=operation,
            latency_ms=latency_ms,
            mock=self._use_mock,
        )
        track_ai_call(
            operation=operation,
            prompt=prompt,
            response=response,
            latency_ms=latency_ms,
            organization_id=organization_id,
            user_id=user_id,
            mock=self._use_mock,
        )

    @staticmethod
    def _parse_risk(raw: str) -> RiskAnalysis:
        try:
            data = json.loads(raw)
            return RiskAnalysis(level=RiskLevel(data["level"]), reason=str(data.get("reason", "")))
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Unparseable risk analysis", error=str(exc), raw=raw[:200])
            raise UpstreamServiceError("Risk analysis returned an invalid answer") from exc

    @staticmethod
    def _mock_clause(section_title: str, context: ClauseContext) -> str:
        counterparty = context.counterparty or "the Counterparty"
        agreement = context.title or "this Agreement"
        return (
            f"[MOCK CLAUSE] {section_title}. "
            f"The parties to {agreement}, including {counterparty}, agree that the "
            f"provisions of this {section_title} section apply for the full term and "
            "survive termination to the extent required to give them effect."
        )

    @staticmethod
    def _mock_risk(text: str) -> RiskAnalysis:
        lowered = text.lower()
        high = [term for term in _HIGH_RISK_TERMS if term in lowered]
        if high:
            return RiskAnalysis(
                level=RiskLevel.high,
                reason=f"Contains high-risk terms: {', '.join(high)}.",
            )
        medium = [term for term in _MEDIUM_RISK_TERMS if term in lowered]
        if medium:
            return RiskAnalysis(
                level=RiskLevel.medium,
                reason=f"Contains terms worth reviewing: {', '.join(medium)}.",
            )
        return RiskAnalysis(level=RiskLevel.low, reason="No unusual risk terms found.")

    async def _openai_complete(self, system: str, prompt: str, json_mode: bool = False) -> str:
        import openai

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            completion = await self._client.chat.completions.create(
                model=settings.LLM_MODEL,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=settings.LLM_MAX_TOKENS,
                temperature=settings.LLM_TEMPERATURE,
                **kwargs,
            )
            return completion.choices[0].message.content or ""
        except openai.OpenAIError as exc:
            logger.error("OpenAI API error", error=str(exc))
            raise UpstreamServiceError(f"LLM generation failed: {exc}") from exc


# Shared across all requests
llm_service = LLMService()
