"""Natural-language questions over the purchase history."""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from shopping_history.domain.records import ProductRecord
from shopping_history.services.inference import InferenceClient, InferenceError

logger = logging.getLogger(__name__)

_INSTRUCTIONS = (
    "You are a helpful assistant analysing a person's shopping history. "
    "The history is a JSON array of purchases with product name, price, "
    "purchase time (UTC, ISO-8601) and, when known, the location. "
    "Answer the question using only this data. Be concise; show totals "
    "and dates where they help."
)


@dataclass
class AnalysisService:
    """Answers free-text questions about recorded purchases."""

    client: InferenceClient

    async def analyze(
        self, query: str, records: Sequence[ProductRecord]
    ) -> str | None:
        """Return an answer, or None without calling out when query is blank."""
        question = query.strip()
        if not question:
            return None
        prompt = build_analysis_prompt(question, records)
        try:
            answer = await self.client.generate_text(prompt=prompt)
        except Exception as exc:
            logger.exception(
                "Analysis call failed", extra={"record_count": len(records)}
            )
            raise InferenceError(
                "Could not analyse your history right now. Please try again."
            ) from exc
        return answer.strip()


def build_analysis_prompt(question: str, records: Sequence[ProductRecord]) -> str:
    """Render the question and a compact history into a single prompt."""
    history = [
        record.model_dump(mode="json", by_alias=True, exclude={"image_url"})
        for record in records
    ]
    for entry in history:
        entry.pop("id", None)
    return (
        f"{_INSTRUCTIONS}\n\n"
        f"Shopping history:\n{json.dumps(history, ensure_ascii=False)}\n\n"
        f"Question: {question}"
    )
