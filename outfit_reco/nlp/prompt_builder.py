"""Prompt construction for outfit rationale generation."""

from __future__ import annotations

from outfit_reco.workers.jobs import EnrichmentJob, ItemFacts

SYSTEM_PROMPT = "You are a fashion stylist. Return only valid JSON."


def _describe(item: ItemFacts) -> str:
    return f"{item.title} ({item.brand or 'n/a'})"


def _constraint(value: object) -> str:
    return "not specified" if value is None else str(value)


class PromptBuilder:
    """Builds the stylist prompt for one enrichment job."""

    def build(self, job: EnrichmentJob) -> str:
        base = job.base
        items = job.items
        constraints = job.constraints
        accessories = ", ".join(item.title for item in items.accessories) or "none"

        lines = [
            "You are a fashion stylist.",
            "",
            "Base item:",
            f"- {base.title} ({base.brand or 'brand n/a'}) tags: {', '.join(base.tags)}",
            "",
            "Outfit:",
            f"- Top: {_describe(items.top)}",
            f"- Bottom: {_describe(items.bottom)}",
            f"- Footwear: {_describe(items.footwear)}",
            f"- Accessories: {accessories}",
            "",
            "Constraints:",
            f"- Budget: {_constraint(constraints.budget)}",
            f"- Occasion: {_constraint(constraints.occasion)}",
            f"- Season: {_constraint(constraints.season)}",
            "",
            "Write:",
            "1) One short paragraph (<= 70 words) explaining why this outfit works.",
            "2) 3 bullets labeled Style, Color, Occasion/Season.",
            "Return JSON with keys: paragraph, bullets (array of strings).",
        ]
        return "\n".join(lines)
