from typing import NamedTuple, Optional


class Classification(NamedTuple):
    category: str
    priority: str
    advice: Optional[str]


def suggest_classification(text: Optional[str]) -> Classification:
    """Keyword match on a ticket's title/description."""
    lower = (text or "").lower()

    if any(word in lower for word in ("leak", "flood", "urgent", "fire")):
        return Classification(
            "plumbing", "urgent", "Detected urgent plumbing issue. Priority set to Urgent."
        )
    if any(word in lower for word in ("light", "power", "electric")):
        priority = "high" if ("stuck" in lower or "outage" in lower) else "medium"
        return Classification("electrical", priority, "Electrical category detected.")
    if "lock" in lower or "key" in lower:
        return Classification("locksmith", "medium", "Locksmith category detected.")

    return Classification("general", "medium", None)
