"""Protocol class for recommendation rules."""

from typing import Protocol

from .context import RuleContext
from .models import Recommendation


class Rule(Protocol):
    """Rules read the context (NEVER write the snapshot) and return recommendations."""

    name: str

    def evaluate(self, context: RuleContext) -> list[Recommendation]: ...
