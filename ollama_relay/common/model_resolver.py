"""
Model identity resolution.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ModelResolver:
    """
    Resolves the model name sent upstream.

    A configured override always wins, clients cannot opt out of it. Without
    one, the requested name passes through unchanged and the default only
    fills in when the request did not name a model.
    """

    override: Optional[str] = None
    default: Optional[str] = None

    def resolve(self, requested: Optional[str]) -> str:
        if self.override:
            return self.override
        if requested:
            return requested
        return self.default or ""
