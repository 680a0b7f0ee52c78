"""
Outcome Schemas
API views of dispatcher outcomes
"""

from pydantic import BaseModel, Field
from typing import List, Optional

from voicecart.schemas.items import ListItem, Suggestion


class OutcomeResponse(BaseModel):
    """Result of one command or list operation"""
    action: str
    success: bool
    message: str
    error: Optional[str] = None
    item: Optional[ListItem] = None
    matches: List[ListItem] = Field(default_factory=list)
    suggestions: List[Suggestion] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome) -> "OutcomeResponse":
        return cls(
            action=outcome.action,
            success=outcome.success,
            message=outcome.message,
            error=outcome.error,
            item=outcome.item,
            matches=outcome.matches,
            suggestions=outcome.suggestions
        )
