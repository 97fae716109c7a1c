"""
Rendered message data models.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MessageSection(BaseModel):
    """One titled field of a rendered message."""

    title: str
    value: str
    is_full_width: bool = False


class RenderedMessage(BaseModel):
    """
    Channel-agnostic message produced by a formatter.

    Providers serialise this into their own wire format.

    Attributes:
        summary_text: Headline of the message
        pretext: Sentence introducing the change
        color: Accent hint (good, warning, danger)
        sections: Ordered titled fields
        footer: Footer line
        timestamp: Unix seconds of the underlying change
    """

    summary_text: str
    pretext: str = ""
    color: str = "good"
    sections: List[MessageSection] = Field(default_factory=list)
    footer: str = ""
    timestamp: Optional[int] = None

    def section(self, title: str) -> Optional[MessageSection]:
        for section in self.sections:
            if section.title == title:
                return section
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return self.model_dump()


class DeliveryRecord(BaseModel):
    """What was (or in preview mode, would have been) sent to one channel."""

    subscriber: str
    notification_kind: str
    channel_type: str
    endpoint: str
    headers: Dict[str, str] = Field(default_factory=dict)
    payload: Dict[str, Any] = Field(default_factory=dict)
    delivered: bool = False
