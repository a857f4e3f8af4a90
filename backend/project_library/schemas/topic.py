"""
Topic and taxonomy schemas.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field


class TopicResponse(BaseModel):
    id: uuid.UUID
    label: str
    parent_id: Optional[uuid.UUID] = None
    synonyms: List[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class TopicNode(BaseModel):
    label: str
    synonyms: List[str] = Field(default_factory=list)
    children: List[TopicNode] = Field(default_factory=list)


class TopicTreeResponse(BaseModel):
    """
    What:  The taxonomy as a forest plus a Mermaid `flowchart TD` rendering.
    Who:   GET /api/topics/tree (developer taxonomy view).
    """

    roots: List[TopicNode]
    mermaid: str


TopicNode.model_rebuild()
