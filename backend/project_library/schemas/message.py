"""
Message schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from project_library.schemas.owner import OwnerSummary


class MessageCreate(BaseModel):
    """
    Body of POST /api/messages. Content trimming and length rules are applied
    by MessageService so they hold for every caller.
    """

    receiver_owner_id: uuid.UUID
    content: str


class MessageResponse(BaseModel):
    id: uuid.UUID
    sender_owner_id: uuid.UUID
    receiver_owner_id: uuid.UUID
    sender_org_id: Optional[uuid.UUID] = None
    receiver_org_id: Optional[uuid.UUID] = None
    content: str
    created_at: datetime
    read_at: Optional[datetime] = Field(default=None, description="null until the receiver reads it")
    sender: OwnerSummary
    receiver: OwnerSummary

    model_config = {"from_attributes": True}


class MessageListResponse(BaseModel):
    count: int
    items: List[MessageResponse]


class ConversationSummary(BaseModel):
    other_owner: OwnerSummary
    last_message: MessageResponse
    unread_count: int


class ConversationListResponse(BaseModel):
    count: int
    items: List[ConversationSummary]
