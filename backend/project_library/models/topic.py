"""
Project Library Backend - Topic Model
======================================

What:  `topics`: the interest taxonomy. A forest of labelled nodes with
       optional synonyms, loaded from CSV (see services/taxonomy.py).
"""

import uuid
from typing import List, Optional

from sqlalchemy import JSON, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from project_library.database import Base


class Topic(Base):
    __tablename__ = "topics"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    label: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("topics.id", ondelete="SET NULL"), nullable=True
    )
    synonyms: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Topic(label='{self.label}')>"
