"""
Project Library Backend - Topic Service
========================================

What:  Reads the topic taxonomy and imports it from CSV rows.
How:   Import is idempotent on label: missing topics are inserted, existing
       ones get their synonyms merged and parent link set. Parents named only
       in the parent column are created as well.
Who:   GET /api/topics, GET /api/topics/tree and project_library/seed_topics.py.
"""

import logging
from typing import Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.exceptions import DatabaseError
from project_library.models.topic import Topic
from project_library.services.taxonomy import (
    TaxonomyNode,
    TaxonomyRow,
    build_mermaid_diagram,
    build_taxonomy_tree,
)

logger = logging.getLogger(__name__)


class TopicService:
    async def list_topics(self, db: AsyncSession) -> List[Topic]:
        try:
            result = await db.execute(select(Topic).order_by(Topic.label.asc()))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing topics: %s", str(e))
            raise DatabaseError()

    async def topic_tree(self, db: AsyncSession) -> Tuple[List[TaxonomyNode], str]:
        """
        Returns:
            (roots, mermaid) built from the stored topics
        """
        topics = await self.list_topics(db)
        labels = {t.id: t.label for t in topics}
        rows = [
            TaxonomyRow(
                topic=t.label,
                parent=labels.get(t.parent_id) if t.parent_id else None,
                synonyms=list(t.synonyms or []),
            )
            for t in topics
        ]
        roots = build_taxonomy_tree(rows)
        return roots, build_mermaid_diagram(roots)

    async def import_rows(self, db: AsyncSession, rows: List[TaxonomyRow]) -> Tuple[int, int]:
        """
        Upsert topics by label.

        Returns:
            (created, updated) counts
        """
        try:
            result = await db.execute(select(Topic))
        except SQLAlchemyError as e:
            logger.error("Database error loading topics for import: %s", str(e))
            raise DatabaseError()
        by_label: Dict[str, Topic] = {t.label: t for t in result.scalars().all()}
        created = updated = 0

        def ensure(label: str) -> Topic:
            nonlocal created
            topic = by_label.get(label)
            if topic is None:
                topic = Topic(label=label, synonyms=[])
                db.add(topic)
                by_label[label] = topic
                created += 1
            return topic

        for row in rows:
            topic = ensure(row.topic)
            merged = list(topic.synonyms or [])
            for synonym in row.synonyms:
                if synonym not in merged:
                    merged.append(synonym)
            if merged != (topic.synonyms or []):
                # Reassign so the JSON column is marked dirty
                topic.synonyms = merged
                if topic.id is not None:
                    updated += 1
            if row.parent:
                ensure(row.parent)

        try:
            await db.flush()
            # Second pass: every topic now has an id to point at
            for row in rows:
                if row.parent and row.parent != row.topic:
                    topic = by_label[row.topic]
                    if topic.parent_id is None:
                        topic.parent_id = by_label[row.parent].id
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error importing topics: %s", str(e))
            raise DatabaseError()

        logger.info("Topic import: %d created, %d updated", created, updated)
        return created, updated


topic_service = TopicService()
