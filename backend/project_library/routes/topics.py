"""
Topic taxonomy routes (public).
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.database import get_db_session
from project_library.schemas.common import ERROR_RESPONSES, Envelope, ok
from project_library.schemas.topic import TopicNode, TopicResponse, TopicTreeResponse
from project_library.services.taxonomy import TaxonomyNode
from project_library.services.topic_service import topic_service

router = APIRouter(prefix="/api/topics", tags=["Topics"])


def _to_schema(node: TaxonomyNode, path: frozenset = frozenset()) -> TopicNode:
    path = path | {node.name}
    return TopicNode(
        label=node.name,
        synonyms=list(node.synonyms),
        children=[_to_schema(c, path) for c in node.children if c.name not in path],
    )


@router.get("", response_model=Envelope[List[TopicResponse]], responses=ERROR_RESPONSES)
async def list_topics(db: AsyncSession = Depends(get_db_session)):
    topics = await topic_service.list_topics(db)
    return ok([TopicResponse.model_validate(t) for t in topics])


@router.get("/tree", response_model=Envelope[TopicTreeResponse], responses=ERROR_RESPONSES)
async def topic_tree(db: AsyncSession = Depends(get_db_session)):
    roots, mermaid = await topic_service.topic_tree(db)
    return ok(TopicTreeResponse(roots=[_to_schema(r) for r in roots], mermaid=mermaid))
