"""
ORM models. Importing this package registers every table on Base.metadata,
which Alembic and the test fixtures rely on.
"""

from project_library.models.user import User
from project_library.models.org import Org, OrgMembership, OrgRole
from project_library.models.owner import Owner, OwnerStatus, OwnerType
from project_library.models.follow import Follow
from project_library.models.message import Message
from project_library.models.image import AttachmentTarget, Image, ImageAttachment
from project_library.models.topic import Topic
from project_library.models.content import Entry, Event, Post, Project

__all__ = [
    "User",
    "Org",
    "OrgMembership",
    "OrgRole",
    "Owner",
    "OwnerStatus",
    "OwnerType",
    "Follow",
    "Message",
    "AttachmentTarget",
    "Image",
    "ImageAttachment",
    "Topic",
    "Entry",
    "Event",
    "Post",
    "Project",
]
