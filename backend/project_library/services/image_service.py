"""
Project Library Backend - Image Service
========================================

What:  Records image metadata and links images to projects, events or posts.
How:   The image bytes live in external object storage; this service only
       stores url/path/alt text, attributed to the active owner.
Who:   POST/GET /api/images and POST/DELETE /api/image-attachments.

Attach Rules:
    - the image must exist and have been uploaded by the acting owner
    - the target must exist and belong to the acting owner
"""

import logging
import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.exceptions import DatabaseError, ForbiddenError, NotFoundError
from project_library.models.image import Image, ImageAttachment
from project_library.models.owner import Owner
from project_library.schemas.image import AttachmentCreate, ImageCreate
from project_library.services.content_service import SERVICES_BY_TARGET

logger = logging.getLogger(__name__)


class ImageService:
    async def create_image(self, db: AsyncSession, owner: Owner, data: ImageCreate) -> Image:
        image = Image(
            url=data.url.strip(),
            path=data.path.strip(),
            alt_text=data.alt_text,
            uploaded_by_owner_id=owner.id,
        )
        db.add(image)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error recording image for %s: %s", owner.id, str(e))
            raise DatabaseError(context={"owner_id": str(owner.id)})

        logger.info("Image recorded: %s (%s) by owner %s", image.id, image.path, owner.id)
        return image

    async def list_images(self, db: AsyncSession, owner: Owner, limit: int = 50) -> List[Image]:
        """Images uploaded by the owner, newest first."""
        try:
            result = await db.execute(
                select(Image)
                .where(Image.uploaded_by_owner_id == owner.id)
                .order_by(Image.created_at.desc())
                .limit(limit)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing images of %s: %s", owner.id, str(e))
            raise DatabaseError(context={"owner_id": str(owner.id)})

    async def get_image(self, db: AsyncSession, image_id: uuid.UUID) -> Image:
        try:
            image = await db.get(Image, image_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching image %s: %s", image_id, str(e))
            raise DatabaseError(context={"image_id": str(image_id)})
        if image is None:
            raise NotFoundError(resource="image", resource_id=str(image_id))
        return image

    async def attach_image(
        self, db: AsyncSession, owner: Owner, data: AttachmentCreate
    ) -> ImageAttachment:
        """
        Raises:
            NotFoundError: Unknown image or target
            ForbiddenError: Image or target belongs to another owner
        """
        image = await self.get_image(db, data.image_id)
        if image.uploaded_by_owner_id != owner.id:
            logger.warning("Owner %s denied attaching image %s", owner.id, image.id)
            raise ForbiddenError("You can only attach your own images")

        target = await SERVICES_BY_TARGET[data.target_type].get(db, data.target_id)
        if target.owner_id != owner.id:
            logger.warning(
                "Owner %s denied attaching to %s %s", owner.id, data.target_type.value, target.id
            )
            raise ForbiddenError("You can only attach images to your own content")

        attachment = ImageAttachment(
            image=image,
            target_type=data.target_type,
            target_id=data.target_id,
            sort_order=data.sort_order,
        )
        db.add(attachment)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error attaching image %s: %s", image.id, str(e))
            raise DatabaseError(context={"image_id": str(image.id)})

        logger.info(
            "Image %s attached to %s %s", image.id, data.target_type.value, data.target_id
        )
        return attachment

    async def delete_attachment(
        self, db: AsyncSession, owner: Owner, attachment_id: uuid.UUID
    ) -> None:
        """
        Raises:
            NotFoundError: Unknown attachment
            ForbiddenError: The attached image belongs to another owner
        """
        try:
            attachment = await db.get(ImageAttachment, attachment_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching attachment %s: %s", attachment_id, str(e))
            raise DatabaseError(context={"attachment_id": str(attachment_id)})
        if attachment is None:
            raise NotFoundError(resource="image attachment", resource_id=str(attachment_id))

        if attachment.image.uploaded_by_owner_id != owner.id:
            logger.warning("Owner %s denied deleting attachment %s", owner.id, attachment_id)
            raise ForbiddenError("You can only remove attachments of your own images")

        try:
            await db.delete(attachment)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting attachment %s: %s", attachment_id, str(e))
            raise DatabaseError(context={"attachment_id": str(attachment_id)})
        logger.info("Image attachment deleted: %s", attachment_id)


image_service = ImageService()
