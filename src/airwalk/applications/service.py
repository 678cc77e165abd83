"""Town halls and the registration application flow."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select

from airwalk.auth.service import get_user_by_email, register_from_application
from airwalk.config import get_settings
from airwalk.db.models import Application, TownHall
from airwalk.errors import ConflictError, NotFoundError, ValidationError
from airwalk.timeutils import utcnow

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def list_town_halls(db: AsyncSession) -> Sequence[TownHall]:
    """All town halls, alphabetically."""
    result = await db.execute(select(TownHall).order_by(TownHall.name.asc(), TownHall.id.asc()))
    return result.scalars().all()


async def apply(
    db: AsyncSession,
    first_name: str,
    last_name: str,
    email: str,
    dni: str,
    phone: str,
    town_hall_id: int,
) -> Application:
    """
    Store a registration application.

    When ``auto_register_applications`` is enabled the application is turned
    into an account straight away (and therefore no longer exists afterwards).

    Raises:
        ValidationError: A required field is blank.
        ConflictError: The email already belongs to a user.
        NotFoundError: Unknown town hall.
    """
    fields = {"first_name": first_name, "last_name": last_name, "email": email, "dni": dni, "phone": phone}
    missing = [name for name, value in fields.items() if not value or not value.strip()]
    if missing:
        msg = f"Missing required fields: {', '.join(missing)}"
        raise ValidationError(msg)

    email = email.lower().strip()
    if await get_user_by_email(db, email) is not None:
        msg = "Email already registered"
        raise ConflictError(msg)
    if await db.get(TownHall, town_hall_id) is None:
        msg = "Town hall not found"
        raise NotFoundError(msg)

    application = Application(
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        email=email,
        dni=dni.strip().upper(),
        phone=phone.strip(),
        town_hall_id=town_hall_id,
        created_at=utcnow(),
    )
    db.add(application)
    await db.flush()
    logger.info("application_received", application_id=application.id, town_hall_id=town_hall_id)

    if get_settings().auto_register_applications:
        await register_from_application(db, email)
    return application


async def delete_application(db: AsyncSession, application_id: int) -> None:
    """
    Delete an application.

    Raises:
        NotFoundError: No application with that id.
    """
    result = await db.execute(delete(Application).where(Application.id == application_id))
    if result.rowcount == 0:
        msg = "Application not found"
        raise NotFoundError(msg)
    logger.info("application_deleted", application_id=application_id)
