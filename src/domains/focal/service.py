# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Focal person account service.

A municipality has at most one focal person. The account's address is
its geography, stored as ``barangay, municipality, province``. Older
focal accounts were bound to a CDC instead, so the CDC location also
counts when checking a municipality.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.tenant.directory import IncompleteAddressError, parse_address
from src.infrastructure.database.models.tenant import Cdc, CdcLocation
from src.infrastructure.database.models.user import User, UserOtherInfo
from src.models.common import Role
from src.models.focal import FocalAccountCreateRequest, FocalAccountResponse
from src.models.person import normalize_place

logger = logging.getLogger(__name__)


class FocalServiceError(Exception):
    """Base exception for focal service errors."""

    pass


class FocalExistsError(FocalServiceError):
    """Raised when the municipality already has a focal person."""

    pass


class UsernameTakenError(FocalServiceError):
    """Raised when the username is already in use."""

    pass


class FocalService:
    """Service for focal person accounts.

    Account creation is a provisioning operation; the caller is expected
    to have been authorized by the administrative surface.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize focal service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def find_focal(self, municipality: str) -> FocalAccountResponse | None:
        """Find the focal person of a municipality.

        Args:
            municipality: Municipality name; case and spacing are ignored.

        Returns:
            The existing account, or None.
        """
        wanted = normalize_place(municipality)
        if not wanted:
            return None

        result = await self.db.execute(
            select(User, CdcLocation.municipality)
            .outerjoin(Cdc, Cdc.cdc_id == User.cdc_id)
            .outerjoin(CdcLocation, CdcLocation.location_id == Cdc.location_id)
            .where(User.type == Role.FOCAL.value)
        )

        for user, cdc_municipality in result.all():
            place = self._address_municipality(user)
            if place is None:
                place = cdc_municipality
            if place is not None and normalize_place(place) == wanted:
                return FocalAccountResponse(id=user.id, username=user.username, municipality=place)
        return None

    async def focal_exists(self, municipality: str) -> bool:
        """Check whether a municipality already has a focal person."""
        return await self.find_focal(municipality) is not None

    async def create_focal_account(self, request: FocalAccountCreateRequest) -> FocalAccountResponse:
        """Create the focal person account of a municipality.

        The uniqueness checks and both inserts run in one transaction.

        Args:
            request: Credentials and place of the focal person.

        Returns:
            The created account.

        Raises:
            UsernameTakenError: If the username is in use.
            FocalExistsError: If the municipality already has a focal person.
            FocalServiceError: If the write fails. Nothing is persisted.
        """
        try:
            result = await self.db.execute(select(User.id).where(User.username == request.username))
            if result.scalar_one_or_none() is not None:
                raise UsernameTakenError(f"Username {request.username!r} already exists")

            existing = await self.find_focal(request.municipality)
            if existing is not None:
                raise FocalExistsError(
                    f"A focal person already exists in {request.municipality}: {existing.username}"
                )

            user = User(
                username=request.username,
                password=request.password_hash,
                type=Role.FOCAL.value,
            )
            self.db.add(user)
            await self.db.flush()

            self.db.add(UserOtherInfo(user_id=user.id, address=request.address))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Focal account creation failed for %s: %s", request.municipality, str(e))
            raise FocalServiceError("Failed to create focal account") from e
        except FocalServiceError:
            await self.db.rollback()
            raise

        logger.info("Focal account created: %s (%s)", user.id, request.municipality)

        return FocalAccountResponse(id=user.id, username=user.username, municipality=request.municipality)

    def _address_municipality(self, user: User) -> str | None:
        if user.other_info is None or not user.other_info.address:
            return None
        try:
            return parse_address(user.other_info.address).municipality
        except IncompleteAddressError:
            logger.warning("Focal user %s has a malformed address", user.id)
            return None
