"""
Hierarchy resolver.

Walks the reseller graph (investor -> advisor -> office -> distributor)
with a bounded number of lookups. Every call reads current pointers;
nothing is cached because administrators may reassign edges at any time.
"""

from typing import NamedTuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import ActorTier
from app.models.profile import Profile
from app.repositories.profile_repository import ProfileRepository


class OwnerChain(NamedTuple):
    """Effective managers of an owner, most specific first."""

    advisor_id: int | None
    office_id: int | None
    distributor_id: int | None

    def manager_ids(self) -> list[int]:
        """Non-empty manager ids, advisor first."""
        return [i for i in (self.advisor_id, self.office_id, self.distributor_id) if i]


class HierarchyResolver:
    """Resolves access rights along the reseller hierarchy."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize resolver."""
        self.session = session
        self.profile_repo = ProfileRepository(session)

    async def resolve_access(self, actor_id: int, owner_id: int) -> bool:
        """
        Check if actor may access records owned by owner_id.

        Args:
            actor_id: Acting profile ID
            owner_id: Owner profile ID of the subject record

        Returns:
            True if access is granted, False otherwise (including
            unknown actor)
        """
        if actor_id == owner_id:
            return True

        actor = await self.profile_repo.get_by_id(actor_id)
        if actor is None:
            return False

        return await self.can_access(actor, owner_id)

    async def can_access(self, actor: Profile, subject_owner_id: int) -> bool:
        """
        Check if a loaded actor may access a subject owner.

        Rules, first match wins:
        1. self
        2. admin
        3. advisor of the subject
        4. office of the subject, or of the subject's advisor
        5. distributor of the subject, of the subject's office, or of the
           subject's advisor's office

        Missing subject or intermediate records deny access.

        Args:
            actor: Acting profile
            subject_owner_id: Owner profile ID

        Returns:
            True if access is granted
        """
        if actor.id == subject_owner_id:
            return True

        tier = ActorTier.parse(actor.tier)
        if tier is ActorTier.ADMIN:
            return True

        if tier not in (ActorTier.ADVISOR, ActorTier.OFFICE, ActorTier.DISTRIBUTOR):
            return False

        subject = await self.profile_repo.get_by_id(subject_owner_id)
        if subject is None:
            logger.debug(
                "Access denied: subject not found",
                extra={"actor_id": actor.id, "subject_id": subject_owner_id},
            )
            return False

        if tier is ActorTier.ADVISOR:
            return subject.advisor_id == actor.id

        if tier is ActorTier.OFFICE:
            if subject.office_id == actor.id:
                return True
            advisor = await self._get(subject.advisor_id)
            return advisor is not None and advisor.office_id == actor.id

        # Distributor
        if subject.distributor_id == actor.id:
            return True

        office = await self._get(subject.office_id)
        if office is not None and office.distributor_id == actor.id:
            return True

        advisor = await self._get(subject.advisor_id)
        if advisor is None:
            return False
        advisor_office = await self._get(advisor.office_id)
        return advisor_office is not None and advisor_office.distributor_id == actor.id

    async def resolve_owner_chain(self, owner_id: int) -> OwnerChain:
        """
        Resolve the effective managers of an owner.

        The most specific pointer wins: when the owner has an advisor, the
        office and distributor are taken from the advisor's chain; direct
        office/distributor pointers are used only when the more specific
        link is missing.

        Args:
            owner_id: Owner profile ID

        Returns:
            OwnerChain (all None for unknown owners)
        """
        subject = await self.profile_repo.get_by_id(owner_id)
        if subject is None:
            return OwnerChain(None, None, None)

        advisor = await self._get(subject.advisor_id)

        office_id = subject.office_id
        if advisor is not None and advisor.office_id:
            office_id = advisor.office_id

        office = await self._get(office_id)

        distributor_id = subject.distributor_id
        if office is not None and office.distributor_id:
            distributor_id = office.distributor_id
        elif advisor is not None and advisor.distributor_id:
            distributor_id = advisor.distributor_id

        return OwnerChain(
            advisor_id=advisor.id if advisor is not None else None,
            office_id=office.id if office is not None else None,
            distributor_id=distributor_id,
        )

    async def _get(self, profile_id: int | None) -> Profile | None:
        """Load a profile, tolerating empty pointers."""
        if not profile_id:
            return None
        return await self.profile_repo.get_by_id(profile_id)
