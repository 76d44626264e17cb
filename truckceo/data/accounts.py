"""
User profiles and business records.

The identity provider (email/password or Google sign-in) is external; this
module only receives the verified ``uid`` and email and keeps the
``users/{uid}`` profile that ties an identity to a business.
"""

from datetime import datetime, timezone
from typing import Optional

from .document_store import DocumentStore
from .errors import DocumentNotFoundError
from .gateway import EMPLOYEES, business_path
from .seed_data import migrate_initial_data
from ..schemas.entities import Business, Role, UserProfile
from ..utils.logger import get_logger

logger = get_logger()


def profile_path(uid: str) -> str:
    return f"users/{uid}"


class AccountService:
    def __init__(self, store: DocumentStore):
        self.store = store

    def get_profile(self, uid: str) -> Optional[UserProfile]:
        data = self.store.get(profile_path(uid))
        return UserProfile.model_validate(data) if data is not None else None

    def get_business(self, business_id: str) -> Optional[Business]:
        data = self.store.get(business_path(business_id))
        return Business.model_validate(data) if data is not None else None

    def register_owner(self, uid: str, email: Optional[str], display_name: Optional[str] = None,
                       seed_demo: bool = True) -> UserProfile:
        """Create a business and its owner profile for a new identity.

        Returns the existing profile untouched when ``uid`` is already
        registered, so a repeated federated sign-in does not create a second
        business.
        """
        existing = self.get_profile(uid)
        if existing is not None:
            return existing

        display_name = display_name or "Business Owner"
        business_id = f"biz_{uid}"
        now = datetime.now(timezone.utc).isoformat()

        business = Business(
            name=f"{display_name}'s Business",
            owner_id=uid,
            created_at=now,
        )
        self.store.set(business_path(business_id), business.model_dump(mode="json", by_alias=True))

        profile = UserProfile(
            email=email,
            display_name=display_name,
            role=Role.OWNER,
            business_id=business_id,
        )
        self.store.set(profile_path(uid), {**profile.model_dump(mode="json", by_alias=True), "createdAt": now})
        logger.info(f"Registered owner {uid} with business {business_id}")

        if seed_demo:
            migrate_initial_data(self.store, business_id)
        return profile

    def link_team_member(self, uid: str, email: Optional[str], display_name: str,
                         business_id: str, employee_id: str) -> UserProfile:
        """Give an existing employee record a login.

        Raises:
            DocumentNotFoundError: the employee does not exist.
        """
        employee_path = f"{business_path(business_id)}/{EMPLOYEES}/{employee_id}"
        if self.store.get(employee_path) is None:
            raise DocumentNotFoundError(employee_path)

        profile = UserProfile(
            email=email,
            display_name=display_name,
            role=Role.MEMBER,
            business_id=business_id,
            employee_id=employee_id,
        )
        self.store.set(profile_path(uid), {
            **profile.model_dump(mode="json", by_alias=True),
            "createdAt": datetime.now(timezone.utc).isoformat(),
        })
        self.store.update(employee_path, {"userId": uid, "email": email})
        logger.info(f"Linked {uid} to employee {employee_id} in {business_id}")
        return profile
