"""Data access layer for users and linked companies"""

from typing import List, Optional
from sqlalchemy.orm import Session
from freee_notifier.infrastructure.database.models import User, Company
from freee_notifier.domain.models import CompanyRef
from freee_notifier.domain.exceptions import NotLinkedError


class UserRepository:
    """Repository for LINE users and their active freee company"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_line_user_id(self, line_user_id: str) -> Optional[User]:
        """Fetch user by LINE user id"""
        return (
            self.db.query(User)
            .filter(User.line_user_id == line_user_id)
            .first()
        )

    def get_company_ref(self, line_user_id: str) -> CompanyRef:
        """
        Resolve the company a LINE user reports on.

        Raises:
            NotLinkedError: No user record, or the user has no active company
        """
        user = self.get_by_line_user_id(line_user_id)
        company = user.active_company if user is not None else None
        if company is None:
            raise NotLinkedError(line_user_id)

        return CompanyRef(company_id=company.company_id, access_token=company.access_token)

    def list_line_user_ids(self) -> List[str]:
        """All registered LINE users, oldest first"""
        rows = self.db.query(User.line_user_id).order_by(User.created_at, User.line_user_id).all()
        return [row[0] for row in rows]

    def link_company(
        self,
        line_user_id: str,
        company_id: int,
        access_token: str,
        refresh_token: str | None = None,
    ) -> User:
        """Create the user if needed and make the company their active one"""
        user = self.get_by_line_user_id(line_user_id)
        if user is None:
            user = User(line_user_id=line_user_id)
            self.db.add(user)

        for company in user.companies:
            company.is_active = False

        user.companies.append(
            Company(
                company_id=company_id,
                access_token=access_token,
                refresh_token=refresh_token,
                is_active=True,
            )
        )
        self.db.flush()  # Get IDs without committing
        return user

    def delete_user(self, line_user_id: str) -> bool:
        """Remove a user and their companies; False if there was nothing to delete"""
        user = self.get_by_line_user_id(line_user_id)
        if user is None:
            return False
        self.db.delete(user)
        self.db.flush()
        return True
