"""Unit tests for the user / company repository"""

import pytest
from freee_notifier.domain.exceptions import NotLinkedError
from freee_notifier.domain.models import CompanyRef
from freee_notifier.infrastructure.database.models import User
from freee_notifier.infrastructure.database.repositories import UserRepository


def test_get_company_ref_for_linked_user(db, linked_user):
    company = UserRepository(db).get_company_ref(linked_user)

    assert company == CompanyRef(company_id=1001, access_token="token-1001")


def test_get_company_ref_unknown_user(db):
    with pytest.raises(NotLinkedError) as exc_info:
        UserRepository(db).get_company_ref("U_missing")

    assert exc_info.value.line_user_id == "U_missing"


def test_get_company_ref_user_without_company(db):
    db.add(User(line_user_id="U_bare"))
    db.commit()

    with pytest.raises(NotLinkedError):
        UserRepository(db).get_company_ref("U_bare")


def test_relinking_switches_active_company(db, linked_user):
    repository = UserRepository(db)

    user = repository.link_company(linked_user, company_id=2002, access_token="token-2002")
    db.commit()

    assert len(user.companies) == 2
    assert repository.get_company_ref(linked_user).company_id == 2002


def test_list_line_user_ids(db):
    repository = UserRepository(db)
    repository.link_company("U_b", company_id=1, access_token="a")
    repository.link_company("U_a", company_id=2, access_token="b")
    db.commit()

    assert sorted(repository.list_line_user_ids()) == ["U_a", "U_b"]


def test_delete_user_removes_companies(db, linked_user):
    repository = UserRepository(db)

    assert repository.delete_user(linked_user) is True
    db.commit()

    assert repository.get_by_line_user_id(linked_user) is None
    assert repository.delete_user(linked_user) is False
