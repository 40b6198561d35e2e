"""Unit tests for EvaluateAccessUseCase."""

import pytest

from authzcore.application.dto.decision_dto import REASON_EVALUATION_ERROR
from authzcore.application.use_cases.access import EvaluateAccessUseCase
from authzcore.domain.exceptions import ValidationError
from authzcore.domain.value_objects import AccessLevel

from tests.conftest import OTHER_ORG, FakeGrantStore, allow, make_policy, make_uow_factory, user

RESOURCE = "arn:monkeys:iam:org1:resource/123"


@pytest.mark.asyncio
async def test_evaluate_allows(store: FakeGrantStore) -> None:
    store.grant(make_policy(allow("resource:Read", "*")))

    decision = await EvaluateAccessUseCase(make_uow_factory(store)).execute(
        user(), "resource:Read", RESOURCE
    )

    assert decision.allowed


@pytest.mark.asyncio
async def test_store_failure_degrades_to_deny(store: FakeGrantStore) -> None:
    store.grant(make_policy(allow("*", "*")))
    store.fail = True

    decision = await EvaluateAccessUseCase(make_uow_factory(store)).execute(
        user(), "resource:Read", RESOURCE
    )

    assert not decision.allowed
    assert decision.reason == REASON_EVALUATION_ERROR


@pytest.mark.asyncio
@pytest.mark.parametrize(("action", "resource"), [("", RESOURCE), ("resource:Read", "")])
async def test_missing_action_or_resource_rejected(
    store: FakeGrantStore, action: str, resource: str
) -> None:
    with pytest.raises(ValidationError):
        await EvaluateAccessUseCase(make_uow_factory(store)).execute(user(), action, resource)


@pytest.mark.asyncio
async def test_short_resource_id_grants_stay_in_their_organization(store: FakeGrantStore) -> None:
    store.add_share("resource/123", AccessLevel.ADMIN, organization_id=OTHER_ORG)
    store.add_permission("resource/123", "resource:Delete", organization_id=OTHER_ORG)
    store.add_permission("resource/123", "resource:Read")
    use_case = EvaluateAccessUseCase(make_uow_factory(store))

    read = await use_case.execute(user(), "resource:Read", "resource/123")
    delete = await use_case.execute(user(), "resource:Delete", "resource/123")

    assert read.allowed
    assert not delete.allowed
