"""Unit tests for bulk evaluation."""

import pytest

from authzcore.application.dto.decision_dto import REASON_EVALUATION_ERROR
from authzcore.application.services.decision_engine import DecisionEngine
from authzcore.application.use_cases.access import BulkEvaluateUseCase
from authzcore.domain.exceptions import ValidationError
from authzcore.domain.value_objects import AccessLevel, CollaboratorRole, Effect

from tests.conftest import FakeGrantStore, allow, make_policy, make_uow_factory, user

RESOURCE_A = "arn:monkeys:iam:org1:resource/a"
RESOURCE_B = "arn:monkeys:iam:org1:resource/b"


@pytest.mark.asyncio
async def test_results_in_request_order(store: FakeGrantStore) -> None:
    store.grant(make_policy(allow("resource:Read", "*")))

    decisions = await BulkEvaluateUseCase(make_uow_factory(store)).execute(
        user(), [("resource:Read", RESOURCE_A), ("resource:Delete", RESOURCE_A)]
    )

    assert [d.effect for d in decisions] == [Effect.ALLOW, Effect.DENY]


@pytest.mark.asyncio
async def test_single_resource_policy_allows_only_named_action(store: FakeGrantStore) -> None:
    store.grant(make_policy(allow("resource:Read", "resource/123")))

    decisions = await BulkEvaluateUseCase(make_uow_factory(store)).execute(
        user(), [("resource:Read", "resource/123"), ("resource:Delete", "resource/123")]
    )

    assert [d.effect for d in decisions] == [Effect.ALLOW, Effect.DENY]


@pytest.mark.asyncio
async def test_principal_grants_read_once(store: FakeGrantStore) -> None:
    store.grant(make_policy(allow("resource:Read", "*")))
    pairs = [("resource:Read", RESOURCE_A), ("resource:Write", RESOURCE_A), ("resource:Read", RESOURCE_B)]

    await BulkEvaluateUseCase(make_uow_factory(store)).execute(user(), pairs)

    assert store.calls["list_group_memberships"] == 1
    assert store.calls["list_resource_shares"] == 2


@pytest.mark.asyncio
async def test_resource_grants_do_not_leak_between_pairs(store: FakeGrantStore) -> None:
    store.add_share(RESOURCE_A, AccessLevel.READ)

    decisions = await BulkEvaluateUseCase(make_uow_factory(store)).execute(
        user(), [("resource:Read", RESOURCE_A), ("resource:Read", RESOURCE_B)]
    )

    assert [d.allowed for d in decisions] == [True, False]


@pytest.mark.asyncio
async def test_bulk_matches_single_evaluation(store: FakeGrantStore) -> None:
    store.grant(make_policy(allow("resource:*", RESOURCE_A)))
    store.add_collaborator("9", "user-1", CollaboratorRole.CO_AUTHOR)
    pairs = [
        ("resource:Read", RESOURCE_A),
        ("resource:Read", RESOURCE_B),
        ("content:Update", "arn:monkeys:cms:org1:content/9"),
        ("content:Delete", "arn:monkeys:cms:org1:content/9"),
    ]

    decisions = await BulkEvaluateUseCase(make_uow_factory(store)).execute(user(), pairs)

    engine = DecisionEngine(store)
    for (action, resource), decision in zip(pairs, decisions, strict=True):
        single = await engine.evaluate(user(), action, resource)
        assert decision.effect == single.effect


@pytest.mark.asyncio
async def test_store_failure_denies_every_pair(store: FakeGrantStore) -> None:
    store.fail = True

    decisions = await BulkEvaluateUseCase(make_uow_factory(store)).execute(
        user(), [("resource:Read", RESOURCE_A), ("resource:Read", RESOURCE_B)]
    )

    assert [d.reason for d in decisions] == [REASON_EVALUATION_ERROR] * 2


@pytest.mark.asyncio
async def test_empty_request(store: FakeGrantStore) -> None:
    assert await BulkEvaluateUseCase(make_uow_factory(store)).execute(user(), []) == []


@pytest.mark.asyncio
async def test_pair_without_action_rejected(store: FakeGrantStore) -> None:
    with pytest.raises(ValidationError):
        await BulkEvaluateUseCase(make_uow_factory(store)).execute(user(), [("", RESOURCE_A)])
