"""Pytest fixtures for authzcore tests."""

from __future__ import annotations

from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

import pytest

from authzcore.domain.entities import (
    ContentCollaborator,
    GroupMembership,
    Policy,
    Principal,
    ResourcePermission,
    ResourceShare,
    Role,
    RoleAssignment,
)
from authzcore.domain.value_objects import (
    AccessLevel,
    CollaboratorRole,
    Effect,
    PolicyStatus,
    PrincipalType,
)

ORG = "org1"
OTHER_ORG = "org2"


# --- Policy document helpers ---


def statement(
    effect: str,
    actions: str | list[str],
    resources: str | list[str],
    condition: dict[str, Any] | None = None,
) -> dict[str, Any]:
    raw: dict[str, Any] = {"Effect": effect, "Action": actions, "Resource": resources}
    if condition is not None:
        raw["Condition"] = condition
    return raw


def allow(actions, resources, condition=None) -> dict[str, Any]:
    return statement("Allow", actions, resources, condition)


def deny(actions, resources, condition=None) -> dict[str, Any]:
    return statement("Deny", actions, resources, condition)


def make_policy(
    *statements: dict[str, Any],
    organization_id: str = ORG,
    name: str = "policy",
    status: PolicyStatus = PolicyStatus.ACTIVE,
    is_system_policy: bool = False,
    document: str | dict[str, Any] | None = None,
) -> Policy:
    return Policy(
        id=uuid4(),
        organization_id=organization_id,
        name=name,
        version="1.0.0",
        document=document if document is not None else {"Version": "2024-01-01", "Statement": list(statements)},
        status=status,
        is_system_policy=is_system_policy,
    )


def user(user_id: str = "user-1", organization_id: str = ORG) -> Principal:
    return Principal(id=user_id, type=PrincipalType.USER, organization_id=organization_id)


# --- Fake grant store ---


class FakeGrantStore:
    """In-memory grant store with helpers to seed grants."""

    def __init__(self) -> None:
        self.roles: dict[UUID, Role] = {}
        self.policies: dict[UUID, Policy] = {}
        self.role_policies: dict[UUID, list[UUID]] = {}
        self.assignments: list[RoleAssignment] = []
        self.memberships: list[GroupMembership] = []
        self.permissions: list[ResourcePermission] = []
        self.shares: list[ResourceShare] = []
        self.collaborators: list[ContentCollaborator] = []
        self.content_owners: dict[str, str] = {}
        self.calls: Counter[str] = Counter()
        self.fail = False

    def _record(self, name: str) -> None:
        self.calls[name] += 1
        if self.fail:
            raise ConnectionError("grant store unavailable")

    # Seeding

    def add_role(
        self,
        *policies: Policy,
        organization_id: str = ORG,
        name: str = "role",
        assumable_by: frozenset[PrincipalType] | None = None,
    ) -> Role:
        role = Role(id=uuid4(), organization_id=organization_id, name=name)
        if assumable_by is not None:
            role.assumable_by = assumable_by
        self.roles[role.id] = role
        self.role_policies[role.id] = []
        for policy in policies:
            self.add_policy(policy)
            self.role_policies[role.id].append(policy.id)
        return role

    def add_policy(self, policy: Policy) -> Policy:
        self.policies[policy.id] = policy
        return policy

    def assign(
        self,
        role: Role,
        principal_id: str = "user-1",
        principal_type: PrincipalType = PrincipalType.USER,
        expires_at: datetime | None = None,
        conditions: dict[str, Any] | None = None,
    ) -> RoleAssignment:
        assignment = RoleAssignment(
            id=uuid4(),
            role_id=role.id,
            principal_id=principal_id,
            principal_type=principal_type,
            expires_at=expires_at,
            conditions=conditions or {},
        )
        self.assignments.append(assignment)
        return assignment

    def grant(self, *policies: Policy, principal_id: str = "user-1", **kwargs: Any) -> Role:
        """Role with ``policies`` assigned to a user in one step."""
        role = self.add_role(*policies)
        self.assign(role, principal_id, **kwargs)
        return role

    def add_membership(
        self,
        group_id: UUID,
        principal_id: str = "user-1",
        principal_type: PrincipalType = PrincipalType.USER,
        expires_at: datetime | None = None,
    ) -> GroupMembership:
        membership = GroupMembership(
            id=uuid4(),
            group_id=group_id,
            principal_id=principal_id,
            principal_type=principal_type,
            expires_at=expires_at,
        )
        self.memberships.append(membership)
        return membership

    def add_permission(
        self,
        resource_id: str,
        permission: str,
        principal_id: str = "user-1",
        principal_type: PrincipalType = PrincipalType.USER,
        effect: Effect = Effect.ALLOW,
        organization_id: str = ORG,
    ) -> ResourcePermission:
        row = ResourcePermission(
            id=uuid4(),
            resource_id=resource_id,
            organization_id=organization_id,
            principal_id=principal_id,
            principal_type=principal_type,
            permission=permission,
            effect=effect,
        )
        self.permissions.append(row)
        return row

    def add_share(
        self,
        resource_id: str,
        access_level: AccessLevel,
        principal_id: str = "user-1",
        principal_type: PrincipalType = PrincipalType.USER,
        expires_at: datetime | None = None,
        organization_id: str = ORG,
    ) -> ResourceShare:
        share = ResourceShare(
            id=uuid4(),
            resource_id=resource_id,
            organization_id=organization_id,
            principal_id=principal_id,
            principal_type=principal_type,
            access_level=access_level,
            expires_at=expires_at,
        )
        self.shares.append(share)
        return share

    def add_collaborator(self, content_id: str, user_id: str, role: CollaboratorRole) -> None:
        self.collaborators.append(ContentCollaborator(content_id=content_id, user_id=user_id, role=role))

    # GrantStoreReader

    async def list_role_assignments(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[RoleAssignment]:
        self._record("list_role_assignments")
        return [
            a
            for a in self.assignments
            if a.principal_id == principal_id and a.principal_type == principal_type
        ]

    async def list_group_memberships(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[GroupMembership]:
        self._record("list_group_memberships")
        return [
            m
            for m in self.memberships
            if m.principal_id == principal_id and m.principal_type == principal_type
        ]

    async def get_role(self, role_id: UUID) -> Role | None:
        self._record("get_role")
        return self.roles.get(role_id)

    async def list_role_policies(self, role_id: UUID) -> list[Policy]:
        self._record("list_role_policies")
        return [
            self.policies[p]
            for p in self.role_policies.get(role_id, [])
            if p in self.policies
        ]

    async def list_resource_permissions(self, resource_id: str) -> list[ResourcePermission]:
        self._record("list_resource_permissions")
        return [p for p in self.permissions if p.resource_id == resource_id]

    async def list_resource_shares(self, resource_id: str) -> list[ResourceShare]:
        self._record("list_resource_shares")
        return [s for s in self.shares if s.resource_id == resource_id]

    async def list_principal_resource_permissions(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[ResourcePermission]:
        self._record("list_principal_resource_permissions")
        return [
            p
            for p in self.permissions
            if p.principal_id == principal_id and p.principal_type == principal_type
        ]

    async def list_principal_resource_shares(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[ResourceShare]:
        self._record("list_principal_resource_shares")
        return [
            s
            for s in self.shares
            if s.principal_id == principal_id and s.principal_type == principal_type
        ]

    async def get_content_collaborator_role(
        self, content_id: str, user_id: str
    ) -> CollaboratorRole | None:
        self._record("get_content_collaborator_role")
        for c in self.collaborators:
            if c.content_id == content_id and c.user_id == user_id:
                return c.role
        return None

    async def get_content_owner(self, content_id: str) -> str | None:
        self._record("get_content_owner")
        return self.content_owners.get(content_id)


class FakePolicyRepository:
    """In-memory policy repository sharing the grant store's tables."""

    def __init__(self, store: FakeGrantStore) -> None:
        self._store = store
        self.versions: list[tuple[UUID, str, dict[str, Any]]] = []

    async def get_by_id(self, policy_id: UUID) -> Policy | None:
        return self._store.policies.get(policy_id)

    async def update_document(
        self, policy_id: UUID, document: dict[str, Any], version: str
    ) -> None:
        policy = self._store.policies[policy_id]
        policy.document = document
        policy.version = version
        self.versions.append((policy_id, version, document))

    async def attach_to_role(self, role_id: UUID, policy_id: UUID, attached_by: str | None) -> None:
        attached = self._store.role_policies.setdefault(role_id, [])
        if policy_id not in attached:
            attached.append(policy_id)

    async def detach_from_role(self, role_id: UUID, policy_id: UUID) -> bool:
        attached = self._store.role_policies.get(role_id, [])
        if policy_id not in attached:
            return False
        attached.remove(policy_id)
        return True

    async def delete(self, policy_id: UUID) -> None:
        self._store.policies.pop(policy_id, None)
        for attached in self._store.role_policies.values():
            if policy_id in attached:
                attached.remove(policy_id)


# --- Fake UnitOfWork ---


class FakeUnitOfWork:
    """In-memory Unit of Work over a FakeGrantStore."""

    def __init__(self, store: FakeGrantStore | None = None) -> None:
        self.grants = store or FakeGrantStore()
        self.policies = FakePolicyRepository(self.grants)
        self.committed = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        pass


def make_uow_factory(store: FakeGrantStore):
    """Factory yielding a FakeUnitOfWork over ``store`` per call."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUnitOfWork]:
        yield FakeUnitOfWork(store)

    return _factory


# --- Fixtures ---


@pytest.fixture
def store() -> FakeGrantStore:
    """Fresh in-memory grant store for each test."""
    return FakeGrantStore()


@pytest.fixture
def uow_factory(store: FakeGrantStore):
    """Factory returning async context manager with FakeUnitOfWork over ``store``."""
    return make_uow_factory(store)
