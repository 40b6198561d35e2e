"""Grant aggregation: every statement that could apply to a principal.

Sources, in discovery order:

1. policies of the principal's own role assignments;
2. policies of role assignments held by the principal's groups;
3. resource permissions addressed to the principal or one of its groups;
4. resource shares addressed likewise.

Each source produces ``Grant`` values. One admission step drops expired
grants and resource grants recorded under another organization, since short
resource ids are only unique within one. Roles and policies outside the
evaluation organization are dropped when the admitted grants are expanded
into statements.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from authzcore.application.dto.decision_dto import Provenance, ScopedStatement
from authzcore.application.ports import GrantStoreReader
from authzcore.domain.entities import (
    Policy,
    Principal,
    ResourcePermission,
    ResourceShare,
    RoleAssignment,
)
from authzcore.domain.exceptions import ConfigurationError, ValidationError
from authzcore.domain.policy import (
    PolicyDocument,
    Statement,
    parse_condition_block,
    parse_policy_document,
)
from authzcore.domain.policy.matcher import has_wildcard, match
from authzcore.domain.value_objects import Arn, Effect, GrantSource, PrincipalType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleGrant:
    """Role reached directly or through a group."""

    assignment: RoleAssignment
    expires_at: datetime | None
    group_id: UUID | None = None

    @property
    def source(self) -> GrantSource:
        return GrantSource.GROUP if self.group_id is not None else GrantSource.ROLE

    @property
    def organization_id(self) -> str | None:
        # checked against the role when the grant is expanded
        return None


@dataclass(frozen=True)
class PermissionGrant:
    row: ResourcePermission
    source: GrantSource = GrantSource.RESOURCE_PERMISSION
    expires_at: datetime | None = None

    @property
    def organization_id(self) -> str:
        return self.row.organization_id


@dataclass(frozen=True)
class ShareGrant:
    row: ResourceShare
    source: GrantSource = GrantSource.RESOURCE_SHARE

    @property
    def expires_at(self) -> datetime | None:
        return self.row.expires_at

    @property
    def organization_id(self) -> str:
        return self.row.organization_id


Grant = RoleGrant | PermissionGrant | ShareGrant


@dataclass(frozen=True)
class PrincipalGrants:
    """Resource independent part of a principal's grants."""

    statements: tuple[ScopedStatement, ...]
    group_ids: tuple[UUID, ...] = ()


def resolve_organization(
    principal: Principal,
    resource_id: str | None = None,
    organization_id: str | None = None,
) -> str:
    """Organization a check runs in: the ARN's, else the explicit one, else the principal's."""
    if resource_id:
        arn = try_parse_arn(resource_id)
        if arn is not None and arn.organization_id and not has_wildcard(arn.organization_id):
            return arn.organization_id
    return organization_id or principal.organization_id


def try_parse_arn(resource_id: str) -> Arn | None:
    try:
        return Arn.parse(resource_id)
    except ValidationError:
        return None


def is_live(expires_at: datetime | None, now: datetime) -> bool:
    return expires_at is None or expires_at > now


def _holders(principal: Principal, group_ids: tuple[UUID, ...]) -> list[tuple[str, PrincipalType]]:
    return [(principal.id, principal.type), *((str(g), PrincipalType.GROUP) for g in group_ids)]


def _earliest(*values: datetime | None) -> datetime | None:
    present = [v for v in values if v is not None]
    return min(present) if present else None


class GrantAggregator:
    """Collects scoped statements for a principal from a grant store."""

    def __init__(self, store: GrantStoreReader) -> None:
        self._store = store
        self._documents: dict[tuple[UUID, str], PolicyDocument | None] = {}

    async def collect(
        self,
        principal: Principal,
        resource_id: str,
        organization_id: str | None = None,
        now: datetime | None = None,
    ) -> list[ScopedStatement]:
        """All statements that may apply to ``principal`` acting on ``resource_id``."""
        now = now or datetime.now(UTC)
        organization_id = resolve_organization(principal, resource_id, organization_id)
        principal_grants = await self.collect_principal_grants(principal, organization_id, now)
        resource_statements = await self.collect_resource_grants(
            principal, resource_id, organization_id, principal_grants.group_ids, now
        )
        return [*principal_grants.statements, *resource_statements]

    async def collect_principal_grants(
        self,
        principal: Principal,
        organization_id: str,
        now: datetime,
    ) -> PrincipalGrants:
        """Statements from role assignments and group role attachments."""
        if principal.organization_id != organization_id:
            logger.debug(
                "Principal %s belongs to %s, not %s; no grants",
                principal.id,
                principal.organization_id,
                organization_id,
            )
            return PrincipalGrants(statements=())

        grants: list[Grant] = [
            RoleGrant(assignment=a, expires_at=a.expires_at)
            for a in await self._store.list_role_assignments(principal.id, principal.type)
        ]
        group_ids: list[UUID] = []
        memberships = await self._store.list_group_memberships(principal.id, principal.type)
        for membership in memberships:
            if not membership.is_active(now):
                continue
            group_ids.append(membership.group_id)
            group_assignments = await self._store.list_role_assignments(
                str(membership.group_id), PrincipalType.GROUP
            )
            grants.extend(
                RoleGrant(
                    assignment=a,
                    expires_at=_earliest(membership.expires_at, a.expires_at),
                    group_id=membership.group_id,
                )
                for a in group_assignments
            )

        statements: list[ScopedStatement] = []
        for grant in self._admit(grants, now):
            statements.extend(await self._expand_role(grant, principal, organization_id))
        return PrincipalGrants(statements=tuple(statements), group_ids=tuple(group_ids))

    async def collect_resource_grants(
        self,
        principal: Principal,
        resource_id: str,
        organization_id: str,
        group_ids: tuple[UUID, ...] = (),
        now: datetime | None = None,
    ) -> list[ScopedStatement]:
        """Statements synthesized from permissions and shares on one resource."""
        now = now or datetime.now(UTC)
        if principal.organization_id != organization_id:
            return []
        if resolve_organization(principal, resource_id, organization_id) != organization_id:
            return []

        holders = _holders(principal, group_ids)
        grants: list[Grant] = []
        for row in await self._store.list_resource_permissions(resource_id):
            if (row.principal_id, row.principal_type) in holders:
                grants.append(PermissionGrant(row=row))
        for share in await self._store.list_resource_shares(resource_id):
            if (share.principal_id, share.principal_type) in holders:
                grants.append(ShareGrant(row=share))
        return self._synthesize_all(grants, organization_id, now)

    async def collect_scope_grants(
        self,
        principal: Principal,
        resource_scope: str,
        organization_id: str,
        group_ids: tuple[UUID, ...] = (),
        now: datetime | None = None,
    ) -> list[ScopedStatement]:
        """Statements from permissions and shares on any resource inside ``resource_scope``.

        Rows are read by holder rather than by resource, so a wildcard scope
        such as ``arn:...:resource/*`` picks up grants on each concrete
        resource it contains. Every synthesized statement keeps its row's
        own resource id.
        """
        now = now or datetime.now(UTC)
        if principal.organization_id != organization_id:
            return []

        grants: list[Grant] = []
        for holder_id, holder_type in _holders(principal, group_ids):
            for row in await self._store.list_principal_resource_permissions(holder_id, holder_type):
                if match(resource_scope, row.resource_id):
                    grants.append(PermissionGrant(row=row))
            for share in await self._store.list_principal_resource_shares(holder_id, holder_type):
                if match(resource_scope, share.resource_id):
                    grants.append(ShareGrant(row=share))
        return self._synthesize_all(grants, organization_id, now)

    def _synthesize_all(
        self, grants: list[Grant], organization_id: str, now: datetime
    ) -> list[ScopedStatement]:
        statements: list[ScopedStatement] = []
        for grant in self._admit(grants, now, organization_id):
            scoped = self._synthesize(grant)
            if scoped is not None:
                statements.append(scoped)
        return statements

    def _admit(
        self, grants: list[Grant], now: datetime, organization_id: str | None = None
    ) -> list[Grant]:
        admitted = []
        for grant in grants:
            if not is_live(grant.expires_at, now):
                logger.debug("Skipping expired %s grant (expired %s)", grant.source, grant.expires_at)
                continue
            if organization_id is not None and grant.organization_id not in (None, organization_id):
                logger.debug(
                    "Skipping %s grant from %s while evaluating in %s",
                    grant.source,
                    grant.organization_id,
                    organization_id,
                )
                continue
            admitted.append(grant)
        return admitted

    async def _expand_role(
        self,
        grant: RoleGrant,
        principal: Principal,
        organization_id: str,
    ) -> list[ScopedStatement]:
        assignment = grant.assignment
        role = await self._store.get_role(assignment.role_id)
        if role is None:
            logger.debug("Role %s not found; assignment %s ignored", assignment.role_id, assignment.id)
            return []
        if role.organization_id != organization_id:
            return []
        if not role.can_be_assumed_by(principal.type):
            logger.debug("Role %s cannot be assumed by %s", role.id, principal.type)
            return []
        try:
            overrides = parse_condition_block(assignment.conditions or None)
        except ConfigurationError as e:
            logger.warning("Dropping assignment %s with malformed conditions: %s", assignment.id, e)
            return []

        result: list[ScopedStatement] = []
        for policy in await self._store.list_role_policies(role.id):
            if policy.organization_id != organization_id or not policy.is_active:
                continue
            document = self._parse(policy)
            if document is None:
                continue
            for statement in document.statements:
                result.append(
                    ScopedStatement(
                        statement=statement.with_condition_overrides(overrides),
                        provenance=Provenance(
                            source=grant.source,
                            statement_index=statement.index,
                            policy_id=policy.id,
                            policy_name=policy.name,
                            role_id=role.id,
                            group_id=grant.group_id,
                            grant_id=assignment.id,
                            expires_at=grant.expires_at,
                        ),
                    )
                )
        return result

    def _parse(self, policy: Policy) -> PolicyDocument | None:
        key = (policy.id, policy.version)
        if key not in self._documents:
            try:
                self._documents[key] = parse_policy_document(policy.document)
            except ConfigurationError as e:
                logger.warning("Dropping malformed policy %s (%s): %s", policy.id, policy.name, e)
                self._documents[key] = None
        return self._documents[key]

    def _synthesize(self, grant: Grant) -> ScopedStatement | None:
        match grant:
            case PermissionGrant(row=row):
                if not row.permission:
                    logger.warning("Resource permission %s has no permission string", row.id)
                    return None
                effect, actions = row.effect, (row.permission,)
                grant_id, expires_at, resource_id = row.id, None, row.resource_id
            case ShareGrant(row=share):
                effect, actions = Effect.ALLOW, share.access_level.actions
                grant_id, expires_at, resource_id = share.id, share.expires_at, share.resource_id
            case _:
                return None
        return ScopedStatement(
            statement=Statement(index=0, effect=effect, actions=actions, resources=(resource_id,)),
            provenance=Provenance(
                source=grant.source,
                statement_index=0,
                grant_id=grant_id,
                expires_at=expires_at,
            ),
        )
