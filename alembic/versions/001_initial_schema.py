"""Initial schema - policies, roles, assignments, groups, resource grants.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "policies",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("organization_id", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("version", sa.String(50), nullable=False, server_default="1.0.0"),
        sa.Column("document", postgresql.JSONB(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("is_system_policy", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('active', 'suspended')", name="ck_policies_status"),
    )
    op.create_index("ix_policies_organization", "policies", ["organization_id"])

    op.create_table(
        "policy_versions",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("policy_id", sa.UUID(), sa.ForeignKey("policies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version", sa.String(50), nullable=False),
        sa.Column("document", postgresql.JSONB(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_policy_versions_policy", "policy_versions", ["policy_id", "version"], unique=True)

    op.create_table(
        "roles",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("organization_id", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "assumable_by",
            postgresql.ARRAY(sa.String(32)),
            nullable=False,
            server_default=sa.text("ARRAY['user', 'service_account']::varchar[]"),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_roles_organization_name", "roles", ["organization_id", "name"], unique=True)

    op.create_table(
        "role_policies",
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("policy_id", sa.UUID(), sa.ForeignKey("policies.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("attached_by", sa.String(255), nullable=True),
        sa.Column("attached_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "role_assignments",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("roles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("principal_id", sa.String(255), nullable=False),
        sa.Column("principal_type", sa.String(32), nullable=False),
        sa.Column("assigned_by", sa.String(255), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("conditions", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
    )
    op.create_index(
        "ix_role_assignments_principal", "role_assignments", ["principal_id", "principal_type"]
    )

    op.create_table(
        "groups",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("organization_id", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "group_memberships",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("group_id", sa.UUID(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("principal_id", sa.String(255), nullable=False),
        sa.Column("principal_type", sa.String(32), nullable=False),
        sa.Column("role_in_group", sa.String(50), nullable=False, server_default="member"),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_group_memberships_principal", "group_memberships", ["principal_id", "principal_type"]
    )

    op.create_table(
        "resource_permissions",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("resource_id", sa.String(1024), nullable=False),
        sa.Column("organization_id", sa.String(255), nullable=False),
        sa.Column("principal_id", sa.String(255), nullable=False),
        sa.Column("principal_type", sa.String(32), nullable=False),
        sa.Column("permission", sa.String(255), nullable=False),
        sa.Column("effect", sa.String(10), nullable=False, server_default="Allow"),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("effect IN ('Allow', 'Deny')", name="ck_resource_permissions_effect"),
    )
    op.create_index(
        "ix_resource_permissions_resource", "resource_permissions", ["organization_id", "resource_id"]
    )
    op.create_index(
        "ix_resource_permissions_principal", "resource_permissions", ["principal_id", "principal_type"]
    )

    op.create_table(
        "resource_shares",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("resource_id", sa.String(1024), nullable=False),
        sa.Column("organization_id", sa.String(255), nullable=False),
        sa.Column("principal_id", sa.String(255), nullable=False),
        sa.Column("principal_type", sa.String(32), nullable=False),
        sa.Column("access_level", sa.String(20), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("shared_by", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "access_level IN ('read', 'write', 'admin')", name="ck_resource_shares_access_level"
        ),
    )
    op.create_index(
        "ix_resource_shares_resource", "resource_shares", ["organization_id", "resource_id"]
    )
    op.create_index(
        "ix_resource_shares_principal", "resource_shares", ["principal_id", "principal_type"]
    )


def downgrade() -> None:
    op.drop_table("resource_shares")
    op.drop_table("resource_permissions")
    op.drop_table("group_memberships")
    op.drop_table("groups")
    op.drop_table("role_assignments")
    op.drop_table("role_policies")
    op.drop_table("roles")
    op.drop_table("policy_versions")
    op.drop_table("policies")
