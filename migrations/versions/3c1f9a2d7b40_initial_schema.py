"""initial_schema

Create the identity schema:
- Users
- User provider identities (Google, GitHub), one per provider per user

Constraint names are relied on by skullking.persistence.errors.

Revision ID: 3c1f9a2d7b40
Revises:
Create Date: 2026-10-18 10:12:44.318209

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1f9a2d7b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # ========================================================================
    # USERS table
    # ========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column(
            "stats_privacy",
            sa.String(20),
            nullable=False,
            server_default="public",
        ),
        sa.Column("ui_theme", sa.String(50), nullable=True),
        sa.Column("color_theme", sa.String(50), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column("last_login_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint(
            "stats_privacy IN ('private', 'friends_only', 'public')",
            name="ck_users_stats_privacy",
        ),
        sa.CheckConstraint(
            "length(trim(username)) > 0", name="ck_users_username_not_blank"
        ),
    )

    # ========================================================================
    # USER_PROVIDER_IDENTITIES table
    # ========================================================================
    op.create_table(
        "user_provider_identities",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("provider", sa.String(50), nullable=False),  # 'google', 'github'
        sa.Column("provider_user_id", sa.String(255), nullable=False),
        sa.Column("provider_email", sa.String(255), nullable=True),
        sa.Column("provider_display_name", sa.String(255), nullable=True),
        sa.Column("provider_avatar_url", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="user_provider_identities_user_id_fkey",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "provider",
            "provider_user_id",
            name="uq_user_provider_identities_provider",
        ),
        sa.UniqueConstraint(
            "user_id",
            "provider",
            name="uq_user_provider_identities_user_provider",
        ),
    )
    op.create_index(
        "idx_user_provider_identities_user_id",
        "user_provider_identities",
        ["user_id"],
    )

    # ========================================================================
    # updated_at triggers
    # ========================================================================
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)

    op.execute("""
        CREATE TRIGGER update_users_updated_at
        BEFORE UPDATE ON users
        FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
    """)

    op.execute("""
        CREATE TRIGGER update_user_provider_identities_updated_at
        BEFORE UPDATE ON user_provider_identities
        FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
    """)


def downgrade() -> None:
    """Downgrade schema."""
    op.execute(
        "DROP TRIGGER IF EXISTS update_user_provider_identities_updated_at "
        "ON user_provider_identities"
    )
    op.execute("DROP TRIGGER IF EXISTS update_users_updated_at ON users")
    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")

    op.drop_index(
        "idx_user_provider_identities_user_id", table_name="user_provider_identities"
    )
    op.drop_table("user_provider_identities")
    op.drop_table("users")
