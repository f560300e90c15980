"""SQLAlchemy Core table definitions.

Constraint names are significant: integrity errors are mapped to domain
errors by constraint name (see persistence.errors).
"""

from sqlalchemy import (
    TIMESTAMP,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID

metadata = MetaData()

# ============================================================================
# USERS TABLE
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True),
    Column("username", String(50), nullable=False),
    Column("email", String(255), nullable=True),
    Column("display_name", String(100), nullable=True),
    Column("avatar_url", Text, nullable=True),
    Column(
        "stats_privacy", String(20), nullable=False, server_default="public"
    ),
    Column("ui_theme", String(50), nullable=True),
    Column("color_theme", String(50), nullable=True),
    Column(
        "created_at",
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("NOW()"),
    ),
    Column(
        "updated_at",
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("NOW()"),
    ),
    Column("last_login_at", TIMESTAMP(timezone=True), nullable=True),
    UniqueConstraint("username", name="uq_users_username"),
    UniqueConstraint("email", name="uq_users_email"),
    CheckConstraint(
        "stats_privacy IN ('private', 'friends_only', 'public')",
        name="ck_users_stats_privacy",
    ),
    CheckConstraint("length(trim(username)) > 0", name="ck_users_username_not_blank"),
)

# ============================================================================
# USER PROVIDER IDENTITIES TABLE (Multi-provider authentication)
# ============================================================================
user_provider_identities_table = Table(
    "user_provider_identities",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True),
    Column(
        "user_id",
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("provider", String(50), nullable=False),  # 'google', 'github'
    Column("provider_user_id", String(255), nullable=False),
    Column("provider_email", String(255), nullable=True),
    Column("provider_display_name", String(255), nullable=True),
    Column("provider_avatar_url", Text, nullable=True),
    Column(
        "created_at",
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("NOW()"),
    ),
    Column(
        "updated_at",
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("NOW()"),
    ),
    UniqueConstraint(
        "provider",
        "provider_user_id",
        name="uq_user_provider_identities_provider",
    ),
    UniqueConstraint(
        "user_id",
        "provider",
        name="uq_user_provider_identities_user_provider",
    ),
)

Index(
    "idx_user_provider_identities_user_id",
    user_provider_identities_table.c.user_id,
)
