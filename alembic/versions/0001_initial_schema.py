"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

# Enum columns store member names
user_role = sa.Enum("GENERAL", "TRUCK_OWNER", "COMPANY", "COMPANY_DRIVER", "UNREGISTERED_DRIVER",
                    "ADMIN", "EMPLOYEE", name="userrole")
profile_status = sa.Enum("INITIAL", "BASIC", "COMPLETE", name="profilestatus")
truck_status = sa.Enum("PENDING", "FINALIZED", name="truckstatus")
repair_stage = sa.Enum("INSPECTION", "REPAIR_IN_PROGRESS", "QUALITY_CHECK", "READY_FOR_PICKUP",
                       name="repairstage")
job_card_status = sa.Enum("IN_PROGRESS", "COMPLETED", "ARCHIVED", name="jobcardstatus")
store_category = sa.Enum("ENGINE_PARTS", "BRAKE_SYSTEM", "TRANSMISSION", "ELECTRICAL", "BODY_PARTS",
                         "FILTERS", "FLUIDS", "TOOLS", "ACCESSORIES", "OTHER", name="storecategory")
store_item_status = sa.Enum("ACTIVE", "INACTIVE", "DISCONTINUED", name="storeitemstatus")
cart_status = sa.Enum("ACTIVE", "CHECKED_OUT", "CANCELLED", name="cartstatus")
notification_status = sa.Enum("UNREAD", "READ", name="notificationstatus")

ENUMS = (user_role, profile_status, truck_status, repair_stage, job_card_status,
         store_category, store_item_status, cart_status, notification_status)


def _timestamps():
    return (
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updatedAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def upgrade() -> None:
    # users -> companies / truck_owners and trucks -> job_cards are added after both sides exist
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(150), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("licensePlate", sa.String(11), nullable=True),
        sa.Column("companyId", sa.Integer(), nullable=True),
        sa.Column("truckOwnerId", sa.Integer(), nullable=True),
        sa.Column("driverInfo", sa.JSON(), nullable=True),
        sa.Column("companyDetails", sa.JSON(), nullable=True),
        sa.Column("isActive", sa.Boolean(), nullable=False),
        sa.Column("resetCode", sa.String(255), nullable=True),
        sa.Column("resetCodeExpires", sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("companyId"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_phone", "users", ["phone"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "truck_owners",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("licensePlate", sa.String(11), nullable=False),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("userId"),
    )
    op.create_index("ix_truck_owners_id", "truck_owners", ["id"])
    op.create_index("ix_truck_owners_licensePlate", "truck_owners", ["licensePlate"])

    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("truckOwnerId", sa.Integer(), sa.ForeignKey("truck_owners.id", ondelete="SET NULL"),
                  nullable=True),
        sa.Column("companyName", sa.String(200), nullable=False),
        sa.Column("contactEmail", sa.String(255), nullable=False),
        sa.Column("profileStatus", profile_status, nullable=False),
        sa.Column("bankDetails", sa.JSON(), nullable=False),
        sa.Column("licenseDetails", sa.JSON(), nullable=False),
        sa.Column("ownerDetails", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_companies_id", "companies", ["id"])
    op.create_index("ix_companies_contactEmail", "companies", ["contactEmail"], unique=True)

    with op.batch_alter_table("users") as batch:
        batch.create_foreign_key("fk_users_company", "companies", ["companyId"], ["id"], ondelete="SET NULL")
        batch.create_foreign_key("fk_users_truck_owner", "truck_owners", ["truckOwnerId"], ["id"],
                                 ondelete="SET NULL")

    op.create_table(
        "drivers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("driverName", sa.String(50), nullable=False),
        sa.Column("driverPhone", sa.String(20), nullable=False),
        sa.Column("driverIdNumber", sa.String(50), nullable=True),
        sa.Column("licensePlate", sa.String(11), nullable=True),
        sa.Column("truckNumber", sa.String(50), nullable=True),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("isRegisteredCompanyDriver", sa.Boolean(), nullable=False),
        sa.Column("associatedCompanyId", sa.Integer(), sa.ForeignKey("companies.id"), nullable=True),
        sa.Column("externalCompanyDetails", sa.JSON(), nullable=True),
        sa.Column("emergencyContactName", sa.String(100), nullable=True),
        sa.Column("emergencyContactPhone", sa.String(20), nullable=True),
        sa.Column("emergencyContactRelationship", sa.String(20), nullable=True),
        sa.Column("licenseNumber", sa.String(50), nullable=True),
        sa.Column("licenseExpiry", sa.Date(), nullable=True),
        sa.Column("licenseType", sa.String(20), nullable=True),
        sa.Column("isActive", sa.Boolean(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("totalJobs", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_drivers_id", "drivers", ["id"])
    op.create_index("ix_drivers_driverPhone", "drivers", ["driverPhone"])
    op.create_index("ix_drivers_driverIdNumber", "drivers", ["driverIdNumber"], unique=True)
    op.create_index("ix_drivers_userId", "drivers", ["userId"])
    op.create_index("ix_drivers_associatedCompanyId", "drivers", ["associatedCompanyId"])

    op.create_table(
        "trucks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("licensePlate", sa.String(11), nullable=False),
        sa.Column("brand", sa.String(100), nullable=False),
        sa.Column("ownerId", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("companyId", sa.Integer(), sa.ForeignKey("companies.id"), nullable=True),
        sa.Column("currentJobCardId", sa.Integer(), nullable=True),
        sa.Column("status", truck_status, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_trucks_id", "trucks", ["id"])
    op.create_index("ix_trucks_licensePlate", "trucks", ["licensePlate"], unique=True)
    op.create_index("ix_trucks_ownerId", "trucks", ["ownerId"])
    op.create_index("ix_trucks_companyId", "trucks", ["companyId"])

    op.create_table(
        "truck_milestones",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("truckId", sa.Integer(), sa.ForeignKey("trucks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("stage", repair_stage, nullable=False),
        sa.Column("completedAt", sa.TIMESTAMP(timezone=True), nullable=True),
    )
    op.create_index("ix_truck_milestones_id", "truck_milestones", ["id"])
    op.create_index("ix_truck_milestones_truckId", "truck_milestones", ["truckId"])

    op.create_table(
        "job_cards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("truckId", sa.Integer(), sa.ForeignKey("trucks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("entryDate", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("description", sa.JSON(), nullable=False),
        sa.Column("status", job_card_status, nullable=False),
        sa.Column("completedDate", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("driverName", sa.String(100), nullable=True),
        sa.Column("driverPhone", sa.String(10), nullable=True),
        sa.Column("companyId", sa.Integer(), sa.ForeignKey("companies.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_job_cards_id", "job_cards", ["id"])
    op.create_index("ix_job_cards_truckId", "job_cards", ["truckId"])
    op.create_index("ix_job_cards_companyId", "job_cards", ["companyId"])

    with op.batch_alter_table("trucks") as batch:
        batch.create_foreign_key("fk_trucks_current_job_card", "job_cards", ["currentJobCardId"], ["id"])

    op.create_table(
        "store_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("originalPrice", sa.Numeric(12, 2), nullable=True),
        sa.Column("discount", sa.Integer(), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("lowStockThreshold", sa.Integer(), nullable=False),
        sa.Column("category", store_category, nullable=False),
        sa.Column("brand", sa.String(100), nullable=True),
        sa.Column("partNumber", sa.String(100), nullable=True),
        sa.Column("imageUrl", sa.String(500), nullable=True),
        sa.Column("status", store_item_status, nullable=False),
        sa.Column("isAvailable", sa.Boolean(), nullable=False),
        sa.Column("salesCount", sa.Integer(), nullable=False),
        sa.Column("createdById", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("lastUpdatedById", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"),
                  nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("partNumber"),
    )
    op.create_index("ix_store_items_id", "store_items", ["id"])
    op.create_index("ix_store_items_category", "store_items", ["category"])

    op.create_table(
        "carts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", cart_status, nullable=False),
        sa.Column("totalPrice", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_carts_id", "carts", ["id"])
    op.create_index("ix_carts_userId", "carts", ["userId"])

    op.create_table(
        "cart_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("cartId", sa.Integer(), sa.ForeignKey("carts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("productId", sa.Integer(), sa.ForeignKey("store_items.id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("totalPrice", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("ix_cart_items_id", "cart_items", ["id"])
    op.create_index("ix_cart_items_cartId", "cart_items", ["cartId"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("status", notification_status, nullable=False),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_notifications_id", "notifications", ["id"])
    op.create_index("ix_notifications_userId", "notifications", ["userId"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("entityType", sa.String(100), nullable=False),
        sa.Column("entityId", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_id", "audit_logs", ["id"])


def downgrade() -> None:
    for table in ("audit_logs", "notifications", "cart_items", "carts", "store_items"):
        op.drop_table(table)

    with op.batch_alter_table("trucks") as batch:
        batch.drop_constraint("fk_trucks_current_job_card", type_="foreignkey")
    for table in ("job_cards", "truck_milestones", "trucks", "drivers"):
        op.drop_table(table)

    with op.batch_alter_table("users") as batch:
        batch.drop_constraint("fk_users_truck_owner", type_="foreignkey")
        batch.drop_constraint("fk_users_company", type_="foreignkey")
    for table in ("companies", "truck_owners", "users"):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in ENUMS:
        enum.drop(bind, checkfirst=True)
