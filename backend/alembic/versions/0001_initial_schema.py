"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-12-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

ID = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
TS = sa.DateTime(timezone=True)

CONSUMABLE_UNITS = ("millilitres", "grams", "international_units", "number")
CONSUMPTION_TYPES = ("digest", "inhale_nose", "inhale_mouth", "spit_out", "inject", "apply_skin")
EXERCISE_TYPES = ("walking", "running", "cycling", "indoor_cycling", "jumping", "skipping", "flying", "other")

SYMPTOM_INTENSITIES = (
    "appetite_loss", "fever", "cough", "sore_throat", "nasal_symptom", "sneezing", "heart_burn",
    "abdominal_pain", "diarrhea", "constipation", "lower_back_pain", "upper_back_pain", "neck_pain",
    "joint_pain", "headache", "nausea", "dizziness", "stomach_ache", "chest_pain",
    "shortness_of_breath", "fatigue", "anxiety", "depression", "insomnia", "shoulder_pain",
    "hand_pain", "foot_pain", "wrist_pain", "dental_pain", "eye_pain", "ear_pain", "feeling_hot",
    "feeling_cold", "feeling_thirsty",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", TS, nullable=False),
        sa.Column("updated_at", TS, nullable=False),
    ]


def _entry_columns() -> list[sa.Column]:
    return [
        sa.Column("id", ID, primary_key=True, autoincrement=True),
        sa.Column("user_id", ID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("time", TS, nullable=False),
        sa.Column("utc_offset", sa.Integer(), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        *_timestamps(),
    ]


def _colour_columns() -> list[sa.Column]:
    return [
        sa.Column("colour_hue", sa.Float(), nullable=False),
        sa.Column("colour_saturation", sa.Float(), nullable=False),
        sa.Column("colour_value", sa.Float(), nullable=False),
    ]


def _entry_table(name: str, *columns, constraints=()) -> None:
    op.create_table(name, *_entry_columns(), *columns, *constraints)
    op.create_index(op.f(f"ix_{name}_user_id"), name, ["user_id"], unique=False)
    op.create_index(op.f(f"ix_{name}_time"), name, ["time"], unique=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", ID, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(255), nullable=False, unique=True),
        sa.Column("password", sa.Text(), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("oidc_id", sa.String(255), nullable=True, unique=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "session",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("expiry_date", TS, nullable=False),
    )
    op.create_index(op.f("ix_session_expiry_date"), "session", ["expiry_date"], unique=False)

    _entry_table(
        "wees",
        sa.Column("duration", sa.Interval(), nullable=False),
        sa.Column("urgency", sa.Integer(), nullable=False),
        sa.Column("mls", sa.Integer(), nullable=False),
        sa.Column("leakage", sa.Integer(), nullable=False, server_default="0"),
        *_colour_columns(),
        constraints=(
            sa.CheckConstraint("urgency BETWEEN 0 AND 5", name="ck_wees_urgency"),
            sa.CheckConstraint("mls BETWEEN 0 AND 5000", name="ck_wees_mls"),
            sa.CheckConstraint("leakage BETWEEN 0 AND 10", name="ck_wees_leakage"),
        ),
    )

    _entry_table(
        "wee_urges",
        sa.Column("urgency", sa.Integer(), nullable=False),
        constraints=(sa.CheckConstraint("urgency BETWEEN 0 AND 5", name="ck_wee_urges_urgency"),),
    )

    _entry_table(
        "poos",
        sa.Column("duration", sa.Interval(), nullable=False),
        sa.Column("urgency", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("bristol", sa.Integer(), nullable=False),
        *_colour_columns(),
        constraints=(
            sa.CheckConstraint("urgency BETWEEN 0 AND 5", name="ck_poos_urgency"),
            sa.CheckConstraint("quantity BETWEEN 0 AND 5", name="ck_poos_quantity"),
            sa.CheckConstraint("bristol BETWEEN 0 AND 7", name="ck_poos_bristol"),
        ),
    )

    op.create_table(
        "consumables",
        sa.Column("id", ID, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("brand", sa.String(255), nullable=True),
        sa.Column("barcode", sa.String(64), nullable=True),
        sa.Column("is_organic", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("unit", sa.Enum(*CONSUMABLE_UNITS, name="consumable_unit", native_enum=False, length=32), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("created", TS, nullable=True),
        sa.Column("destroyed", TS, nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f("ix_consumables_name"), "consumables", ["name"], unique=False)
    op.create_index(op.f("ix_consumables_barcode"), "consumables", ["barcode"], unique=False)

    op.create_table(
        "nested_consumables",
        sa.Column("parent_id", ID, sa.ForeignKey("consumables.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("consumable_id", ID, sa.ForeignKey("consumables.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("quantity", sa.Float(), nullable=True),
        sa.Column("liquid_mls", sa.Float(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("parent_id <> consumable_id", name="ck_nested_not_self"),
    )
    op.create_index(
        op.f("ix_nested_consumables_consumable_id"), "nested_consumables", ["consumable_id"], unique=False
    )

    _entry_table(
        "consumptions",
        sa.Column("duration", sa.Interval(), nullable=False),
        sa.Column(
            "consumption_type",
            sa.Enum(*CONSUMPTION_TYPES, name="consumption_type", native_enum=False, length=32),
            nullable=False,
            server_default="digest",
        ),
        sa.Column("liquid_mls", sa.Float(), nullable=True),
    )

    op.create_table(
        "consumption_consumables",
        sa.Column("parent_id", ID, sa.ForeignKey("consumptions.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("consumable_id", ID, sa.ForeignKey("consumables.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("quantity", sa.Float(), nullable=True),
        sa.Column("liquid_mls", sa.Float(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        op.f("ix_consumption_consumables_consumable_id"),
        "consumption_consumables",
        ["consumable_id"],
        unique=False,
    )

    _entry_table(
        "exercises",
        sa.Column("duration", sa.Interval(), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("distance", sa.Numeric(6, 2), nullable=True),
        sa.Column("calories", sa.Integer(), nullable=True),
        sa.Column("rpe", sa.Integer(), nullable=True),
        sa.Column(
            "exercise_type",
            sa.Enum(*EXERCISE_TYPES, name="exercise_type", native_enum=False, length=32),
            nullable=False,
        ),
        constraints=(
            sa.CheckConstraint("rpe IS NULL OR rpe BETWEEN 1 AND 10", name="ck_exercises_rpe"),
            sa.CheckConstraint("calories IS NULL OR calories BETWEEN 0 AND 10000", name="ck_exercises_calories"),
        ),
    )

    _entry_table(
        "health_metrics",
        sa.Column("pulse", sa.Integer(), nullable=True),
        sa.Column("blood_glucose", sa.Numeric(4, 1), nullable=True),
        sa.Column("systolic_bp", sa.Integer(), nullable=True),
        sa.Column("diastolic_bp", sa.Integer(), nullable=True),
        sa.Column("weight", sa.Numeric(4, 1), nullable=True),
        sa.Column("height", sa.Integer(), nullable=True),
        sa.Column("waist_circumference", sa.Numeric(4, 1), nullable=True),
        constraints=(
            sa.CheckConstraint("(systolic_bp IS NULL) = (diastolic_bp IS NULL)", name="ck_health_metrics_bp_pair"),
        ),
    )

    _entry_table(
        "symptoms",
        *[sa.Column(name, sa.Integer(), nullable=False, server_default="0") for name in SYMPTOM_INTENSITIES],
        sa.Column("nasal_symptom_description", sa.String(255), nullable=True),
        sa.Column("abdominal_pain_location", sa.String(255), nullable=True),
        sa.Column("dental_pain_description", sa.String(255), nullable=True),
    )

    _entry_table(
        "refluxs",
        sa.Column("duration", sa.Interval(), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("severity", sa.Integer(), nullable=False),
        constraints=(sa.CheckConstraint("severity BETWEEN 0 AND 10", name="ck_refluxs_severity"),),
    )

    _entry_table("notes")


def downgrade() -> None:
    for name in (
        "notes",
        "refluxs",
        "symptoms",
        "health_metrics",
        "exercises",
        "consumption_consumables",
        "consumptions",
        "nested_consumables",
        "consumables",
        "poos",
        "wee_urges",
        "wees",
        "session",
        "users",
    ):
        op.drop_table(name)
