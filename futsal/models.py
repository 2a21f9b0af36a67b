from enum import StrEnum

from tortoise import fields
from tortoise.models import Model


class DayType(StrEnum):
    WEEKDAY = "WEEKDAY"
    WEEKEND = "WEEKEND"


class FieldType(StrEnum):
    FUTSAL = "FUTSAL"
    MINI_SOCCER = "MINI_SOCCER"
    BADMINTON = "BADMINTON"
    BASKETBALL = "BASKETBALL"
    VOLLEYBALL = "VOLLEYBALL"
    TENNIS = "TENNIS"
    OTHER = "OTHER"


class BookingStatus(StrEnum):
    PENDING = "PENDING"  # created, no proof yet
    WAITING_PAYMENT = "WAITING_PAYMENT"  # proof uploaded, awaiting admin
    PAID = "PAID"  # proof approved
    CANCELLED = "CANCELLED"  # by customer, or proof rejected
    COMPLETED = "COMPLETED"  # booking period elapsed


class PaymentStatus(StrEnum):
    WAITING_VERIFICATION = "WAITING_VERIFICATION"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class TimestampedModel(Model):
    id = fields.UUIDField(primary_key=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:  # type: ignore
        abstract = True


class Venue(TimestampedModel):
    name = fields.CharField(max_length=100, unique=True)
    address = fields.CharField(max_length=255)
    description = fields.TextField(null=True)
    latitude = fields.FloatField(null=True)
    longitude = fields.FloatField(null=True)

    class Meta:  # type: ignore
        table = "venues"
        ordering = ["-created_at"]


class AdminRole(TimestampedModel):
    name = fields.CharField(max_length=50, unique=True)
    description = fields.TextField(null=True)

    class Meta:  # type: ignore
        table = "admin_roles"
        ordering = ["-created_at"]


class Admin(TimestampedModel):
    email = fields.CharField(max_length=255, unique=True)
    password = fields.CharField(max_length=255)  # bcrypt hash
    name = fields.CharField(max_length=100)
    role = fields.ForeignKeyField(
        "models.AdminRole", related_name="admins", on_delete=fields.RESTRICT
    )
    venue = fields.ForeignKeyField(
        "models.Venue", related_name="admins", null=True, on_delete=fields.SET_NULL
    )

    class Meta:  # type: ignore
        table = "admins"


class Customer(TimestampedModel):
    email = fields.CharField(max_length=255, unique=True)
    password = fields.CharField(max_length=255)  # bcrypt hash
    name = fields.CharField(max_length=100)
    phone = fields.CharField(max_length=30, null=True)

    class Meta:  # type: ignore
        table = "customers"


class Field(TimestampedModel):
    venue = fields.ForeignKeyField(
        "models.Venue", related_name="fields", on_delete=fields.RESTRICT
    )
    name = fields.CharField(max_length=100, unique=True)
    type = fields.CharEnumField(FieldType, max_length=20)
    is_active = fields.BooleanField(default=True)
    length_meter = fields.FloatField(null=True)
    width_meter = fields.FloatField(null=True)

    class Meta:  # type: ignore
        table = "fields"
        ordering = ["-created_at"]


class FieldImage(TimestampedModel):
    field = fields.ForeignKeyField(
        "models.Field", related_name="images", on_delete=fields.CASCADE
    )
    image_url = fields.CharField(max_length=2048)
    is_primary = fields.BooleanField(default=False)
    order = fields.IntField(default=0)

    class Meta:  # type: ignore
        table = "field_images"
        ordering = ["-is_primary", "order", "created_at"]


class FieldPrice(TimestampedModel):
    field = fields.ForeignKeyField(
        "models.Field", related_name="prices", on_delete=fields.CASCADE
    )
    day_type = fields.CharEnumField(DayType, max_length=10)
    start_hour = fields.IntField()  # 0..23, inclusive
    end_hour = fields.IntField()  # 1..24, exclusive
    price = fields.IntField()  # whole currency units per hour

    class Meta:  # type: ignore
        table = "field_prices"
        ordering = ["day_type", "start_hour"]


class Booking(TimestampedModel):
    customer = fields.ForeignKeyField(
        "models.Customer", related_name="bookings", on_delete=fields.RESTRICT
    )
    field = fields.ForeignKeyField(
        "models.Field", related_name="bookings", on_delete=fields.RESTRICT
    )

    start_time = fields.DatetimeField()
    end_time = fields.DatetimeField()

    total_price = fields.IntField()  # computed at creation
    status = fields.CharEnumField(
        BookingStatus, max_length=20, default=BookingStatus.PENDING
    )

    class Meta:  # type: ignore
        table = "bookings"
        ordering = ["-created_at"]


class Payment(TimestampedModel):
    booking = fields.OneToOneField(
        "models.Booking", related_name="payment", on_delete=fields.CASCADE
    )
    proof_url = fields.CharField(max_length=2048)
    status = fields.CharEnumField(
        PaymentStatus, max_length=25, default=PaymentStatus.WAITING_VERIFICATION
    )
    verified_by = fields.ForeignKeyField(
        "models.Admin",
        related_name="verified_payments",
        null=True,
        on_delete=fields.SET_NULL,
    )
    verified_at = fields.DatetimeField(null=True)
    note = fields.TextField(null=True)

    class Meta:  # type: ignore
        table = "payments"
