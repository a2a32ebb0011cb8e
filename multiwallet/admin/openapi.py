"""Base class for admin API payload schemas."""

from marshmallow import EXCLUDE, Schema


class OpenAPISchema(Schema):
    """Schema for admin API payloads: unknown fields are dropped, not rejected."""

    class Meta:
        """OpenAPISchema metadata."""

        unknown = EXCLUDE
