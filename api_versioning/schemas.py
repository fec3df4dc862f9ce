"""Marshmallow schemas for versioning responses."""

from marshmallow import Schema, fields


class ApiVersionErrorSchema(Schema):
    """Body of a 400 response for a missing, invalid or unsupported version."""

    error = fields.String(required=True, metadata={"description": "Error message"})
    code = fields.String(required=True, metadata={"description": "Error code, e.g. UnsupportedApiVersion"})
    details = fields.Dict(allow_none=True, metadata={"description": "Additional error details"})
    supported_versions = fields.List(
        fields.String(), required=True, metadata={"description": "API versions the resource supports"}
    )
