"""Wallet admin request and response schemas."""

from marshmallow import fields, validate

from ...admin.openapi import OpenAPISchema
from ..key_info import MSG_TYPE_UNKNOWN, MSG_TYPES
from ..key_type import KeyTypes

ADDRESS_VALIDATE = validate.Regexp(r"^z[1-9A-HJ-NP-Za-km-z]+$")
ADDRESS_EXAMPLE = "z6MkiTBz1ymuepAQ4HEHYSF1H8quG5GLVVQR3djdX3mDooWp"
BASE64_VALIDATE = validate.Regexp(r"^[A-Za-z0-9+/]*={0,2}$")
BASE64_EXAMPLE = "aGVsbG8gd29ybGQ="


class WalletModuleResponseSchema(OpenAPISchema):
    """Response schema for Wallet Module."""


class AddressMatchInfoSchema(OpenAPISchema):
    """Path parameters and validators for request taking an address."""

    address = fields.Str(
        required=True,
        validate=ADDRESS_VALIDATE,
        metadata={"description": "Key address", "example": ADDRESS_EXAMPLE},
    )


class KeyCreateSchema(OpenAPISchema):
    """Parameters and validators for create key endpoint."""

    key_type = fields.Str(
        required=True,
        validate=validate.OneOf(KeyTypes().key_types),
        metadata={"description": "Type of key to create", "example": "ed25519"},
    )


class KeyInfoSchema(OpenAPISchema):
    """Exported key material."""

    key_type = fields.Str(
        required=True,
        validate=validate.OneOf(KeyTypes().key_types),
        metadata={"description": "Key type", "example": "secp256k1"},
    )
    private_key = fields.Str(
        required=True,
        validate=BASE64_VALIDATE,
        metadata={
            "description": "Base64 encoded private key or ledger derivation record",
            "example": BASE64_EXAMPLE,
        },
    )


class KeyImportSchema(OpenAPISchema):
    """Parameters and validators for import key endpoint."""

    key_info = fields.Nested(KeyInfoSchema, required=True)


class MsgMetaSchema(OpenAPISchema):
    """Signing context."""

    type = fields.Str(
        required=False,
        dump_default=MSG_TYPE_UNKNOWN,
        validate=validate.OneOf(MSG_TYPES),
        metadata={"description": "Kind of payload being signed", "example": "message"},
    )
    extra = fields.Str(
        required=False,
        validate=BASE64_VALIDATE,
        metadata={"description": "Base64 encoded extra context", "example": ""},
    )


class SignRequestSchema(OpenAPISchema):
    """Parameters and validators for sign endpoint."""

    message = fields.Str(
        required=True,
        validate=BASE64_VALIDATE,
        metadata={"description": "Base64 encoded message", "example": BASE64_EXAMPLE},
    )
    meta = fields.Nested(MsgMetaSchema, required=False)


class SignWithPassphraseSchema(OpenAPISchema):
    """Parameters and validators for sign with passphrase endpoint."""

    message = fields.Str(
        required=True,
        validate=BASE64_VALIDATE,
        metadata={"description": "Base64 encoded message", "example": BASE64_EXAMPLE},
    )
    passphrase = fields.Str(
        required=True, metadata={"description": "Keystore passphrase"}
    )


class PassphraseSchema(OpenAPISchema):
    """Request carrying the current keystore passphrase."""

    passphrase = fields.Str(
        required=False, metadata={"description": "Keystore passphrase"}
    )


class ChangePassphraseSchema(OpenAPISchema):
    """Parameters and validators for change passphrase endpoint."""

    new_passphrase = fields.Str(
        required=True,
        validate=validate.Length(min=1),
        metadata={"description": "New keystore passphrase"},
    )


class AddressResultSchema(OpenAPISchema):
    """Result schema for operations returning an address."""

    address = fields.Str(
        metadata={"description": "Key address", "example": ADDRESS_EXAMPLE}
    )


class AddressListSchema(OpenAPISchema):
    """Result schema for key listing."""

    results = fields.List(
        fields.Str(metadata={"example": ADDRESS_EXAMPLE}),
        metadata={"description": "Addresses of all configured wallet backends"},
    )


class HasKeyResultSchema(OpenAPISchema):
    """Result schema for key ownership check."""

    address = fields.Str(
        metadata={"description": "Key address", "example": ADDRESS_EXAMPLE}
    )
    has = fields.Bool(metadata={"description": "Whether a backend owns the key"})


class SignatureSchema(OpenAPISchema):
    """Signature."""

    key_type = fields.Str(metadata={"description": "Key type", "example": "ed25519"})
    data = fields.Str(
        metadata={"description": "Base64 encoded signature", "example": BASE64_EXAMPLE}
    )


class SignatureResultSchema(OpenAPISchema):
    """Result schema for signing."""

    signature = fields.Nested(SignatureSchema)


class KeyInfoResultSchema(OpenAPISchema):
    """Result schema for key export."""

    key_info = fields.Nested(KeyInfoSchema)


class BoolResultSchema(OpenAPISchema):
    """Result schema for passphrase management."""

    result = fields.Bool(metadata={"description": "Operation result"})


class LockStatusSchema(OpenAPISchema):
    """Result schema for lock status."""

    locked = fields.Bool(metadata={"description": "Whether the keystore is locked"})
