from marshmallow import Schema, fields, pre_load, validate

from models.client import Role

MIN_PASSWORD_LENGTH = 6


def _strip_email(data):
    # Emails match exactly as stored; only surrounding whitespace is dropped
    if isinstance(data, dict) and isinstance(data.get("email"), str):
        data = dict(data, email=data["email"].strip())
    return data


class ClientRegisterSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=2, max=100))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=MIN_PASSWORD_LENGTH))
    role = fields.Enum(Role, load_default=None)

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip_email(data)


class LoginSchema(Schema):
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip_email(data)


class RefreshTokenSchema(Schema):
    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class ClientUpdateSchema(Schema):
    name = fields.String(validate=validate.Length(min=2, max=100))
    password = fields.String(load_only=True, validate=validate.Length(min=MIN_PASSWORD_LENGTH))


class ClientOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    email = fields.String()
    role = fields.Enum(Role)
    is_active = fields.Boolean()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
