from marshmallow import Schema, fields, pre_load, validate, validates_schema, ValidationError


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class LoginSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(
        required=True,
        load_only=True,
        validate=validate.Length(min=6, max=20, error="Password must be between 6 and 20 characters"),
    )

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm_email(data["email"])
        return data


class RegisterSchema(LoginSchema):
    name = fields.String(required=True, error_messages={"invalid": "Name must be a string"})
    confirm_password = fields.String(required=True, load_only=True, data_key="confirmPassword")

    @validates_schema
    def passwords_match(self, data, **kwargs):
        if data.get("password") != data.get("confirm_password"):
            raise ValidationError("Passwords do not match", field_name="confirmPassword")


class RefreshTokenSchema(Schema):
    refresh_token = fields.String(required=True, data_key="refreshToken")


class TokenPairSchema(Schema):
    access_token = fields.String(data_key="accessToken")
    refresh_token = fields.String(data_key="refreshToken")


class UserOutSchema(Schema):
    id = fields.String()
    email = fields.String()
    name = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
