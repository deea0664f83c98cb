from marshmallow import Schema, fields, validate

from models.schemas.user import UserOutSchema


class PostCreateSchema(Schema):
    title = fields.String(required=True, validate=validate.Length(min=1, max=255))
    content = fields.String(required=True)


class PostUpdateSchema(Schema):
    # All optional, but validate if present
    title = fields.String(validate=validate.Length(min=1, max=255))
    content = fields.String()


class PostOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    content = fields.String()
    author_id = fields.String(data_key="authorId")
    author = fields.Nested(UserOutSchema)
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
