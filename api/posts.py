from __future__ import annotations

from flask import current_app, jsonify, request

from models.schemas.post import PostCreateSchema, PostOutSchema, PostUpdateSchema
from services.posts import PostsService
from utils.decorators import AuthBlueprint, active_user_id
from utils.guards import AuthPolicy, AuthType, ConditionGuard

# Every posts route needs a bearer token unless it says otherwise
bp = AuthBlueprint("posts", __name__, auth=AuthPolicy([AuthType.BEARER]))

create_schema = PostCreateSchema()
update_schema = PostUpdateSchema()
out_schema = PostOutSchema()
out_list_schema = PostOutSchema(many=True)


def _service() -> PostsService:
    return current_app.extensions["posts_service"]


@bp.post("/posts")
def create_post():
    """
    Create a post owned by the caller
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string, maxLength: 255 }
            content: { type: string }
    responses:
      201:
        description: Created
      401:
        description: Unauthorized
      422:
        description: Validation error
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    post = _service().create(active_user_id(), data["title"], data["content"])
    return jsonify(out_schema.dump(post)), 201


@bp.get(
    "/posts",
    auth=AuthPolicy([AuthType.BEARER, AuthType.API_KEY], ConditionGuard.AND),
)
def list_posts():
    """
    List the caller's posts (bearer token AND api key)
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    parameters:
      - in: header
        name: x-api-key
        type: string
        required: true
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    posts = _service().find_all(active_user_id())
    return jsonify(out_list_schema.dump(posts)), 200


@bp.get("/posts/<post_id>", auth=AuthPolicy([AuthType.NONE]))
def get_post(post_id: str):
    """
    Get a post by id
    ---
    tags:
      - Posts
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Post not found }
    """
    return jsonify(out_schema.dump(_service().find_one(post_id))), 200


@bp.put("/posts/<post_id>")
def update_post(post_id: str):
    """
    Update a post owned by the caller
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            title: { type: string }
            content: { type: string }
    responses:
      200: { description: OK }
      404: { description: Post not found }
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    post = _service().update(post_id, active_user_id(), data)
    return jsonify(out_schema.dump(post)), 200


@bp.delete("/posts/<post_id>")
def delete_post(post_id: str):
    """
    Delete a post owned by the caller
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      404: { description: Post not found }
    """
    return jsonify(_service().remove(post_id, active_user_id())), 200
