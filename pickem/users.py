from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import User, save
from models.schemas.user import UserCreateSchema, UserUpdateSchema, UserOutSchema
from pickem.db import get_session
from utils.decorators import jwt_required, self_only
from utils.exceptions import NotFoundError, StoreError, ValidationError
from utils.security import hash_password
from utils.tokens import revoke_user_refresh_tokens

logger = logging.getLogger(__name__)

bp = Blueprint("users", __name__)

user_create_schema = UserCreateSchema()
user_update_schema = UserUpdateSchema()
user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)

DUPLICATE_USERNAME = "Username is already in use"


def _find_by_username(session, username: str) -> User | None:
    return session.query(User).filter(User.username == username).first()


def create_user(session, data: dict) -> User:
    """Validate, hash and insert a user from UserCreateSchema output.

    Shared by POST /users and the create-user CLI command.
    """
    if data["password"] != data["confirm_password"]:
        raise ValidationError("Password and Confirmation did not match")

    # For data integrity, explicitly set the structure of the data to be persisted
    user = User(
        username=data["username"],
        first_name=data["first_name"],
        last_name=data["last_name"],
        password_hash=hash_password(data["password"]),
    )
    session.add(user)
    try:
        save(session)
    except IntegrityError as exc:
        logger.info("Rejected duplicate username %r", data["username"])
        raise ValidationError(DUPLICATE_USERNAME) from exc
    return user


@bp.post("/users")
@jwt_required()
def create():
    """
    Create a user
    ---
    tags:
      - Users
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
          required: [username, firstName, lastName, password, confirmPassword]
          properties:
            username: { type: string, minLength: 1 }
            firstName: { type: string, minLength: 1 }
            lastName: { type: string, minLength: 1 }
            password: { type: string, minLength: 8 }
            confirmPassword: { type: string, minLength: 8 }
    responses:
      200: { description: Created }
      400: { description: Validation error or username in use }
      401: { description: Unauthorized }
    """
    data = user_create_schema.load(request.get_json(silent=True) or {})
    create_user(get_session(), data)
    return jsonify({"success": True}), 200


@bp.get("/users")
@jwt_required()
def list_users():
    """
    List all users (public profiles only)
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200: { description: OK }
    """
    session = get_session()
    rows = session.query(User).order_by(User.username.asc()).all()
    return jsonify(user_list_out_schema.dump(rows)), 200


@bp.get("/users/<username>")
@jwt_required()
def get_user(username: str):
    """
    Get a user's public profile
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: username
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    user = _find_by_username(get_session(), username)
    if user is None:
        raise NotFoundError("User not found")
    return jsonify(user_out_schema.dump(user)), 200


@bp.put("/users/<username>")
@jwt_required()
@self_only("update")
def update_user(username: str):
    """
    Update your own profile (partial): username, firstName, lastName
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: username
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            username: { type: string, minLength: 1 }
            firstName: { type: string, minLength: 1 }
            lastName: { type: string, minLength: 1 }
    responses:
      200: { description: OK }
      400: { description: Validation error or username in use }
      403: { description: Not your record }
      404: { description: Not found }
    """
    data = user_update_schema.load(request.get_json(silent=True) or {})

    session = get_session()
    user = _find_by_username(session, username)
    if user is None:
        raise NotFoundError("User was not found")

    for key, value in data.items():
        setattr(user, key, value)
    try:
        save(session)
    except IntegrityError as exc:
        raise ValidationError(DUPLICATE_USERNAME) from exc
    return jsonify({"success": True}), 200


@bp.delete("/users/<username>")
@jwt_required()
@self_only("delete")
def delete_user(username: str):
    """
    Delete your own account, along with its refresh tokens
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: username
        type: string
        required: true
    responses:
      200: { description: Deleted }
      403: { description: Not your record }
      404: { description: Not found }
      500: { description: Store failure }
    """
    session = get_session()
    user = _find_by_username(session, username)
    if user is None:
        raise NotFoundError("User was not found")

    try:
        revoked = revoke_user_refresh_tokens(session, user.id)
        session.delete(user)
        save(session)
    except SQLAlchemyError as exc:
        raise StoreError("Unable to delete user") from exc
    logger.info("Deleted user %s and %d refresh token(s)", user.id, revoked)
    return ("", 200)
