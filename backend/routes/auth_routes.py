import logging
import re

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from flask_bcrypt import Bcrypt
from pymongo.errors import DuplicateKeyError

from models.user_model import (
    create_user, find_user_by_email, find_user_by_id, update_user, public_profile,
)
from utils.auth import issue_token
from utils.errors import DuplicateUser, InvalidCredentials, ParentNotFound, ValidationFailed

logger = logging.getLogger(__name__)

bcrypt = Bcrypt()
auth_bp = Blueprint("auth", __name__)

EMAIL_RE = re.compile(r"^\w+([\.-]?\w+)*@\w+([\.-]?\w+)*(\.\w{2,3})+$")
MIN_PASSWORD_LENGTH = 6


def _check_email(email):
    if not EMAIL_RE.match(email):
        raise ValidationFailed.single("email", "Please add a valid email")


def _check_password(password):
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed.single(
            "password", f"must be at least {MIN_PASSWORD_LENGTH} characters")


def _with_token(user):
    return {**public_profile(user), "token": issue_token(user["_id"])}


@auth_bp.post("")
def register():
    data = request.get_json(force=True, silent=True) or {}
    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    missing = [k for k, v in (("name", name), ("email", email), ("password", password)) if not v]
    if missing:
        raise ValidationFailed(
            [{"field": k, "reason": "required"} for k in missing],
            "Please provide all required fields",
        )
    _check_email(email)
    _check_password(password)

    if find_user_by_email(email):
        raise DuplicateUser()

    pw_hash = bcrypt.generate_password_hash(password).decode("utf-8")
    try:
        user = create_user(name, email, pw_hash)
    except DuplicateKeyError:
        raise DuplicateUser()
    logger.info("Registered user %s", user["_id"])
    return jsonify(_with_token(user)), 201


@auth_bp.post("/login")
def login():
    data = request.get_json(force=True, silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password:
        raise ValidationFailed(
            [{"field": k, "reason": "required"} for k, v in (("email", email), ("password", password)) if not v],
            "Please provide email and password",
        )

    user = find_user_by_email(email)
    if not user or not bcrypt.check_password_hash(user["password"], password):
        logger.warning("Failed login for %s", email)
        raise InvalidCredentials()

    return jsonify(_with_token(user)), 200


@auth_bp.get("/profile")
@jwt_required()
def get_profile():
    user_id = get_jwt_identity()
    user = find_user_by_id(user_id)
    if not user:
        raise ParentNotFound()
    return jsonify(public_profile(user)), 200


@auth_bp.put("/profile")
@jwt_required()
def update_profile():
    user_id = get_jwt_identity()
    user = find_user_by_id(user_id)
    if not user:
        raise ParentNotFound()

    data = request.get_json(force=True, silent=True) or {}
    updates = {}
    if data.get("name"):
        updates["name"] = data["name"].strip()
    if data.get("email"):
        email = data["email"].strip().lower()
        _check_email(email)
        if email != user.get("email") and find_user_by_email(email):
            raise DuplicateUser("Email already in use")
        updates["email"] = email
    if data.get("isSetupComplete") is not None:
        updates["isSetupComplete"] = bool(data["isSetupComplete"])
    if data.get("password"):
        _check_password(data["password"])
        updates["password"] = bcrypt.generate_password_hash(data["password"]).decode("utf-8")

    updated = update_user(user["_id"], updates)
    if not updated:
        raise ParentNotFound()
    return jsonify(_with_token(updated)), 200
