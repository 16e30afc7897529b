# utils/auth.py
"""
Bearer tokens come from flask-jwt-extended; the routes use @jwt_required()
and get_jwt_identity() (the user id as a string).

The loaders below turn the library's rejections into the API's own auth
errors: no credential is Unauthenticated, anything that fails verification
(bad signature, garbage, expired) is InvalidToken.
"""
import logging

from flask import jsonify
from flask_jwt_extended import create_access_token

from utils.errors import InvalidToken, Unauthenticated

logger = logging.getLogger(__name__)


def issue_token(user_id) -> str:
    user_id = str(user_id)
    # "id" is what the old frontend reads from the payload
    return create_access_token(identity=user_id, additional_claims={"id": user_id})


def _error_response(err):
    return jsonify(err.to_dict()), err.status_code


def register_token_handlers(jwt):
    @jwt.unauthorized_loader
    def missing_token(reason):
        logger.warning("Rejected request without token: %s", reason)
        return _error_response(Unauthenticated())

    @jwt.invalid_token_loader
    def invalid_token(reason):
        logger.warning("Rejected invalid token: %s", reason)
        return _error_response(InvalidToken())

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        logger.warning("Rejected expired token for %s", jwt_payload.get("sub"))
        return _error_response(InvalidToken("Not authorized, token expired"))

    return jwt
