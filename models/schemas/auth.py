from dataclasses import dataclass
from datetime import datetime, timezone

from marshmallow import Schema, fields, post_load, pre_load, EXCLUDE

from models.schemas.user import UserOutSchema, _strip

_profile_schema = UserOutSchema()


@dataclass(frozen=True)
class AccessClaims:
    """What a verified access token asserts: who the caller is and until when."""
    user: dict
    expires_at: datetime

    @property
    def username(self) -> str:
        return self.user["username"]


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        # Usernames are stored stripped, see UserCreateSchema
        if isinstance(data, dict) and "username" in data:
            data = dict(data, username=_strip(data["username"]))
        return data


class RefreshTokenSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(required=True, data_key="refreshToken")


class AccessClaimsSchema(Schema):
    """Validates a decoded access-token payload: {user: profile, exp: unix ts}."""
    class Meta:
        unknown = EXCLUDE

    user = fields.Nested(UserOutSchema, required=True)
    exp = fields.Integer(required=True, strict=True)

    @post_load
    def make_claims(self, data, **kwargs):
        return AccessClaims(
            user=_profile_schema.dump(data["user"]),
            expires_at=datetime.fromtimestamp(data["exp"], tz=timezone.utc),
        )
