from marshmallow import Schema, fields, pre_load, validate, EXCLUDE


def _strip(v):
    return v.strip() if isinstance(v, str) else v


_non_empty = validate.Length(min=1)
_password = validate.Length(min=8, error="Password must be at least 8 characters long.")


class UserCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=_non_empty)
    first_name = fields.String(required=True, data_key="firstName", validate=_non_empty)
    last_name = fields.String(required=True, data_key="lastName", validate=_non_empty)
    password = fields.String(required=True, load_only=True, validate=_password)
    confirm_password = fields.String(required=True, load_only=True, data_key="confirmPassword", validate=_password)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "username" in data:
            data = dict(data, username=_strip(data["username"]))
        return data


class UserUpdateSchema(Schema):
    """Partial update; only these three fields may ever change."""
    class Meta:
        unknown = EXCLUDE

    username = fields.String(validate=_non_empty)
    first_name = fields.String(data_key="firstName", validate=_non_empty)
    last_name = fields.String(data_key="lastName", validate=_non_empty)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "username" in data:
            data = dict(data, username=_strip(data["username"]))
        return data


class UserOutSchema(Schema):
    """Public profile. There is deliberately no password field here."""
    class Meta:
        unknown = EXCLUDE

    id = fields.String()
    username = fields.String(required=True)
    first_name = fields.String(data_key="firstName", allow_none=True)
    last_name = fields.String(data_key="lastName", allow_none=True)
