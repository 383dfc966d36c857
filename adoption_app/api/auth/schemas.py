# adoption_app/api/auth/schemas.py
from marshmallow import Schema, fields, validate, post_load, EXCLUDE

from adoption_app.models.user import User

class SignUpSchema(Schema):
    """회원가입 입력의 유효성을 검사하는 스키마. 인증 서버 호출 전에 형식 오류를 걸러냅니다."""
    email = fields.Email(required=True, error_messages={"required": "email은 필수 항목입니다."})
    password = fields.Str(
        required=True,
        validate=validate.Length(min=1),
        error_messages={"required": "password는 필수 항목입니다."}
    )
    name = fields.Str(allow_none=True)
    phone = fields.Str(allow_none=True)

class SessionRecordSchema(Schema):
    """
    로컬 캐시에 저장되는 세션 레코드의 형식을 정의합니다.
    password는 필드로 선언하지 않아 저장되지 않으며, 읽을 때 모르는 필드는 버립니다.
    """
    class Meta:
        unknown = EXCLUDE

    email = fields.Str(required=True)
    id = fields.Str(allow_none=True, load_default=None)
    name = fields.Str(allow_none=True, load_default=None)
    phone = fields.Str(allow_none=True, load_default=None)

    @post_load
    def make_user(self, data, **kwargs):
        return User(**data)
