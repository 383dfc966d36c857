# adoption_app/api/posts/schemas.py
from marshmallow import Schema, fields, validates_schema, ValidationError, EXCLUDE

class PostCreateSchema(Schema):
    """
    새 입양 게시글 데이터의 유효성을 검사합니다.
    id와 user_id는 시스템이 채우는 값이므로 입력에 있어도 버립니다.
    """
    class Meta:
        unknown = EXCLUDE

    title = fields.Str(required=True)
    name = fields.Str(required=True)
    description = fields.Str(required=True)
    image = fields.Str(required=True)
    genero = fields.Str(required=True)
    adotado = fields.Bool(allow_none=True)

class PostUpdateSchema(Schema):
    """
    게시글 부분 수정 요청을 검사합니다. 선언된 필드만 허용하며
    id, user_id 같은 식별 필드는 모르는 필드로 취급되어 거절됩니다.
    """
    title = fields.Str()
    name = fields.Str()
    description = fields.Str()
    image = fields.Str()
    genero = fields.Str()
    adotado = fields.Bool()

    @validates_schema
    def validate_not_empty(self, data, **kwargs):
        if not data:
            raise ValidationError("수정할 데이터가 제공되지 않았습니다.")
