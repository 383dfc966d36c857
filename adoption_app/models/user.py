# adoption_app/models/user.py
from dataclasses import dataclass, field, fields, asdict
from typing import Optional, Dict, Any

@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조이자 현재 세션의 사용자를 나타내는 데이터클래스.
    id는 인증 서버가 계정 생성 시 발급하며 이후 바뀌지 않습니다.
    password는 가입/로그인 요청에만 쓰이고 문서나 로컬 캐시에는 저장되지 않습니다.
    """
    email: str
    id: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    name: Optional[str] = None
    phone: Optional[str] = None

    def to_document(self, skip_none: bool = False) -> Dict[str, Any]:
        """
        Firestore에 쓸 딕셔너리를 만듭니다.

        :param skip_none: True이면 값이 없는 필드를 빼서, 병합(update) 시 저장소의 기존 값이 유지되도록 합니다.
        """
        data = asdict(self)
        data.pop('password', None)
        if skip_none:
            data = {key: value for key, value in data.items() if value is not None}
        return data

    @classmethod
    def from_document(cls, data: Dict[str, Any], user_id: str) -> 'User':
        """문서 필드에 subject id를 덮어써 User를 만듭니다. 모르는 필드는 무시합니다."""
        known = {f.name for f in fields(cls)} - {'password'}
        values = {key: value for key, value in data.items() if key in known}
        values['id'] = user_id
        return cls(**values)
