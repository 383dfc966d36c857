# adoption_app/models/post.py
from dataclasses import dataclass
from typing import Optional

@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 입양 게시글 문서 구조를 정의하는 데이터클래스.
    """
    title: str
    name: str          # 동물 이름
    description: str
    image: str         # 이미지 URL 또는 Storage 경로
    genero: str        # 성별/분류 태그
    adotado: Optional[bool] = None  # 입양 완료 여부. 생성 시 비어 있으면 False로 저장
    user_id: Optional[str] = None   # 작성자 ID. 항상 현재 세션에서 채워지며 호출자 값은 무시
    id: Optional[str] = None        # 문서 키. 저장소가 생성 시 발급
