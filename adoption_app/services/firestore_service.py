# adoption_app/services/firestore_service.py
import logging
from typing import Any, Dict, Optional
from firebase_admin import firestore

class FirestoreService:
    """
    컬렉션 이름 + 문서 키로 Firestore 문서를 읽고 쓰는 얇은 어댑터.
    모든 메서드는 클라이언트 예외를 그대로 전파하며, 실패 처리는 호출하는 서비스가 담당합니다.
    """

    def __init__(self, db=None):
        # db를 주입하지 않으면 firebase_admin.initialize_app() 이후의 기본 클라이언트를 사용합니다.
        self.db = db if db is not None else firestore.client()

    def get(self, collection_name: str, key: str) -> Optional[Dict[str, Any]]:
        """문서를 딕셔너리로 반환합니다. 문서가 없으면 None."""
        doc = self.db.collection(collection_name).document(key).get()
        if not doc.exists:
            return None
        return doc.to_dict()

    def set(self, collection_name: str, key: str, data: Dict[str, Any]) -> None:
        """문서 전체를 data로 교체합니다."""
        self.db.collection(collection_name).document(key).set(data)

    def update(self, collection_name: str, key: str, data: Dict[str, Any]) -> None:
        """data에 포함된 필드만 병합합니다. 문서가 없으면 클라이언트가 NotFound를 발생시킵니다."""
        self.db.collection(collection_name).document(key).update(data)

    def delete(self, collection_name: str, key: str) -> None:
        self.db.collection(collection_name).document(key).delete()

    def insert(self, collection_name: str, data: Dict[str, Any]) -> str:
        """
        저장소가 발급한 키로 새 문서를 만들고 그 키를 반환합니다.

        :param collection_name: 문서를 저장할 컬렉션 이름 (예: 'posts')
        :param data: 저장할 데이터 딕셔너리
        :return: 생성된 Firestore 문서의 고유 ID
        """
        doc_ref = self.db.collection(collection_name).document()
        doc_ref.set(data)
        logging.info(f"Firestore 저장 성공 (Collection: {collection_name}, Doc ID: {doc_ref.id})")
        return doc_ref.id
