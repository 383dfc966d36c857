# adoption_app/api/posts/services.py
import logging
from dataclasses import asdict
from typing import Any, Dict, Optional

from marshmallow import ValidationError

from adoption_app.api.posts.schemas import PostCreateSchema, PostUpdateSchema
from adoption_app.models.post import Post
from adoption_app.models.result import ErrorKind, Result
from adoption_app.models.user import User
from adoption_app.services.protocols import DocumentStoreProtocol
from adoption_app.services.session_store import SessionState, SessionStore
from adoption_app.services.storage_service import StorageService

POSTS_COLLECTION = 'posts'

class PostService:
    """
    입양 게시글 관련 로직을 담당하는 서비스 클래스.
    게시글은 메모리에 캐시하지 않고 모든 작업이 Firestore를 직접 호출합니다.
    저장소 오류는 기록 후 Result 실패로 바꾸어 반환하며, 예외를 밖으로 던지지 않습니다.
    """
    def __init__(self,
                 document_store: DocumentStoreProtocol,
                 session_store: SessionStore,
                 storage_service: Optional[StorageService] = None):
        self.document_store = document_store
        self.session_store = session_store
        self.storage_service = storage_service

    def _current_user(self) -> Optional[User]:
        snapshot = self.session_store.snapshot()
        if snapshot.state is not SessionState.AUTHENTICATED or snapshot.user is None or not snapshot.user.id:
            return None
        return snapshot.user

    def create_post(self, data: Post) -> Result[str]:
        """
        현재 로그인된 사용자의 이름으로 새 게시글을 저장하고 문서 키를 반환합니다.
        user_id는 항상 세션에서 채우며, adotado가 비어 있으면 False로 저장합니다.
        """
        user = self._current_user()
        if user is None:
            logging.error("User must be logged in to create a post")
            return Result.failure(ErrorKind.NO_ACTIVE_SESSION, "게시글을 작성하려면 로그인이 필요합니다.")

        try:
            post_data = PostCreateSchema().load(asdict(data))
        except ValidationError as e:
            logging.warning(f"게시글 입력 검증 실패: {e.messages}")
            return Result.failure(ErrorKind.INVALID_INPUT, str(e.messages), e)

        post_data['user_id'] = user.id
        post_data['adotado'] = post_data.get('adotado') or False

        try:
            post_id = self.document_store.insert(POSTS_COLLECTION, post_data)
        except Exception as e:
            logging.error(f"게시글 생성 실패 (user_id: {user.id}): {e}", exc_info=True)
            return Result.failure(ErrorKind.STORE_FAILURE, "게시글을 저장하지 못했습니다.", e)

        logging.info(f"게시글 생성 완료 (post_id: {post_id})")
        return Result.success(post_id)

    def edit_post(self, post_id: str, updated_data: Dict[str, Any]) -> Result[None]:
        """전달된 필드만 수정합니다. 지정하지 않은 필드는 저장소에서 그대로 유지됩니다."""
        try:
            changes = PostUpdateSchema().load(updated_data)
        except ValidationError as e:
            logging.warning(f"게시글 수정 입력 검증 실패 (post_id: {post_id}): {e.messages}")
            return Result.failure(ErrorKind.INVALID_INPUT, str(e.messages), e)

        try:
            self.document_store.update(POSTS_COLLECTION, post_id, changes)
        except Exception as e:
            logging.error(f"게시글 수정 실패 (post_id: {post_id}): {e}", exc_info=True)
            return Result.failure(ErrorKind.STORE_FAILURE, "게시글을 수정하지 못했습니다.", e)

        logging.info(f"게시글 수정 완료 (post_id: {post_id}, fields: {list(changes.keys())})")
        return Result.success()

    def delete_post(self, post_id: str) -> Result[None]:
        try:
            self.document_store.delete(POSTS_COLLECTION, post_id)
        except Exception as e:
            logging.error(f"게시글 삭제 실패 (post_id: {post_id}): {e}", exc_info=True)
            return Result.failure(ErrorKind.STORE_FAILURE, "게시글을 삭제하지 못했습니다.", e)

        logging.info(f"게시글 삭제 완료 (post_id: {post_id})")
        return Result.success()

    def mark_as_adopted(self, post_id: str) -> Result[None]:
        """adotado를 True로 설정합니다. 이전 값은 확인하지 않으며 여러 번 호출해도 결과는 같습니다."""
        try:
            self.document_store.update(POSTS_COLLECTION, post_id, {'adotado': True})
        except Exception as e:
            logging.error(f"입양 완료 처리 실패 (post_id: {post_id}): {e}", exc_info=True)
            return Result.failure(ErrorKind.STORE_FAILURE, "입양 완료로 변경하지 못했습니다.", e)

        logging.info(f"게시글 입양 완료 처리 (post_id: {post_id})")
        return Result.success()

    def upload_post_image(self, filename: str, data: bytes, content_type: Optional[str] = None) -> Result[str]:
        """게시글 이미지를 업로드하고 image 필드에 넣을 공개 URL을 반환합니다."""
        user = self._current_user()
        if user is None:
            return Result.failure(ErrorKind.NO_ACTIVE_SESSION, "이미지를 올리려면 로그인이 필요합니다.")
        if self.storage_service is None:
            logging.error("StorageService가 설정되지 않아 이미지를 올릴 수 없습니다.")
            return Result.failure(ErrorKind.STORE_FAILURE, "이미지 저장소가 설정되지 않았습니다.")

        try:
            url = self.storage_service.upload_post_image(user.id, filename, data, content_type)
        except Exception as e:
            logging.error(f"게시글 이미지 업로드 실패 (user_id: {user.id}): {e}", exc_info=True)
            return Result.failure(ErrorKind.STORE_FAILURE, "이미지를 업로드하지 못했습니다.", e)
        return Result.success(url)
