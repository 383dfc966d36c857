# adoption_app/services/storage_service.py
import uuid
import logging
from typing import Optional
from firebase_admin import storage

class StorageService:
    """
    입양 게시글 이미지를 Firebase Storage에 올리고 공개 URL을 돌려주는 서비스 클래스입니다.
    """

    def __init__(self, bucket=None):
        """
        버킷은 생성자로 주입하거나 init_app()에서 설정 값으로 가져옵니다.
        """
        self.bucket = bucket

    def init_app(self, config) -> None:
        """
        create_context() 과정에서 호출되어 Storage 버킷을 설정합니다.

        :param config: FIREBASE_STORAGE_BUCKET 속성을 가진 설정 클래스
        """
        bucket_name = getattr(config, 'FIREBASE_STORAGE_BUCKET', None)
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def upload_post_image(self, user_id: str, filename: str, data: bytes, content_type: Optional[str] = None) -> str:
        """
        이미지를 posts/{user_id}/ 아래에 고유한 이름으로 올리고 공개 URL을 반환합니다.

        :param user_id: 현재 로그인된 사용자의 ID
        :param filename: 원본 파일명 (확장자 파악에 사용)
        :param data: 파일 내용
        :param content_type: 파일의 MIME 타입 (예: "image/jpeg")
        :return: 게시글 image 필드에 넣을 공개 URL
        """
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")

        extension = filename.split('.')[-1] if '.' in filename else ''
        unique_filename = f"{uuid.uuid4()}.{extension}" if extension else str(uuid.uuid4())
        destination_blob_name = f"posts/{user_id}/{unique_filename}"

        blob = self.bucket.blob(destination_blob_name)
        blob.upload_from_string(data, content_type=content_type)
        blob.make_public()
        return blob.public_url
