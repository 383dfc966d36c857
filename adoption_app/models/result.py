# adoption_app/models/result.py
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar('T')

class ErrorKind(Enum):
    """세션/게시글 작업 실패 유형을 정의하는 Enum 클래스"""
    PROVIDER_REJECTED = "PROVIDER_REJECTED"  # 인증 서버 거절 또는 통신 실패
    MISSING_DOCUMENT = "MISSING_DOCUMENT"    # 인증은 되었지만 users 문서가 없음
    STORE_FAILURE = "STORE_FAILURE"          # Firestore/Storage 작업 실패
    NO_ACTIVE_SESSION = "NO_ACTIVE_SESSION"  # 로그인된 세션이 필요한 작업
    INVALID_INPUT = "INVALID_INPUT"          # 스키마 검증 실패

@dataclass(frozen=True)
class OperationError:
    kind: ErrorKind
    message: str
    cause: Optional[BaseException] = None

@dataclass(frozen=True)
class Result(Generic[T]):
    """
    성공 값 또는 실패 원인을 담는 결과 객체.
    bool()로 평가하면 성공 여부가 되므로 True/False만 확인하던 호출부도 그대로 동작합니다.
    """
    value: Optional[T] = None
    error: Optional[OperationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Optional[T] = None) -> 'Result[T]':
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, cause: Optional[BaseException] = None) -> 'Result[T]':
        return cls(error=OperationError(kind=kind, message=message, cause=cause))
