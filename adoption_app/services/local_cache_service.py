# adoption_app/services/local_cache_service.py
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

class LocalCacheService:
    """
    JSON 파일 하나에 문자열 키-값을 보관하는 로컬 영구 캐시.
    앱 시작 시 세션 레코드를 네트워크 없이 바로 읽기 위해 사용합니다.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._atomic_write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if key not in data:
                return
            del data[key]
            self._atomic_write(data)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logging.warning(f"로컬 캐시 파일이 손상되어 비어 있는 것으로 간주합니다 ({self.path}): {e}")
            return {}
        if not isinstance(data, dict):
            logging.warning(f"로컬 캐시 파일 형식이 올바르지 않습니다 ({self.path})")
            return {}
        return data

    def _atomic_write(self, data: Dict[str, str]) -> None:
        """임시 파일에 쓴 뒤 교체하여 중간에 실패해도 기존 파일이 깨지지 않게 합니다."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
