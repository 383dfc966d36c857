# adoption_app/services/test_local_cache_service.py
"""
로컬 캐시(LocalCacheService) 테스트

사용법: python -m pytest adoption_app/services/test_local_cache_service.py -v
"""
from adoption_app.services.local_cache_service import LocalCacheService


def test_set_get_remove(cache):
    assert cache.get('user_data') is None

    cache.set('user_data', '{"email": "a@b.com"}')
    assert cache.get('user_data') == '{"email": "a@b.com"}'

    cache.remove('user_data')
    assert cache.get('user_data') is None


def test_values_survive_new_instance(tmp_path):
    path = str(tmp_path / 'nested' / 'cache.json')
    LocalCacheService(path).set('user_data', 'record')

    assert LocalCacheService(path).get('user_data') == 'record'


def test_keys_are_independent(cache):
    cache.set('user_data', 'record')
    cache.set('auth_credentials', 'tokens')

    cache.remove('auth_credentials')

    assert cache.get('user_data') == 'record'


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / 'cache.json'
    path.write_text("{broken", encoding="utf-8")
    cache = LocalCacheService(str(path))

    assert cache.get('user_data') is None
    cache.set('user_data', 'record')
    assert cache.get('user_data') == 'record'


def test_remove_missing_key_does_not_create_file(tmp_path):
    path = tmp_path / 'cache.json'

    LocalCacheService(str(path)).remove('user_data')

    assert not path.exists()


def test_undecodable_file_reads_as_empty_and_is_overwritten(tmp_path):
    """UTF-8로 읽을 수 없는 파일도 손상으로 간주하고, 다음 쓰기에서 정상 파일로 교체"""
    path = tmp_path / 'cache.json'
    path.write_bytes(b'\xff\xfe{"user_data": 1}')
    cache = LocalCacheService(str(path))

    assert cache.get('user_data') is None
    cache.set('user_data', 'record')
    cache.remove('auth_credentials')

    assert LocalCacheService(str(path)).get('user_data') == 'record'
