# run.py
from dotenv import load_dotenv
import os
import logging
basedir = os.path.abspath(os.path.dirname(__file__))
# 이 파일과 같은 디렉터리의 .env 파일을 로드합니다.
load_dotenv(dotenv_path=os.path.join(basedir, '.env'))

from adoption_app import create_context

if __name__ == '__main__':
    # 저장된 세션을 복원하고 현재 상태를 출력한 뒤 구독을 해제합니다.
    with create_context() as context:
        snapshot = context.snapshot
        logging.info(f"세션 상태: {snapshot.state.value}, signed: {snapshot.signed}")
        if snapshot.user:
            logging.info(f"현재 사용자: {snapshot.user.email} (id: {snapshot.user.id})")
