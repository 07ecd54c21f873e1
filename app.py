"""
증명 체인 HTTP 서버
====================

실행:
    flask --app app run

환경 변수:
    ZKCHAIN_DB_PATH        TinyDB 파일 경로 (없으면 메모리 DB)
    ZKCHAIN_CIRCUITS_DIR   회로 디렉터리 (기본 ./circuits)
    ZKCHAIN_THREADS / ZKCHAIN_SRS_SEED / ZKCHAIN_SRS_DEGREE
"""

import logging
import os

from flask import Flask

from pipeline_routes import pipeline_bp, init_pipeline_bp
from zkchain.config import BackendConfig
from zkchain.loader import CircuitLoader
from zkchain.storage import ProofStore


def create_app(db_path=None, circuits_dir=None, config=None):
    app = Flask(__name__)

    store = ProofStore.open(db_path or os.environ.get("ZKCHAIN_DB_PATH"))
    init_pipeline_bp(store, CircuitLoader(circuits_dir), config or BackendConfig.from_env())
    app.register_blueprint(pipeline_bp)
    return app


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s]: %(message)s",
        datefmt="%H:%M:%S",
    )
    create_app().run(debug=True)
