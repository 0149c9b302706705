"""
Sigmabus 데모 서버
==================

Flask 앱 팩토리. 설정은 아래 순서로 덮어쓴다.

  1. 기본값 (DEFAULT_CONFIG)
  2. FLASK_ 접두사 환경 변수   (예: FLASK_SIGMABUS_DB_PATH=db.json)
  3. create_app(test_config)의 인자

SIGMABUS_DB_PATH가 None이면 TinyDB를 메모리에만 둔다.
"""

import logging

from flask import Flask, jsonify
from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from sigmabus_routes import sigmabus_bp, init_sigmabus_bp

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "SECRET_KEY": "dev",
    "SIGMABUS_DB_PATH": None,
    "SIGMABUS_POSEIDON_FULL_ROUNDS": 8,
    "SIGMABUS_POSEIDON_PARTIAL_ROUNDS": 31,
    "SIGMABUS_POSEIDON_ALPHA": 5,
    "SIGMABUS_POSEIDON_RATE": 2,
}


def open_db(path):
    if path is None:
        return TinyDB(storage=MemoryStorage)  # Memory DB
    return TinyDB(path)                        # Storage DB


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_mapping(DEFAULT_CONFIG)
    app.config.from_prefixed_env()
    if test_config is not None:
        app.config.from_mapping(test_config)

    db = open_db(app.config["SIGMABUS_DB_PATH"])
    app.extensions["sigmabus_db"] = db
    init_sigmabus_bp(db)
    app.register_blueprint(sigmabus_bp)

    @app.route("/")
    def index():
        return jsonify({
            "service": "sigmabus",
            "endpoints": sorted(
                rule.rule for rule in app.url_map.iter_rules()
                if rule.endpoint.startswith("sigmabus.")
            ),
        })

    logger.debug("sigmabus app created (db=%s)", app.config["SIGMABUS_DB_PATH"] or "memory")
    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    create_app().run(debug=True)
