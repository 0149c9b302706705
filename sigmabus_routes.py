"""
Sigmabus Flask Blueprint: Setup / Prove / Verify 엔드포인트
=============================================================

JSON API 5개 (GET 1 + POST 4). 상태(파라미터, 마지막 증명)는 TinyDB에 저장한다.

  POST /sigmabus/setup   {seed?}          → 키 생성
  POST /sigmabus/prove   {x, seed?}       → 증명 생성, X = x·G 반환
  POST /sigmabus/verify  {proof?, X?}     → 검증 (생략하면 저장된 값 사용)
  GET  /sigmabus/params                   → 저장된 파라미터 요약
  POST /sigmabus/clear                    → 저장 상태 삭제
"""

import functools
import logging
import random

from flask import Blueprint, current_app, jsonify, request
from tinydb import Query

from sigmabus import protocol
from sigmabus.exceptions import BackendError, GenZKFail, SigmaFail
from sigmabus.field import FR, G1, default_rng, ec_mul
from sigmabus.groth16 import Groth16
from sigmabus.poseidon.config import PoseidonConfig
from sigmabus.serializers import (
    serialize_g1, deserialize_g1,
    serialize_poseidon_config, deserialize_poseidon_config,
    serialize_proving_key, deserialize_proving_key,
    serialize_proof, deserialize_proof,
)

logger = logging.getLogger(__name__)

sigmabus_bp = Blueprint('sigmabus', __name__, url_prefix='/sigmabus')

DATA = Query()

# DB는 app.py에서 주입
DB = None


def init_sigmabus_bp(db):
    """app.py에서 DB를 주입받는다."""
    global DB
    DB = db


class InvalidRequest(Exception):
    """요청 본문이 잘못되었을 때 (HTTP 400)."""


# ─── DB 헬퍼 ───

def db_get(key):
    """DB에서 키로 데이터를 조회한다."""
    result = DB.search(DATA.type == key)
    if not result:
        return None
    return result[0].get("data")


def db_set(key, data):
    """DB에 키로 데이터를 저장한다."""
    DB.upsert({"type": key, "data": data}, DATA.type == key)


def db_remove_prefix(prefix):
    """prefix로 시작하는 모든 키를 삭제한다."""
    DB.remove(DATA.type.test(lambda t: t.startswith(prefix)))


# ─── 파라미터 ───

@functools.lru_cache(maxsize=8)
def _poseidon_config_for(full_rounds, partial_rounds, alpha, rate):
    return PoseidonConfig.from_grain(full_rounds, partial_rounds, alpha, rate)


def configured_poseidon_config():
    """앱 설정의 SIGMABUS_POSEIDON_* 값으로 PoseidonConfig를 만든다."""
    config = current_app.config
    return _poseidon_config_for(
        int(config["SIGMABUS_POSEIDON_FULL_ROUNDS"]),
        int(config["SIGMABUS_POSEIDON_PARTIAL_ROUNDS"]),
        int(config["SIGMABUS_POSEIDON_ALPHA"]),
        int(config["SIGMABUS_POSEIDON_RATE"]),
    )


def store_params(params):
    """Params를 DB에 저장한다. 이전 증명은 새 키와 맞지 않으므로 지운다."""
    db_remove_prefix("sigmabus.")
    db_set("sigmabus.params.poseidon_config", serialize_poseidon_config(params.poseidon_config))
    db_set("sigmabus.params.proving_key", serialize_proving_key(params.proving_key))


def load_params():
    """DB의 Params. 없으면 None."""
    config_data = db_get("sigmabus.params.poseidon_config")
    pk_data = db_get("sigmabus.params.proving_key")
    if config_data is None or pk_data is None:
        return None
    proving_key = deserialize_proving_key(pk_data)
    return protocol.Params(
        poseidon_config=deserialize_poseidon_config(config_data),
        proving_key=proving_key,
        verifying_key=proving_key.vk,
        snark=Groth16,
    )


def _require_params():
    params = load_params()
    if params is None:
        raise InvalidRequest("parameters not found, run /sigmabus/setup first")
    return params


# ─── 요청 파싱 ───

def _request_json():
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise InvalidRequest("request body must be a JSON object")
    return body


def _rng_from(body):
    """seed가 있으면 재현 가능한 rng, 없으면 OS CSPRNG."""
    seed = body.get("seed")
    if seed is None:
        return default_rng()
    if not isinstance(seed, (int, str)) or isinstance(seed, bool):
        raise InvalidRequest("seed must be an integer or a string")
    return random.Random(seed)


def _parse_scalar(value, name):
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise InvalidRequest(f"{name} must be an integer or a decimal string")
    try:
        return FR(int(value))
    except ValueError:
        raise InvalidRequest(f"{name} must be an integer or a decimal string") from None


# ─── 오류 처리 ───

@sigmabus_bp.errorhandler(InvalidRequest)
def handle_bad_request(exc):
    return jsonify({"error": str(exc)}), 400


@sigmabus_bp.errorhandler(BackendError)
def handle_backend_error(exc):
    logger.error("backend fault: %s", exc)
    return jsonify({"error": str(exc), "type": type(exc).__name__}), 500


# ──────────────────────────────────────────────────────────────
# 엔드포인트
# ──────────────────────────────────────────────────────────────

@sigmabus_bp.route("/setup", methods=["POST"])
def setup_params():
    """설정된 Poseidon 파라미터로 Setup을 실행하고 결과를 저장한다."""
    body = _request_json()
    rng = _rng_from(body)
    params = protocol.setup(rng, configured_poseidon_config())
    store_params(params)

    pk = params.proving_key
    return jsonify({
        "num_variables": pk.num_variables,
        "num_public_inputs": params.verifying_key.num_public_inputs,
        "h_query_size": len(pk.h_query),
    })


@sigmabus_bp.route("/prove", methods=["POST"])
def prove_statement():
    """x에 대한 증명을 만들고 X = x·G 와 함께 반환한다."""
    body = _request_json()
    if "x" not in body:
        raise InvalidRequest("missing field: x")
    x = _parse_scalar(body["x"], "x")
    rng = _rng_from(body)
    params = _require_params()

    proof = protocol.prove(rng, params, None, x)
    proof_data = serialize_proof(proof)
    X = serialize_g1(ec_mul(G1, x))

    db_set("sigmabus.proof", proof_data)
    db_set("sigmabus.statement", X)
    return jsonify({"proof": proof_data, "X": X})


@sigmabus_bp.route("/verify", methods=["POST"])
def verify_statement():
    """주어진 (또는 저장된) 증명을 검증한다."""
    body = _request_json()
    params = _require_params()

    proof_data = body.get("proof", db_get("sigmabus.proof"))
    X_data = body.get("X", db_get("sigmabus.statement"))
    if proof_data is None or X_data is None:
        raise InvalidRequest("no proof to verify, run /sigmabus/prove first or pass proof and X")
    try:
        proof = deserialize_proof(proof_data)
        X = deserialize_g1(X_data)
    except (KeyError, TypeError, ValueError, IndexError) as exc:
        raise InvalidRequest(f"malformed proof or statement: {exc}") from None

    try:
        protocol.verify(params, None, proof, X)
    except SigmaFail:
        return jsonify({"valid": False, "reason": "SigmaFail"})
    except GenZKFail:
        return jsonify({"valid": False, "reason": "GenZKFail"})
    return jsonify({"valid": True, "reason": None})


@sigmabus_bp.route("/params", methods=["GET"])
def params_summary():
    """저장된 파라미터 요약."""
    config_data = db_get("sigmabus.params.poseidon_config")
    pk_data = db_get("sigmabus.params.proving_key")
    if config_data is None or pk_data is None:
        return jsonify({"ready": False})

    return jsonify({
        "ready": True,
        "poseidon": {
            key: config_data[key]
            for key in ("full_rounds", "partial_rounds", "alpha", "rate", "capacity")
        },
        "num_variables": len(pk_data["a_query"]),
        "num_public_inputs": len(pk_data["vk"]["gamma_abc_g1"]) - 1,
        "alpha_g1": pk_data["vk"]["alpha_g1"],
        "has_proof": db_get("sigmabus.proof") is not None,
    })


@sigmabus_bp.route("/clear", methods=["POST"])
def clear_state():
    """저장된 파라미터와 증명을 모두 지운다."""
    db_remove_prefix("sigmabus.")
    return jsonify({"cleared": True})

