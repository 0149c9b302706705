"""
Tests for the Flask JSON API (app.create_app + sigmabus blueprint).

A reduced Poseidon parameter set keeps key generation fast.
"""

import random

import pytest

from app import create_app
from sigmabus.field import FR, G1, ec_mul
from sigmabus.poseidon import PoseidonConfig
from sigmabus.protocol import setup
from sigmabus.serializers import serialize_g1
from sigmabus_routes import store_params

TINY_ROUNDS = {
    "SIGMABUS_POSEIDON_FULL_ROUNDS": 2,
    "SIGMABUS_POSEIDON_PARTIAL_ROUNDS": 1,
    "SIGMABUS_POSEIDON_ALPHA": 5,
    "SIGMABUS_POSEIDON_RATE": 2,
}


@pytest.fixture(scope="module")
def tiny_params():
    config = PoseidonConfig.from_grain(2, 1, 5, 2)
    return setup(random.Random(1), config)


@pytest.fixture
def app():
    return create_app({"TESTING": True, **TINY_ROUNDS})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ready_client(app, tiny_params):
    """파라미터가 저장된 상태의 클라이언트."""
    with app.app_context():
        store_params(tiny_params)
    return app.test_client()


@pytest.fixture
def proved_client(ready_client):
    """x = 7 증명까지 저장된 상태의 클라이언트."""
    resp = ready_client.post("/sigmabus/prove", json={"x": 7, "seed": 3})
    assert resp.status_code == 200
    return ready_client


class TestConfig:
    """create_app 설정 계층."""

    def test_defaults(self):
        app = create_app()
        assert app.config["SIGMABUS_DB_PATH"] is None
        assert app.config["SIGMABUS_POSEIDON_PARTIAL_ROUNDS"] == 31

    def test_test_config_overrides(self, app):
        assert app.config["TESTING"] is True
        assert app.config["SIGMABUS_POSEIDON_FULL_ROUNDS"] == 2

    def test_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("FLASK_SIGMABUS_POSEIDON_PARTIAL_ROUNDS", "57")
        app = create_app()
        assert app.config["SIGMABUS_POSEIDON_PARTIAL_ROUNDS"] == 57

    def test_file_db(self, tmp_path):
        path = tmp_path / "db.json"
        app = create_app({"SIGMABUS_DB_PATH": str(path)})
        client = app.test_client()
        assert client.post("/sigmabus/clear").status_code == 200
        assert path.exists()

    def test_index_lists_endpoints(self, client):
        data = client.get("/").get_json()
        assert "/sigmabus/prove" in data["endpoints"]
        assert "/sigmabus/verify" in data["endpoints"]


class TestSetupEndpoint:
    def test_params_before_setup(self, client):
        assert client.get("/sigmabus/params").get_json() == {"ready": False}

    def test_setup(self, client):
        resp = client.post("/sigmabus/setup", json={"seed": 42})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["num_public_inputs"] == 4

        summary = client.get("/sigmabus/params").get_json()
        assert summary["ready"] is True
        assert summary["poseidon"]["full_rounds"] == 2
        assert summary["num_variables"] == data["num_variables"]
        assert summary["has_proof"] is False

    def test_setup_bad_seed(self, client):
        resp = client.post("/sigmabus/setup", json={"seed": [1, 2]})
        assert resp.status_code == 400
        assert "error" in resp.get_json()


class TestProveEndpoint:
    def test_prove_before_setup(self, client):
        resp = client.post("/sigmabus/prove", json={"x": 7})
        assert resp.status_code == 400

    def test_prove_returns_statement(self, ready_client):
        resp = ready_client.post("/sigmabus/prove", json={"x": "7", "seed": 1})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["X"] == serialize_g1(ec_mul(G1, 7))
        assert set(data["proof"]) == {"cm", "sigma_proof", "zk_proof"}

    def test_seeded_prove_is_reproducible(self, ready_client):
        p1 = ready_client.post("/sigmabus/prove", json={"x": 7, "seed": 9}).get_json()
        p2 = ready_client.post("/sigmabus/prove", json={"x": 7, "seed": 9}).get_json()
        assert p1 == p2

    @pytest.mark.parametrize("body", [{}, {"x": "seven"}, {"x": 1.5}, {"x": True}])
    def test_bad_x(self, ready_client, body):
        resp = ready_client.post("/sigmabus/prove", json=body)
        assert resp.status_code == 400

    def test_non_object_body(self, ready_client):
        resp = ready_client.post("/sigmabus/prove", json=[7])
        assert resp.status_code == 400


class TestVerifyEndpoint:
    def test_verify_stored_proof(self, proved_client):
        data = proved_client.post("/sigmabus/verify").get_json()
        assert data == {"valid": True, "reason": None}

    def test_verify_wrong_statement(self, proved_client):
        X = serialize_g1(ec_mul(G1, 8))
        data = proved_client.post("/sigmabus/verify", json={"X": X}).get_json()
        assert data == {"valid": False, "reason": "SigmaFail"}

    def test_verify_tampered_s(self, proved_client):
        proof = proved_client.post("/sigmabus/prove", json={"x": 7, "seed": 5}).get_json()["proof"]
        proof["sigma_proof"]["s"] = str(int(proof["sigma_proof"]["s"]) ^ 1)
        data = proved_client.post("/sigmabus/verify", json={"proof": proof}).get_json()
        assert data["reason"] == "SigmaFail"

    def test_verify_tampered_zk_proof(self, proved_client):
        proof = proved_client.post("/sigmabus/prove", json={"x": 7, "seed": 5}).get_json()["proof"]
        raw = bytearray.fromhex(proof["zk_proof"])
        raw[-1] ^= 1
        proof["zk_proof"] = raw.hex()
        data = proved_client.post("/sigmabus/verify", json={"proof": proof}).get_json()
        assert data == {"valid": False, "reason": "GenZKFail"}

    def test_verify_malformed_proof(self, proved_client):
        resp = proved_client.post("/sigmabus/verify", json={"proof": {"cm": "1"}})
        assert resp.status_code == 400

    def test_verify_without_proof(self, ready_client):
        resp = ready_client.post("/sigmabus/verify")
        assert resp.status_code == 400


class TestClearEndpoint:
    def test_clear(self, proved_client):
        assert proved_client.get("/sigmabus/params").get_json()["has_proof"] is True
        assert proved_client.post("/sigmabus/clear").get_json() == {"cleared": True}
        assert proved_client.get("/sigmabus/params").get_json() == {"ready": False}
