"""
증명 체인 Flask Blueprint
==========================

  GET  /pipeline/circuits                        사용 가능한 회로 목록
  POST /pipeline/circuits/<circuit_id>/compile   회로 컴파일 + 요약
  POST /pipeline/runs                            파이프라인 실행
  GET  /pipeline/runs                            실행 목록
  GET  /pipeline/runs/<run_id>                   저장된 실행과 단계별 결과
  POST /pipeline/verify                          증명 검증

모든 응답은 JSON이다. 파이프라인 오류는 422로, 실패한 단계 이름과 함께 돌려준다.
"""

import logging

from flask import Blueprint, jsonify, request

from zkchain.errors import ZkChainError, CompilationError, VerificationError
from zkchain.pipeline import Pipeline, StageSpec
from zkchain.proofs import verify_proof
from zkchain.serializers import serialize_result, serialize_error, proof_from_hex

logger = logging.getLogger(__name__)

pipeline_bp = Blueprint('pipeline', __name__, url_prefix='/pipeline')

# 저장소, 로더, 설정은 app.py에서 주입
STORE = None
LOADER = None
CONFIG = None


def init_pipeline_bp(store, loader, config):
    """app.py에서 의존성을 주입받는다."""
    global STORE, LOADER, CONFIG
    STORE = store
    LOADER = loader
    CONFIG = config


def error_response(exc, status):
    return jsonify(serialize_error(exc)), status


def bad_request(message):
    return jsonify({"error": "BadRequest", "message": message, "stage": None}), 400


def flag(body, key, where):
    """JSON bool 플래그. 없으면 True, bool이 아니면 ValueError."""
    value = body.get(key, True)
    if not isinstance(value, bool):
        raise ValueError(f"{where}는 true 또는 false여야 합니다")
    return value


# ──────────────────────────────────────────────────────────────
# 회로
# ──────────────────────────────────────────────────────────────

@pipeline_bp.route("/circuits")
def list_circuits():
    return jsonify({"circuits": LOADER.available()})


@pipeline_bp.route("/circuits/<circuit_id>/compile", methods=["POST"])
def compile_circuit(circuit_id):
    try:
        circuit = LOADER.load(circuit_id)
    except CompilationError as exc:
        return error_response(exc, 422)
    return jsonify(circuit.describe())


# ──────────────────────────────────────────────────────────────
# 실행
# ──────────────────────────────────────────────────────────────

def parse_stages(body):
    """요청 본문 → StageSpec 리스트. 형식이 틀리면 ValueError."""
    stages = body.get("stages")
    if not isinstance(stages, list) or not stages:
        raise ValueError("stages는 비어 있지 않은 리스트여야 합니다")
    specs = []
    for i, stage in enumerate(stages):
        if not isinstance(stage, dict):
            raise ValueError(f"stages[{i}]는 객체여야 합니다")
        if not isinstance(stage.get("circuit"), str):
            raise ValueError(f"stages[{i}].circuit이 필요합니다")
        inputs = stage.get("inputs", {})
        if not isinstance(inputs, dict):
            raise ValueError(f"stages[{i}].inputs는 객체여야 합니다")
        specs.append(StageSpec(
            name=stage.get("name") or stage["circuit"],
            circuit=stage["circuit"],
            inputs=inputs,
            recursive=flag(stage, "recursive", f"stages[{i}].recursive"),
        ))
    return specs


@pipeline_bp.route("/runs", methods=["POST"])
def create_run():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return bad_request("JSON 본문이 필요합니다")
    try:
        specs = parse_stages(body)
        verify_terminal = flag(body, "verify", "verify")
    except ValueError as exc:
        return bad_request(str(exc))

    try:
        pipeline = Pipeline(specs, loader=LOADER, config=CONFIG,
                            verify_terminal=verify_terminal, store=STORE)
        result = pipeline.run()
    except ZkChainError as exc:
        logger.warning("pipeline run failed at %s: %s", exc.stage, exc.message)
        return error_response(exc, 422)
    return jsonify(serialize_result(result)), 201


@pipeline_bp.route("/runs")
def list_runs():
    return jsonify({"runs": STORE.list_runs()})


@pipeline_bp.route("/runs/<run_id>")
def get_run(run_id):
    try:
        return jsonify(STORE.get_run(run_id))
    except KeyError:
        return jsonify({"error": "NotFound", "message": f"실행 {run_id}가 없습니다",
                        "stage": None}), 404


# ──────────────────────────────────────────────────────────────
# 검증
# ──────────────────────────────────────────────────────────────

@pipeline_bp.route("/verify", methods=["POST"])
def verify():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return bad_request("JSON 본문이 필요합니다")
    if not isinstance(body.get("circuit"), str) or not isinstance(body.get("proof"), str):
        return bad_request("circuit과 proof(hex)가 필요합니다")
    public_inputs = body.get("public_inputs")
    if not isinstance(public_inputs, list):
        return bad_request("public_inputs는 리스트여야 합니다")
    try:
        recursive = flag(body, "recursive", "recursive")
    except ValueError as exc:
        return bad_request(str(exc))

    try:
        circuit = LOADER.load(body["circuit"])
    except CompilationError as exc:
        return error_response(exc, 422)

    try:
        proof = proof_from_hex(body["proof"])
    except ValueError as exc:
        return error_response(VerificationError(f"증명 인코딩을 해석할 수 없습니다: {exc}"), 400)

    try:
        verified = verify_proof(circuit, proof, public_inputs,
                                recursive=recursive, config=CONFIG)
    except VerificationError as exc:
        return error_response(exc, 400)
    return jsonify({"verified": verified})
