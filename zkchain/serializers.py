"""
증명 체인 직렬화/역직렬화 헬퍼
================================

TinyDB와 JSON 응답에 담을 수 있는 형태로 변환한다.
FR, Proof, RecursiveArtifacts, 파이프라인 단계/결과.

증명은 zkchain.encoding의 증명 바이트를 hex 문자열로 저장한다.
같은 문자열을 검증 요청에 그대로 다시 넣을 수 있다.
"""

from zkchain.encoding import proof_from_bytes
from zkchain.plonk.field import FR


# ─── FR ───

def serialize_fr(val):
    """FR → str(int)"""
    return str(int(val))


def serialize_fr_list(lst):
    """list[FR] → list[str]"""
    return [serialize_fr(v) for v in lst]


def deserialize_fr_list(data):
    """list[str] → list[FR]"""
    return [FR(int(s)) for s in data]


# ─── Proof ───

def proof_to_hex(proof):
    return proof.to_bytes().hex()


def proof_from_hex(hex_str):
    """hex → Proof. 잘못된 hex나 인코딩이면 ValueError."""
    return proof_from_bytes(bytes.fromhex(hex_str))


# ─── 재귀 산출물 / 단계 ───

def serialize_artifacts(artifacts):
    if artifacts is None:
        return None
    return artifacts.to_dict()


def serialize_error(error):
    return {
        "error": type(error).__name__,
        "message": getattr(error, "message", str(error)),
        "stage": getattr(error, "stage", None),
    }


def serialize_stage(stage):
    """파이프라인 Stage → dict"""
    return {
        "name": stage.name,
        "circuit": stage.circuit.name if stage.circuit is not None else str(stage.source),
        "recursive": stage.recursive,
        "state": stage.state.value,
        "public_inputs": (serialize_fr_list(stage.public_inputs)
                          if stage.public_inputs is not None else None),
        "artifacts": serialize_artifacts(stage.artifacts),
        "proof": proof_to_hex(stage.proof) if stage.proof is not None else None,
        "error": serialize_error(stage.error) if stage.error is not None else None,
    }


def serialize_result(result):
    """PipelineResult → dict"""
    return {
        "run_id": result.run_id,
        "verified": result.verified,
        "public_inputs": serialize_fr_list(result.public_inputs),
        "stages": [serialize_stage(stage) for stage in result.stages],
    }


# ─── display helpers ───

def fr_short(val):
    """FR → 축약 문자열 (로그 표시용)"""
    if val is None:
        return "None"
    s = str(int(val))
    if len(s) <= 10:
        return s
    return s[:4] + "..." + s[-4:]
