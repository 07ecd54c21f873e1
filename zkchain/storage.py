"""
파이프라인 실행 저장소 (TinyDB)
================================

각 실행(run)과 단계별 결과를 저장한다. 중간 단계의 공개 입력과
재귀 산출물도 그대로 남기므로 나중에 조회하거나 검증할 수 있다.

  runs   : {run_id, stages: [이름...], status, verified, error}
  stages : {run_id, index, name, circuit, state, public_inputs, artifacts, proof, error}

status: "running" → "completed" | "failed"
"""

import uuid

from tinydb import TinyDB, Query
from tinydb.storages import MemoryStorage

from zkchain.serializers import serialize_stage, serialize_error, proof_from_hex, deserialize_fr_list

DATA = Query()

RUNNING = "running"
COMPLETED = "completed"
FAILED = "failed"


class ProofStore:

    def __init__(self, db=None):
        self.db = db if db is not None else TinyDB(storage=MemoryStorage)
        self.runs = self.db.table("runs")
        self.stages = self.db.table("stages")

    @classmethod
    def open(cls, path=None):
        """path가 없으면 메모리 DB."""
        if path:
            return cls(TinyDB(path))
        return cls()

    # ─── 쓰기 ───

    def create_run(self, stage_names):
        run_id = uuid.uuid4().hex
        self.runs.insert({
            "run_id": run_id,
            "stages": list(stage_names),
            "status": RUNNING,
            "verified": None,
            "error": None,
        })
        return run_id

    def save_stage(self, run_id, stage):
        run = self._run(run_id)
        record = serialize_stage(stage)
        record["run_id"] = run_id
        record["index"] = run["stages"].index(stage.name)
        self.stages.upsert(record, (DATA.run_id == run_id) & (DATA.name == stage.name))

    def finish_run(self, run_id, verified):
        self.runs.update({"status": COMPLETED, "verified": verified}, DATA.run_id == run_id)

    def fail_run(self, run_id, stage, error):
        self.save_stage(run_id, stage)
        self.runs.update({"status": FAILED, "error": serialize_error(error)},
                         DATA.run_id == run_id)

    # ─── 읽기 ───

    def _run(self, run_id):
        result = self.runs.search(DATA.run_id == run_id)
        if not result:
            raise KeyError(run_id)
        return result[0]

    def get_run(self, run_id):
        """실행 기록과 저장된 단계들 (선언 순서). 없으면 KeyError."""
        run = dict(self._run(run_id))
        stages = sorted(self.stages.search(DATA.run_id == run_id), key=lambda s: s["index"])
        run["stages"] = [dict(stage) for stage in stages]
        return run

    def list_runs(self):
        return [
            {"run_id": r["run_id"], "status": r["status"], "verified": r["verified"]}
            for r in self.runs.all()
        ]

    def load_proof(self, run_id, stage_name):
        """저장된 (Proof, 공개 입력). 없으면 KeyError."""
        found = self.stages.search((DATA.run_id == run_id) & (DATA.name == stage_name))
        if not found or found[0]["proof"] is None:
            raise KeyError(f"{run_id}/{stage_name}")
        record = found[0]
        return proof_from_hex(record["proof"]), deserialize_fr_list(record["public_inputs"])
