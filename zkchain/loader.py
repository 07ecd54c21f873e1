"""
CircuitLoader
==============

회로 이름으로 컴파일된 회로를 얻는다.

  <root>/<circuit_id>/src/main.zk

컴파일 결과는 circuit_id마다 하나씩 소스 digest와 함께 캐시한다.
소스가 바뀌면 다시 컴파일하고 이전 결과를 대체한다.
CompiledCircuit는 불변이므로 여러 파이프라인 실행이 같은 객체를 공유해도 된다.
"""

import hashlib
import logging
import os
import re
import threading

from zkchain.compiler import compile_source
from zkchain.config import circuits_root
from zkchain.errors import CompilationError

logger = logging.getLogger(__name__)

SOURCE_PATH = os.path.join("src", "main.zk")

_CIRCUIT_ID = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_\-]*$")


class CircuitLoader:

    def __init__(self, root=None):
        self.root = root or circuits_root()
        self._cache = {}
        self._lock = threading.Lock()

    def source_path(self, circuit_id):
        if not isinstance(circuit_id, str) or not _CIRCUIT_ID.match(circuit_id):
            raise CompilationError(f"올바르지 않은 회로 이름: {circuit_id!r}")
        return os.path.join(self.root, circuit_id, SOURCE_PATH)

    def available(self):
        """root 아래에서 소스 파일을 가진 회로 이름 목록."""
        if not os.path.isdir(self.root):
            return []
        return sorted(
            entry for entry in os.listdir(self.root)
            if _CIRCUIT_ID.match(entry)
            and os.path.isfile(os.path.join(self.root, entry, SOURCE_PATH))
        )

    def load(self, circuit_id):
        """회로를 읽어 컴파일한다.

        Raises:
            CompilationError: 소스가 없거나 컴파일에 실패할 때
        """
        path = self.source_path(circuit_id)
        try:
            with open(path, encoding="utf-8") as f:
                source = f.read()
        except OSError as exc:
            raise CompilationError(f"회로 소스를 읽을 수 없습니다: {path}") from exc

        digest = hashlib.sha256(source.encode()).hexdigest()
        with self._lock:
            entry = self._cache.get(circuit_id)
            if entry is not None and entry[0] == digest:
                return entry[1]
            logger.debug("compiling %s from %s", circuit_id, path)
            circuit = compile_source(circuit_id, source)
            self._cache[circuit_id] = (digest, circuit)
        return circuit
