import os
import sys

import pytest

# 프로젝트 루트를 sys.path에 추가 (app.py, pipeline_routes.py)
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from zkchain.config import BackendConfig
from zkchain.loader import CircuitLoader
from zkchain.proofs import generate_proof, generate_recursive_proof

CIRCUITS_DIR = os.path.join(project_root, "circuits")

# 8게이트 회로까지 증명 가능한 가장 작은 SRS (8 + 5 = 13)
TEST_CONFIG = BackendConfig(threads=2, srs_seed=12345, srs_degree=16)


@pytest.fixture(scope="session")
def config():
    return TEST_CONFIG


@pytest.fixture(scope="session")
def loader():
    return CircuitLoader(CIRCUITS_DIR)


@pytest.fixture(scope="session")
def circuits(loader):
    """addition_main, addition_rec_1, addition_rec_2 컴파일 결과."""
    return {
        "main": loader.load("addition_main"),
        "rec1": loader.load("addition_rec_1"),
        "rec2": loader.load("addition_rec_2"),
    }


@pytest.fixture(scope="session")
def main_result(circuits, config):
    """main 증명 (x=1, y=2, z=3)."""
    return generate_proof(circuits["main"], {"x": 1, "y": 2, "z": 3}, config=config)


@pytest.fixture(scope="session")
def rec1_result(circuits, config, main_result):
    """main 증명을 임베드한 rec1 증명 (c=3)."""
    return generate_recursive_proof(
        circuits["rec1"], main_result.public_inputs, main_result.artifacts, {"c": 3},
        config=config,
    )


@pytest.fixture(scope="session")
def rec2_result(circuits, config, rec1_result):
    """rec1 증명을 임베드한 rec2 증명 (d=4)."""
    return generate_recursive_proof(
        circuits["rec2"], rec1_result.public_inputs, rec1_result.artifacts, {"d": 4},
        config=config,
    )
