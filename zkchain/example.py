"""
재귀 증명 체인 데모: x + y = z → rec1 → rec2
===============================================

실행:
    python -m zkchain.example

흐름:
    1. 회로 컴파일 (addition_main, addition_rec_1, addition_rec_2)
    2. main 증명 + 재귀 산출물 (x=1, y=2, z=3)
    3. rec1 증명: main 증명을 회로 안에서 검증, c == z (c=3)
    4. rec2 증명: rec1 증명을 회로 안에서 검증, d == c + 1 (d=4)
    5. rec2 증명 검증
"""

import logging

from zkchain.proofs import (
    compile_circuit,
    generate_proof,
    generate_recursive_proof,
    verify_proof,
)
from zkchain.serializers import fr_short

logger = logging.getLogger("zkchain.example")


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s]: %(message)s",
        datefmt="%H:%M:%S",
    )

    # ── 1. 회로 컴파일 ──
    logger.info("Compiling circuits...")
    compiled_main = compile_circuit("addition_main")
    compiled_rec1 = compile_circuit("addition_rec_1")
    compiled_rec2 = compile_circuit("addition_rec_2")
    logger.info("Circuits compiled!")

    # ── 2. main ──
    logger.info("Generating main proof and recursive artifacts...")
    main_result = generate_proof(compiled_main, {"x": 1, "y": 2, "z": 3})
    logger.info("Main proof and recursive artifacts generated")

    # ── 3. rec1 ──
    logger.info("Generating recursive proof 1...")
    rec1_result = generate_recursive_proof(
        compiled_rec1, main_result.public_inputs, main_result.artifacts, {"c": 3}
    )
    logger.info("Recursive proof 1 generated")

    # ── 4. rec2 ──
    logger.info("Generating recursive proof 2...")
    rec2_result = generate_recursive_proof(
        compiled_rec2, rec1_result.public_inputs, rec1_result.artifacts, {"d": 4}
    )
    logger.info("Recursive proof 2 generated")
    logger.info("rec2 public inputs: %s", [fr_short(v) for v in rec2_result.public_inputs])

    # ── 5. 검증 ──
    verified = verify_proof(compiled_rec2, rec2_result.proof, rec2_result.public_inputs)
    logger.info("Verification result: %s", verified)
    return verified


if __name__ == "__main__":
    main()
