"""
PLONK 백엔드 (bn128, py_ecc)
=============================

  field → polynomial → kzg/srs → circuit/permutation → preprocessor
  → prover (Round 1~5) → verifier
"""
