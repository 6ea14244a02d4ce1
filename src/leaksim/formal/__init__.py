"""
Formal checks for the bit-interaction helpers.

- BitIdentityVerifier: Z3 proofs of the pair-count and bit-flip identities
"""

from leaksim.formal.bit_identities import (
    BitIdentityReport,
    BitIdentityVerifier,
    IdentityProofResult,
    verify_bit_identities,
)

__all__ = [
    "BitIdentityReport",
    "BitIdentityVerifier",
    "IdentityProofResult",
    "verify_bit_identities",
]
