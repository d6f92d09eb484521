"""Field and group parameters for sharing and commitments.

Plain Shamir sharing needs one prime p. Feldman VSS needs a commitment
group Z_p^* with a generator g of prime order q: shares live mod q,
commitments live mod p. The parameters are public, immutable, and must
be supplied pre-validated by the caller; validate() is a sanity check,
not a prime-selection procedure.
"""

from dataclasses import dataclass
from typing import Optional

from threshare.errors import InvalidParameters
from threshare.field import is_probable_prime


MERSENNE_61 = (1 << 61) - 1    # 2305843009213693951
MERSENNE_127 = (1 << 127) - 1  # default sharing prime


@dataclass(frozen=True)
class FieldParameters:
    p: int
    q: Optional[int] = None
    g: Optional[int] = None

    @classmethod
    def sharing_field(cls, p: int = MERSENNE_127) -> "FieldParameters":
        """Validated parameters for plain Shamir sharing over GF(p)."""
        params = cls(p)
        params.validate()
        return params

    @classmethod
    def feldman_group(cls, p: int, q: int, g: int) -> "FieldParameters":
        """Validated parameters for Feldman VSS: <g> of order q in Z_p^*."""
        params = cls(p, q, g)
        params.validate()
        return params

    @property
    def verifiable(self) -> bool:
        return self.q is not None

    @property
    def share_modulus(self) -> int:
        """Modulus that shares, coefficients and secrets are reduced by."""
        return self.q if self.q is not None else self.p

    def validate(self):
        """Raise InvalidParameters unless the parameters are structurally sound."""
        p, q, g = self.p, self.q, self.g
        if not isinstance(p, int) or not is_probable_prime(p):
            raise InvalidParameters(f"p must be prime, got {p}")
        if q is None and g is None:
            return
        if q is None or g is None:
            raise InvalidParameters("q and g must be given together")
        if not is_probable_prime(q):
            raise InvalidParameters(f"q must be prime, got {q}")
        if (p - 1) % q != 0:
            raise InvalidParameters(f"q={q} does not divide p-1")
        if not 1 < g < p:
            raise InvalidParameters(f"g must lie in (1, p), got {g}")
        if pow(g, q, p) != 1:
            raise InvalidParameters(f"g={g} does not have order q={q} mod p={p}")


# The 23/11/2 group: 2^11 = 2048 = 89*23 + 1. Tests and demos only.
TOY_FELDMAN_GROUP = FieldParameters(23, 11, 2)

DEFAULT_SHARING_FIELD = FieldParameters(MERSENNE_127)
