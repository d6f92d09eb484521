"""Feldman verifiable secret sharing.

The dealer shares the secret with Shamir over GF(q) and publishes
C_i = g^{a_i} mod p for every coefficient a_i, where g generates the
order-q subgroup of Z_p^*. A participant holding (x, y) checks

    g^y  ==  prod_i C_i^{x^i mod q}   (mod p)

without learning anything beyond what g^{a_0} already reveals. Exponents
are reduced mod q (the order of g); group elements are reduced mod p.
Confusing the two moduli is the classic way to break this check.
"""

import hashlib
import logging
from dataclasses import dataclass, field

from threshare.errors import (
    InsufficientShares, InvalidParameters, ShareVerificationFailed,
)
from threshare.field import modpow, mul
from threshare.params import FieldParameters
from threshare.shamir import Share, as_points, check_sharing_shape, interpolate_at_zero
from threshare import polynomial

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Commitment:
    """Ordered group elements (g^{a_0}, ..., g^{a_{t-1}}) mod p."""

    values: tuple

    def __post_init__(self):
        object.__setattr__(self, 'values', tuple(self.values))

    def __len__(self):
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    def __getitem__(self, i):
        return self.values[i]

    @property
    def threshold(self) -> int:
        return len(self.values)

    def fingerprint(self) -> str:
        """SHA-256 hex digest over the ordered, length-prefixed elements."""
        h = hashlib.sha256()
        for v in self.values:
            raw = v.to_bytes((v.bit_length() + 7) // 8 or 1, 'big')
            h.update(len(raw).to_bytes(4, 'big'))
            h.update(raw)
        return h.hexdigest()


@dataclass(frozen=True)
class VerifiableShare:
    """A share plus the commitment of the split that produced it."""

    x: int
    y: int = field(repr=False)
    commitment: Commitment = field(repr=False)

    @property
    def share(self) -> Share:
        return Share(self.x, self.y)


def _coords(share) -> tuple:
    """(x, y) of a VerifiableShare or plain pair. Raises InvalidParameters."""
    if isinstance(share, VerifiableShare):
        x, y = share.x, share.y
    else:
        try:
            x, y = share[0], share[1]
        except (TypeError, IndexError) as exc:
            raise InvalidParameters(f"Malformed share record: {exc}") from exc
    if not isinstance(x, int) or not isinstance(y, int):
        raise InvalidParameters("Share coordinates must be integers")
    return x, y


class FeldmanCommitter:
    """Computes and checks Feldman commitments for one (p, q, g) group."""

    def __init__(self, params: FieldParameters):
        if not params.verifiable:
            raise InvalidParameters("Feldman commitments need q and g")
        params.validate()
        self.params = params

    def commit(self, coeffs: list) -> Commitment:
        """C_i = g^{a_i} mod p, in coefficient order."""
        p, q, g = self.params.p, self.params.q, self.params.g
        return Commitment(modpow(g, a % q, p) for a in coeffs)

    def verify(self, share, commitment: Commitment = None) -> bool:
        """Check one share against a commitment.

        share: a VerifiableShare or a plain (x, y) pair. When a
        VerifiableShare is given together with an explicit commitment, the
        two commitments must be identical; shares from a different split
        fail verification rather than raising.
        """
        carried = getattr(share, 'commitment', None)
        if commitment is None:
            commitment = carried
        if commitment is None or len(commitment) == 0:
            return False
        if carried is not None and tuple(carried) != tuple(commitment):
            log.warning("share x=%s carries a commitment from a different split",
                        _coords(share)[0])
            return False

        x, y = _coords(share)
        p, q, g = self.params.p, self.params.q, self.params.g
        if not (0 <= y < q) or x % q == 0:
            return False

        expected = 1
        x_pow = 1  # x^0
        for c in commitment:
            expected = mul(expected, modpow(c, x_pow, p), p)
            x_pow = mul(x_pow, x, q)

        return modpow(g, y, p) == expected

    def verify_all(self, shares, commitment: Commitment = None) -> list:
        """Return the x-coordinates of shares that fail verification."""
        failed = [_coords(s)[0] for s in shares if not self.verify(s, commitment)]
        for x in failed:
            log.warning("share x=%s failed commitment verification", x)
        return failed

    def reconstruct_with_verification(self, shares, commitment: Commitment) -> int:
        """Verify every share, then interpolate the first t over GF(q).

        t is the commitment length. Raises InsufficientShares,
        ShareVerificationFailed (naming the first bad x),
        NonInvertibleDenominator, or InvalidParameters for malformed
        records; never returns a partial secret.
        """
        shares = list(shares)
        for s in shares:
            _coords(s)
        threshold = len(commitment)
        if threshold == 0:
            raise InvalidParameters("Commitment is empty")
        if len(shares) < threshold:
            raise InsufficientShares(threshold, len(shares))

        failed = self.verify_all(shares, commitment)
        if failed:
            raise ShareVerificationFailed(failed[0])

        plain = [s.share if isinstance(s, VerifiableShare) else s for s in shares[:threshold]]
        secret = interpolate_at_zero(as_points(plain, self.params.q), self.params.q)
        log.debug("reconstructed verified secret from %d shares", threshold)
        return secret


class FeldmanSharer:
    """(t, n) dealer that publishes Feldman commitments with its shares."""

    def __init__(self, threshold: int, total_shares: int, params: FieldParameters):
        self.committer = FeldmanCommitter(params)
        check_sharing_shape(threshold, total_shares, params.q)
        self.threshold = threshold
        self.total_shares = total_shares
        self.params = params

    def split(self, secret: int, rng=None) -> tuple:
        """Split a secret in [0, q) into verifiable shares.

        Returns:
            (shares, commitment): n VerifiableShare records at x = 1..n, all
            carrying the same Commitment.
        """
        q = self.params.q
        coeffs = polynomial.generate(secret, self.threshold, q, rng)
        commitment = self.committer.commit(coeffs)
        shares = [
            VerifiableShare(i, polynomial.evaluate(coeffs, i, q), commitment)
            for i in range(1, self.total_shares + 1)
        ]
        log.debug("split secret into %d verifiable shares (threshold %d)",
                  self.total_shares, self.threshold)
        return shares, commitment

    def verify(self, share, commitment: Commitment = None) -> bool:
        return self.committer.verify(share, commitment)

    def reconstruct(self, shares, commitment: Commitment = None) -> int:
        """Reconstruct from verifiable shares.

        Uses the commitment carried by the first share unless one is given.
        """
        shares = list(shares)
        if not shares:
            raise InsufficientShares(self.threshold, 0)
        if commitment is None:
            commitment = getattr(shares[0], 'commitment', None)
        if commitment is None:
            raise InvalidParameters("No commitment supplied")
        if len(commitment) != self.threshold:
            raise InvalidParameters(
                f"Commitment has {len(commitment)} elements, expected {self.threshold}"
            )
        return self.committer.reconstruct_with_verification(shares, commitment)
