"""Shamir secret sharing over a prime field.

Information-theoretically secure (t, n) threshold sharing: the secret is
the constant term of a random degree-(t-1) polynomial, shares are its
values at x = 1..n, and any t shares recover f(0) by Lagrange
interpolation while t-1 shares are consistent with every secret.
"""

import logging
from typing import NamedTuple

from threshare.errors import (
    InsufficientShares, InvalidParameters, NonInvertibleDenominator,
)
from threshare.field import (
    add, mul, is_probable_prime, lagrange_basis_at_zero, lagrange_interpolate,
)
from threshare.params import DEFAULT_SHARING_FIELD, FieldParameters
from threshare import polynomial

log = logging.getLogger(__name__)


class Share(NamedTuple):
    """One evaluation point (x, f(x)). x identifies the participant."""

    x: int
    y: int

    def __repr__(self):
        # y is secret material; keep it out of tracebacks and logs
        return f"Share(x={self.x}, y=<redacted>)"


def check_sharing_shape(threshold: int, total_shares: int, modulus: int):
    """Validate (t, n) against a sharing modulus. Raises InvalidParameters."""
    if not isinstance(threshold, int) or not isinstance(total_shares, int):
        raise InvalidParameters("threshold and total_shares must be integers")
    if threshold < 1:
        raise InvalidParameters(f"Threshold must be >= 1, got {threshold}")
    if total_shares < threshold:
        raise InvalidParameters(
            f"total_shares must be >= threshold, got n={total_shares}, t={threshold}"
        )
    if total_shares >= modulus:
        # x = 1..n must be distinct nonzero field elements
        raise InvalidParameters(
            f"total_shares={total_shares} does not fit the field of size {modulus}"
        )


def as_points(shares, modulus: int) -> list:
    """Normalize share records into (x, y) tuples, rejecting x ≡ 0."""
    points = []
    for share in shares:
        try:
            x, y = share[0], share[1]
        except (TypeError, IndexError) as exc:
            raise InvalidParameters(f"Malformed share record: {exc}") from exc
        if not isinstance(x, int) or not isinstance(y, int):
            raise InvalidParameters("Share coordinates must be integers")
        if x % modulus == 0:
            raise InvalidParameters("Share x-coordinate must be nonzero mod the field")
        points.append((x, y % modulus))
    return points


def interpolate_at_zero(points: list, modulus: int) -> int:
    """Recover f(0) from points: sum_i y_i * prod_{j!=i} x_j / (x_j - x_i).

    Raises NonInvertibleDenominator when two points share an x-coordinate.
    The result is always in [0, modulus).
    """
    xs = [p[0] for p in points]
    secret = 0
    for i, (_, yi) in enumerate(points):
        secret = add(secret, mul(yi, lagrange_basis_at_zero(xs, i, modulus), modulus), modulus)
    return secret


class ShamirSharer:
    """(t, n) Shamir sharing over GF(prime).

    field: FieldParameters (shares live mod its share_modulus) or a bare
    prime int.

    Holds only public configuration; split and reconstruct are pure
    functions of their inputs plus, for split, fresh randomness.
    """

    def __init__(self, threshold: int, total_shares: int, field=DEFAULT_SHARING_FIELD):
        if isinstance(field, FieldParameters):
            field.validate()
            params = field
        elif isinstance(field, int) and is_probable_prime(field):
            params = FieldParameters(field)
        else:
            raise InvalidParameters(f"Field modulus must be prime, got {field}")
        prime = params.share_modulus
        check_sharing_shape(threshold, total_shares, prime)
        self.threshold = threshold
        self.total_shares = total_shares
        self.params = params
        self.prime = prime

    def __repr__(self):
        return (f"ShamirSharer(threshold={self.threshold}, "
                f"total_shares={self.total_shares}, prime_bits={self.prime.bit_length()})")

    def split(self, secret: int, rng=None) -> list:
        """Split a secret into total_shares shares.

        Args:
            secret: Element of [0, prime).
            rng: Optional random.Random instance for deterministic tests.

        Returns:
            List of Share(x, y) with x in {1..n} and y = f(x), where f is a
            fresh random degree-(t-1) polynomial with f(0) = secret.
        """
        coeffs = polynomial.generate(secret, self.threshold, self.prime, rng)
        shares = [
            Share(i, polynomial.evaluate(coeffs, i, self.prime))
            for i in range(1, self.total_shares + 1)
        ]
        log.debug("split secret into %d shares (threshold %d, %d-bit field)",
                  self.total_shares, self.threshold, self.prime.bit_length())
        return shares

    def _quorum(self, shares) -> list:
        shares = list(shares)
        if len(shares) < self.threshold:
            raise InsufficientShares(self.threshold, len(shares))
        return as_points(shares[:self.threshold], self.prime)

    def reconstruct(self, shares) -> int:
        """Reconstruct the secret from the first `threshold` shares given.

        Raises InsufficientShares with fewer than t shares and
        NonInvertibleDenominator on duplicate x-coordinates.
        """
        points = self._quorum(shares)
        secret = interpolate_at_zero(points, self.prime)
        log.debug("reconstructed secret from %d shares", len(points))
        return secret

    def reconstruct_at(self, shares, target: int) -> int:
        """Evaluate the shared polynomial at an arbitrary x.

        Used to re-issue a participant's share; reconstruct_at(shares, 0)
        equals reconstruct(shares).
        """
        points = self._quorum(shares)
        return lagrange_interpolate(points, target, self.prime)

    def consistency_check(self, shares) -> list:
        """Detect corrupt shares by leave-one-out interpolation.

        Given more than t shares that should lie on one degree-(t-1)
        polynomial, re-derives each share from the Newton-form polynomial
        through t of the others.

        Returns:
            Indices into `shares` that are inconsistent. Empty when there
            is no redundancy (n <= t).
        """
        points = as_points(shares, self.prime)
        n = len(points)
        if n <= self.threshold:
            return []

        seen = set()
        for x, _ in points:
            if x % self.prime in seen:
                raise NonInvertibleDenominator(x % self.prime, self.prime)
            seen.add(x % self.prime)

        corrupt = []
        for i in range(n):
            others = [s for j, s in enumerate(points) if j != i][:self.threshold]
            poly = polynomial.InterpolatingPoly(others, self.prime)
            if poly.eval_at(points[i][0]) != points[i][1]:
                corrupt.append(i)

        if corrupt:
            log.warning("consistency check flagged share indices %s", corrupt)
        return corrupt
