"""Prime-field arithmetic, the core primitive for threshare.

All operations take the modulus explicitly so the same helpers serve the
sharing field (mod q, or mod p in plain Shamir) and the commitment group
(mod p). Python ints are arbitrary precision, so no reduction tricks are
needed; every result is normalized into [0, modulus).
"""

import secrets

from threshare.errors import (
    InvalidParameters, NotInvertible, NonInvertibleDenominator,
    RandomnessUnavailable,
)


def _check_modulus(modulus: int):
    if modulus <= 1:
        raise InvalidParameters(f"Modulus must be > 1, got {modulus}")


def modpow(base: int, exponent: int, modulus: int) -> int:
    """base^exponent mod modulus by square-and-multiply.

    O(log exponent) modular multiplications. Negative bases are reduced
    first; negative exponents are rejected (use modinverse).
    """
    _check_modulus(modulus)
    if exponent < 0:
        raise InvalidParameters(f"Exponent must be non-negative, got {exponent}")
    result = 1
    base %= modulus
    while exponent:
        if exponent & 1:
            result = (result * base) % modulus
        base = (base * base) % modulus
        exponent >>= 1
    return result % modulus


def _egcd(a: int, b: int) -> tuple:
    """Iterative extended Euclid: returns (g, s) with s*a ≡ g (mod b)."""
    old_r, r = a, b
    old_s, s = 1, 0
    while r:
        quot = old_r // r
        old_r, r = r, old_r - quot * r
        old_s, s = s, old_s - quot * s
    return old_r, old_s


def modinverse(a: int, modulus: int) -> int:
    """Multiplicative inverse of a modulo modulus via extended Euclid.

    Works for any modulus > 1 and raises NotInvertible when
    gcd(a, modulus) != 1 (including a ≡ 0), rather than returning a
    meaningless value the way Fermat inversion would.
    """
    _check_modulus(modulus)
    a %= modulus
    if a == 0:
        raise NotInvertible(a, modulus)
    g, s = _egcd(a, modulus)
    if g != 1:
        raise NotInvertible(a, modulus)
    # s may be negative; bring it into range explicitly
    return (s % modulus + modulus) % modulus


def add(a: int, b: int, modulus: int) -> int:
    """(a + b) mod modulus."""
    return (a + b) % modulus


def sub(a: int, b: int, modulus: int) -> int:
    """(a - b) mod modulus, normalized non-negative."""
    return ((a % modulus) - (b % modulus) + modulus) % modulus


def mul(a: int, b: int, modulus: int) -> int:
    """(a * b) mod modulus."""
    return (a * b) % modulus


def div(a: int, b: int, modulus: int) -> int:
    """(a / b) mod modulus = a * b^(-1) mod modulus."""
    return mul(a, modinverse(b, modulus), modulus)


# Deterministic Miller-Rabin witnesses, correct for n < 3.3 * 10^24.
_SMALL_PRIMES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41)
_DETERMINISTIC_LIMIT = 3317044064679887385961981


def is_probable_prime(n: int, rounds: int = 40, rng=None) -> bool:
    """Miller-Rabin primality test.

    Deterministic below 3.3e24; above that, `rounds` random witnesses give
    an error probability of at most 4^-rounds.
    """
    if n < 2:
        return False
    for sp in _SMALL_PRIMES:
        if n == sp:
            return True
        if n % sp == 0:
            return False

    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    if n < _DETERMINISTIC_LIMIT:
        witnesses = _SMALL_PRIMES
    else:
        witnesses = [2 + rand_below(n - 3, rng) for _ in range(rounds)]

    for a in witnesses:
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


def rand_below(bound: int, rng=None) -> int:
    """Uniform random integer in [0, bound).

    rng: optional random.Random-like object (anything with randrange) for
    deterministic tests. Defaults to the OS CSPRNG via `secrets`.
    """
    if bound < 1:
        raise InvalidParameters(f"Random bound must be >= 1, got {bound}")
    try:
        if rng is not None:
            return rng.randrange(bound)
        return secrets.randbelow(bound)
    except (OSError, NotImplementedError) as exc:
        raise RandomnessUnavailable(f"Random source failed: {exc}") from exc


def lagrange_basis_at(xs: list, i: int, target: int, modulus: int) -> int:
    """Lagrange basis coefficient L_i(target) over GF(modulus).

    xs = list of x-coordinates.
    Returns prod_{j!=i} (target - x_j) / (x_i - x_j) mod modulus.
    Raises NonInvertibleDenominator if some x_j ≡ x_i.
    """
    xi = xs[i]
    num = 1
    den = 1
    for j, xj in enumerate(xs):
        if j == i:
            continue
        diff = sub(xi, xj, modulus)
        if diff == 0:
            raise NonInvertibleDenominator(xi % modulus, modulus)
        num = mul(num, sub(target, xj, modulus), modulus)
        den = mul(den, diff, modulus)
    return mul(num, modinverse(den, modulus), modulus)


def lagrange_basis_at_zero(xs: list, i: int, modulus: int) -> int:
    """Lagrange basis coefficient L_i(0) = prod_{j!=i} x_j / (x_j - x_i)."""
    return lagrange_basis_at(xs, i, 0, modulus)


def lagrange_interpolate(points: list, x: int, modulus: int) -> int:
    """Evaluate the interpolating polynomial through `points` at x.

    points = [(x_0, y_0), (x_1, y_1), ...] over GF(modulus).
    """
    xs = [p[0] for p in points]
    result = 0
    for i, (_, yi) in enumerate(points):
        basis = lagrange_basis_at(xs, i, x, modulus)
        result = add(result, mul(yi, basis, modulus), modulus)
    return result
