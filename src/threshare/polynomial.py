"""Random polynomials over a prime field.

A sharing polynomial is a list of coefficients, lowest degree first:
coeffs = [a_0, a_1, ..., a_{t-1}] with a_0 = secret. The list lives only
for the duration of one split and is never logged.
"""

from threshare.errors import InvalidParameters
from threshare.field import add, mul, sub, div, rand_below


def generate(secret: int, threshold: int, field_bound: int, rng=None) -> list:
    """Build a random degree-(threshold-1) polynomial with f(0) = secret.

    Args:
        secret: Element of [0, field_bound). Out-of-range secrets are
            rejected, never silently reduced.
        threshold: Number of coefficients (t >= 1).
        field_bound: Prime modulus the coefficients live in.
        rng: Optional random.Random instance for deterministic tests.

    Returns:
        [secret, a_1, ..., a_{t-1}] with a_i uniform in [0, field_bound).
    """
    if threshold < 1:
        raise InvalidParameters(f"Threshold must be >= 1, got {threshold}")
    if not isinstance(secret, int):
        raise InvalidParameters("Secret must be an integer field element")
    if not (0 <= secret < field_bound):
        raise InvalidParameters(
            f"Secret must be in [0, {field_bound}); it does not fit the field"
        )
    return [secret] + [rand_below(field_bound, rng) for _ in range(threshold - 1)]


def evaluate(coeffs: list, x: int, modulus: int) -> int:
    """Evaluate sum(coeffs[i] * x^i) mod modulus using Horner's method.

    coeffs = [a_0, a_1, ..., a_d] (lowest degree first). One multiply and
    one add per coefficient; powers of x are never recomputed.
    """
    result = 0
    x %= modulus
    for c in reversed(coeffs):
        result = add(mul(result, x, modulus), c, modulus)
    return result


def newton_coefficients(points: list, modulus: int) -> tuple:
    """Compute Newton divided difference coefficients from points.

    O(n^2) setup. Returns (xs, coeffs) for use with newton_eval.
    points = [(x_0, y_0), ..., (x_{n-1}, y_{n-1})].
    """
    n = len(points)
    xs = [p[0] for p in points]
    d = [p[1] % modulus for p in points]

    for j in range(1, n):
        for i in range(n - 1, j - 1, -1):
            d[i] = div(sub(d[i], d[i - 1], modulus), sub(xs[i], xs[i - j], modulus), modulus)

    return xs, d


def newton_eval(xs: list, coeffs: list, t: int, modulus: int) -> int:
    """Evaluate Newton-form polynomial at t in O(n)."""
    n = len(coeffs)
    result = coeffs[n - 1]
    for i in range(n - 2, -1, -1):
        result = add(mul(result, sub(t, xs[i], modulus), modulus), coeffs[i], modulus)
    return result


class InterpolatingPoly:
    """Precomputed polynomial from points for fast multi-evaluation.

    O(n^2) construction, O(n) per evaluation.
    """

    __slots__ = ('xs', 'coeffs', 'n', 'modulus')

    def __init__(self, points: list, modulus: int):
        self.modulus = modulus
        self.xs, self.coeffs = newton_coefficients(points, modulus)
        self.n = len(points)

    def eval_at(self, t: int) -> int:
        return newton_eval(self.xs, self.coeffs, t, self.modulus)
