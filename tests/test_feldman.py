"""Tests for Feldman verifiable secret sharing."""

import dataclasses
import logging
import random
from itertools import combinations

import pytest
from threshare.errors import (
    InsufficientShares, InvalidParameters, NonInvertibleDenominator,
    ShareVerificationFailed,
)
from threshare.feldman import (
    Commitment, FeldmanCommitter, FeldmanSharer, VerifiableShare,
)
from threshare.params import FieldParameters
from threshare.polynomial import evaluate
from threshare.shamir import Share


def tampered(share: VerifiableShare, q: int) -> VerifiableShare:
    return VerifiableShare(share.x, (share.y + 1) % q, share.commitment)


class TestConcreteScenario:
    """p=23, q=11, g=2, t=3, n=5, secret=7."""

    def test_all_shares_verify(self, toy_group, rng):
        sharer = FeldmanSharer(3, 5, toy_group)
        shares, commitment = sharer.split(7, rng)
        assert [s.x for s in shares] == [1, 2, 3, 4, 5]
        assert all(sharer.verify(s, commitment) for s in shares)

    def test_every_mutation_fails(self, toy_group, rng):
        sharer = FeldmanSharer(3, 5, toy_group)
        shares, commitment = sharer.split(7, rng)
        for s in shares:
            assert not sharer.verify(tampered(s, 11), commitment)

    def test_reconstruct_every_quorum(self, toy_group, rng):
        sharer = FeldmanSharer(3, 5, toy_group)
        shares, commitment = sharer.split(7, rng)
        for subset in combinations(shares, 3):
            assert sharer.reconstruct(subset) == 7


class TestCommit:

    def test_known_values(self, toy_group):
        # 2^7 = 128 = 13 mod 23, 2^1 = 2, 2^2 = 4
        committer = FeldmanCommitter(toy_group)
        assert committer.commit([7, 1, 2]) == Commitment((13, 2, 4))

    def test_hand_checked_share(self, toy_group):
        # f(x) = 7 + x + 2x^2; f(2) = 17 = 6 mod 11; g^6 = 18 mod 23
        committer = FeldmanCommitter(toy_group)
        commitment = committer.commit([7, 1, 2])
        assert committer.verify(Share(2, 6), commitment)
        assert not committer.verify(Share(2, 7), commitment)

    def test_order_preserved(self, safe_prime_group):
        committer = FeldmanCommitter(safe_prime_group)
        coeffs = [500, 1, 2, 3]
        commitment = committer.commit(coeffs)
        assert len(commitment) == 4
        assert commitment.threshold == 4
        assert commitment[0] == pow(4, 500, 2039)
        share = Share(2, evaluate(coeffs, 2, 1019))
        assert committer.verify(share, commitment)
        reordered = Commitment(reversed(commitment.values))
        assert not committer.verify(share, reordered)

    def test_values_live_in_the_right_moduli(self, safe_prime_group, rng):
        sharer = FeldmanSharer(3, 20, safe_prime_group)
        shares, commitment = sharer.split(1000, rng)
        assert all(0 <= s.y < 1019 for s in shares)
        assert all(0 < c < 2039 for c in commitment)

    def test_fingerprint(self):
        a = Commitment((1, 2, 3))
        assert a.fingerprint() == Commitment([1, 2, 3]).fingerprint()
        assert a.fingerprint() != Commitment((3, 2, 1)).fingerprint()
        assert a.fingerprint() != Commitment((1, 23)).fingerprint()

    def test_hashable_and_immutable(self):
        c = Commitment([5, 6])
        assert {c: 1}[Commitment((5, 6))] == 1
        with pytest.raises(dataclasses.FrozenInstanceError):
            c.values = (7,)


class TestVerification:

    def test_large_x_powers_reduced_mod_q(self, safe_prime_group, rng):
        """x^i overflows q for high-index shares; check still holds."""
        sharer = FeldmanSharer(5, 60, safe_prime_group)
        shares, commitment = sharer.split(321, rng)
        assert all(sharer.verify(s) for s in shares)

    def test_plain_share_with_commitment(self, safe_prime_group, rng):
        sharer = FeldmanSharer(3, 5, safe_prime_group)
        shares, commitment = sharer.split(11, rng)
        assert sharer.verify(shares[2].share, commitment)

    def test_plain_share_without_commitment(self, toy_group):
        assert not FeldmanCommitter(toy_group).verify(Share(1, 3))

    def test_mixed_commitments_rejected(self, toy_group):
        committer = FeldmanCommitter(toy_group)
        coeffs_a, coeffs_b = [7, 1, 2], [7, 3, 4]
        commit_a = committer.commit(coeffs_a)
        commit_b = committer.commit(coeffs_b)
        share_a = VerifiableShare(1, evaluate(coeffs_a, 1, 11), commit_a)
        assert committer.verify(share_a)
        assert not committer.verify(share_a, commit_b)
        assert not committer.verify(share_a.share, commit_b)

    def test_out_of_range_y(self, toy_group):
        committer = FeldmanCommitter(toy_group)
        commitment = committer.commit([7, 1, 2])
        # 6 + 11 is congruent but not canonical
        assert not committer.verify(Share(2, 17), commitment)

    def test_empty_commitment(self, toy_group):
        assert not FeldmanCommitter(toy_group).verify(Share(1, 1), Commitment(()))

    def test_verify_all(self, safe_prime_group, rng):
        sharer = FeldmanSharer(3, 6, safe_prime_group)
        shares, commitment = sharer.split(99, rng)
        shares[4] = tampered(shares[4], 1019)
        assert sharer.committer.verify_all(shares, commitment) == [5]

    def test_failure_logged_without_value(self, toy_group, caplog):
        committer = FeldmanCommitter(toy_group)
        commitment = committer.commit([7, 1, 2])
        with caplog.at_level(logging.WARNING, logger="threshare"):
            committer.verify_all([Share(3, 0)], commitment)
        assert "x=3 failed" in caplog.text


class TestReconstructWithVerification:

    def test_bad_share_aborts_before_interpolation(self, safe_prime_group, rng):
        sharer = FeldmanSharer(3, 5, safe_prime_group)
        shares, commitment = sharer.split(123, rng)
        # Corrupt a share beyond the first t: still caught
        shares[4] = tampered(shares[4], 1019)
        with pytest.raises(ShareVerificationFailed) as exc_info:
            sharer.committer.reconstruct_with_verification(shares, commitment)
        assert exc_info.value.x == 5

    def test_shares_from_two_splits(self, safe_prime_group):
        sharer = FeldmanSharer(3, 5, safe_prime_group)
        first, _ = sharer.split(123, random.Random(1))
        second, _ = sharer.split(123, random.Random(2))
        with pytest.raises(ShareVerificationFailed):
            sharer.reconstruct([first[0], first[1], second[2]])

    def test_insufficient(self, toy_group, rng):
        sharer = FeldmanSharer(3, 5, toy_group)
        shares, commitment = sharer.split(7, rng)
        with pytest.raises(InsufficientShares):
            sharer.reconstruct(shares[:2])
        with pytest.raises(InsufficientShares):
            sharer.reconstruct([])

    def test_duplicate_x(self, toy_group, rng):
        sharer = FeldmanSharer(3, 5, toy_group)
        shares, commitment = sharer.split(7, rng)
        with pytest.raises(NonInvertibleDenominator):
            sharer.reconstruct([shares[0], shares[0], shares[1]])

    def test_explicit_commitment(self, safe_prime_group, rng):
        sharer = FeldmanSharer(4, 7, safe_prime_group)
        shares, commitment = sharer.split(1018, rng)
        committer = FeldmanCommitter(safe_prime_group)
        assert committer.reconstruct_with_verification(shares[3:], commitment) == 1018

    def test_plain_shares_need_commitment(self, toy_group, rng):
        sharer = FeldmanSharer(3, 5, toy_group)
        shares, commitment = sharer.split(7, rng)
        plain = [s.share for s in shares]
        with pytest.raises(InvalidParameters):
            sharer.reconstruct(plain)
        assert sharer.reconstruct(plain, commitment) == 7

    def test_malformed_record(self, toy_group):
        committer = FeldmanCommitter(toy_group)
        commitment = committer.commit([7, 1, 2])
        with pytest.raises(InvalidParameters):
            committer.reconstruct_with_verification([(1,), (2, 3), (3, 4)], commitment)
        with pytest.raises(InvalidParameters):
            committer.reconstruct_with_verification([(1, "3"), (2, 6), (3, 6)], commitment)
        with pytest.raises(InvalidParameters):
            committer.verify((2, None), commitment)

    def test_wrong_threshold_commitment(self, toy_group, rng):
        shares, _ = FeldmanSharer(2, 5, toy_group).split(7, rng)
        with pytest.raises(InvalidParameters):
            FeldmanSharer(3, 5, toy_group).reconstruct(shares)


class TestParameters:

    def test_needs_group(self):
        with pytest.raises(InvalidParameters):
            FeldmanCommitter(FieldParameters(23))

    def test_bad_generator(self):
        with pytest.raises(InvalidParameters):
            FeldmanSharer(3, 5, FieldParameters(23, 11, 5))

    def test_shares_must_fit_exponent_field(self, toy_group):
        FeldmanSharer(3, 10, toy_group)
        with pytest.raises(InvalidParameters):
            FeldmanSharer(3, 11, toy_group)

    def test_secret_reduced_by_q_not_p(self, toy_group):
        sharer = FeldmanSharer(3, 5, toy_group)
        with pytest.raises(InvalidParameters):
            sharer.split(11)
        sharer.split(10)
