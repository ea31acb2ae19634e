import unittest
import warnings

import numpy as np

from skrankone.datasets import make_rank_one_problem
from skrankone.decomposition import eig_rank_one_update
from skrankone.decomposition._rank_one_update import (
    _clean_eigenvalues,
    _deflate_repeated,
    _deflate_small_weights,
    _sort_eigenpairs,
)
from skrankone.exceptions import DeflationWarning


EPSILON = 1e-8
ACC = 1e-12


class RepeatedEigenvalueTests(unittest.TestCase):
    def setUp(self):
        self.V = np.eye(3)
        self.E = np.array([2.0, 2.0, 5.0])
        self.t = np.array([0.6, 0.8, 1.0])

    def test_repeated_pair(self):
        # the repeated pair collapses onto a single pole, the other direction
        # is an exact eigenvector orthogonal to the update
        W, F, stats = eig_rank_one_update(self.V, self.E, self.t, 1.0)

        self.assertEqual(stats.n_solved, 2)
        self.assertEqual(stats.n_deflated, 1)
        self.assertEqual(F[0], 2.0)
        self.assertTrue(np.allclose(W[:, 0], [0.8, -0.6, 0.0]))
        self.assertAlmostEqual(W[:, 0] @ (self.V @ self.t), 0.0)

        A = np.diag(self.E) + np.outer(self.t, self.t)
        self.assertTrue(np.allclose(np.sort(F), np.linalg.eigvalsh(A)))
        self.assertTrue(np.allclose(W @ np.diag(F) @ W.T, A, atol=EPSILON))
        self.assertLessEqual(np.max(np.abs(W.T @ W - np.eye(3))), 10 * ACC * 3)

    def test_deflated_columns_unchanged(self):
        # deflated columns of W are exactly the reflected eigenvectors
        lam, V, t = _sort_eigenpairs(self.V, self.E, self.t)
        V_reflected, t_reflected, n_skipped = _deflate_repeated(
            lam, V, t, 1.0, threshold=1e-10
        )
        W, _, _ = eig_rank_one_update(self.V, self.E, self.t, 1.0)

        self.assertEqual(n_skipped, 0)
        self.assertTrue(np.array_equal(W[:, 0], V_reflected[:, 0]))
        self.assertTrue(np.allclose(t_reflected, [0.0, -1.0, 1.0]))

    def test_pivot_follows_rho(self):
        lam, V, t = _sort_eigenpairs(self.V, self.E, self.t)

        _, t_positive, _ = _deflate_repeated(lam, V, t, 1.0, threshold=1e-10)
        self.assertTrue(np.allclose(t_positive, [0.0, -1.0, 1.0]))

        _, t_negative, _ = _deflate_repeated(lam, V, t, -1.0, threshold=1e-10)
        self.assertTrue(np.allclose(t_negative, [-1.0, 0.0, 1.0]))

    def test_reflection_is_orthogonal(self):
        V, E, t = make_rank_one_problem(
            9, multiplicities=[3, 1, 4, 1], random_state=0
        )
        lam, V, t = _sort_eigenpairs(V, E, t)
        for rho in [1.0, -1.0]:
            with self.subTest(rho=rho):
                V_reflected, t_reflected, _ = _deflate_repeated(
                    lam, V, t, rho, threshold=1e-10
                )
                self.assertLessEqual(
                    np.max(np.abs(V_reflected.T @ V_reflected - np.eye(9))),
                    10 * ACC * 9,
                )
                # the update itself is unchanged
                self.assertTrue(np.allclose(V_reflected @ t_reflected, V @ t))
                self.assertEqual(np.count_nonzero(t_reflected), 4)

    def test_multiplicities(self):
        V, E, t = make_rank_one_problem(
            10, multiplicities=[3, 2, 1, 4], random_state=1
        )
        for rho in [0.9, -0.9]:
            with self.subTest(rho=rho):
                A = V @ np.diag(E) @ V.T + rho * np.outer(V @ t, V @ t)
                W, F, stats = eig_rank_one_update(V, E, t, rho)

                self.assertEqual(stats.n_solved, 4)
                self.assertEqual(stats.n_deflated, 6)
                self.assertTrue(
                    np.allclose(np.sort(F), np.linalg.eigvalsh(A), atol=EPSILON)
                )
                self.assertLessEqual(
                    np.max(np.abs(W.T @ W - np.eye(10))), 10 * ACC * 10
                )
                self.assertTrue(np.allclose(A @ W, W * F, atol=EPSILON))

    def test_skipped_reflection(self):
        # a reflection vector below the stability threshold is not applied
        lam = np.array([1.0, 1.0])
        V = np.eye(2)
        t = np.array([1e-14, 1.0])

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            V_out, t_out, n_skipped = _deflate_repeated(
                lam, V, t, -1.0, threshold=2.0
            )

        self.assertEqual(n_skipped, 1)
        self.assertTrue(np.array_equal(V_out, V))
        self.assertTrue(np.allclose(t_out, [-1.0, 0.0]))
        self.assertTrue(issubclass(w[-1].category, DeflationWarning))

    def test_skipped_reflection_verbose(self):
        V = np.eye(2)
        E = np.array([1.0, 1.0])
        t = np.array([1.0, 0.0])

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            _, _, stats = eig_rank_one_update(
                V, E, t, 1.0, deflation_guard=1e13, verbose=True
            )

        self.assertEqual(stats.n_skipped_reflections, 1)
        self.assertTrue(any(issubclass(x.category, DeflationWarning) for x in w))

    def test_already_concentrated(self):
        # weights already on the pivot need no reflection and raise no warning
        lam = np.array([1.0, 1.0, 1.0])
        V = np.eye(3)
        t = np.array([0.0, 0.0, -2.0])

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            V_out, t_out, n_skipped = _deflate_repeated(
                lam, V, t, 1.0, threshold=1e-10
            )

        self.assertEqual(n_skipped, 0)
        self.assertTrue(np.array_equal(V_out, V))
        self.assertTrue(np.array_equal(t_out, t))


class CleanupTests(unittest.TestCase):
    def test_sort(self):
        V = np.arange(9.0).reshape(3, 3)
        lam, V_sorted, t = _sort_eigenpairs(
            V, np.array([3.0, 1.0, 2.0]), np.array([30.0, 10.0, 20.0])
        )
        self.assertTrue(np.array_equal(lam, [1.0, 2.0, 3.0]))
        self.assertTrue(np.array_equal(t, [10.0, 20.0, 30.0]))
        self.assertTrue(np.array_equal(V_sorted, V[:, [1, 2, 0]]))

    def test_clean_eigenvalues(self):
        lam = np.array([-1e-13, 1e-16, 4.0])
        cleaned = _clean_eigenvalues(lam, acc=1e-12)
        # tol = 3 * 1e-12 * sqrt(4)
        self.assertTrue(np.array_equal(cleaned, [0.0, 0.0, 4.0]))
        self.assertEqual(lam[0], -1e-13)

    def test_near_zero_eigenvalues_repeat(self):
        # eigenvalues snapped to zero are deflated as a repeated group
        V = np.eye(3)
        E = np.array([1e-15, -1e-15, 3.0])
        t = np.array([1.0, 1.0, 1.0])
        W, F, stats = eig_rank_one_update(V, E, t, 1.0)

        self.assertEqual(stats.n_solved, 2)
        self.assertEqual(F[0], 0.0)
        A = np.diag(E) + np.ones((3, 3))
        self.assertTrue(np.allclose(np.sort(F), np.linalg.eigvalsh(A)))

    def test_small_weights(self):
        t = np.array([1e-13, 0.5, -1e-12, 2.0])
        t_norm = np.linalg.norm(t)
        deflated = _deflate_small_weights(t, 10.0, t_norm, 1e-12, 10.0)
        self.assertTrue(np.array_equal(deflated, [0.0, 0.5, 0.0, 2.0]))

    def test_zero_norm_weights(self):
        deflated = _deflate_small_weights(np.zeros(3), 10.0, 0.0, 1e-12, 10.0)
        self.assertTrue(np.array_equal(deflated, np.zeros(3)))


if __name__ == "__main__":
    unittest.main(verbosity=2)
