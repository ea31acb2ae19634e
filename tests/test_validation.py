import unittest

import numpy as np

from skrankone.decomposition import eig_rank_one_update
from skrankone.exceptions import InvalidInputError, RankOneUpdateError
from skrankone.utils import check_rank_one_inputs


class CheckInputsTests(unittest.TestCase):
    def setUp(self):
        self.V = np.eye(4)
        self.E = np.array([4.0, 1.0, 3.0, 2.0])
        self.t = np.array([1.0, 0.5, -0.5, 2.0])

    def test_canonical_form(self):
        V, E, t, rho = check_rank_one_inputs(
            self.V, np.diag(self.E), self.t.reshape(-1, 1), 2
        )
        self.assertTrue(np.array_equal(E, self.E))
        self.assertEqual(t.shape, (4,))
        self.assertIsInstance(rho, float)

    def test_row_vector(self):
        _, E, _, _ = check_rank_one_inputs(self.V, self.E.reshape(1, -1), self.t, 1.0)
        self.assertTrue(np.array_equal(E, self.E))

    def test_eigenvalue_mismatch(self):
        with self.assertRaises(InvalidInputError) as cm:
            check_rank_one_inputs(self.V, self.E[:3], self.t, 1.0)
        self.assertEqual(
            str(cm.exception), "E has 3 eigenvalues, whereas V has 4 columns."
        )
        self.assertEqual(cm.exception.stage, "input")

    def test_weight_mismatch(self):
        with self.assertRaises(InvalidInputError) as cm:
            check_rank_one_inputs(self.V, self.E, np.ones(5), 1.0)
        self.assertEqual(
            str(cm.exception), "t has 5 components, whereas V has 4 columns."
        )

    def test_non_vector_eigenvalues(self):
        with self.assertRaises(InvalidInputError):
            check_rank_one_inputs(self.V, np.ones((2, 3)), self.t, 1.0)

    def test_zero_rho(self):
        with self.assertRaises(InvalidInputError) as cm:
            check_rank_one_inputs(self.V, self.E, self.t, 0.0)
        self.assertEqual(
            str(cm.exception),
            "rho must be non-zero, an update with rho=0 leaves the "
            "eigendecomposition unchanged.",
        )

    def test_bad_rho(self):
        for rho in [np.nan, np.inf, "1.0", [1.0]]:
            with self.subTest(rho=rho):
                with self.assertRaises(InvalidInputError):
                    check_rank_one_inputs(self.V, self.E, self.t, rho)

    def test_bad_acc(self):
        for acc in [0.0, -1e-12, 1.0]:
            with self.subTest(acc=acc):
                with self.assertRaises(InvalidInputError):
                    check_rank_one_inputs(self.V, self.E, self.t, 1.0, acc=acc)

    def test_bad_deflation_guard(self):
        with self.assertRaises(InvalidInputError):
            check_rank_one_inputs(self.V, self.E, self.t, 1.0, deflation_guard=0)

    def test_non_orthonormal(self):
        V = self.V.copy()
        V[0, 1] = 1e-3
        with self.assertRaises(InvalidInputError) as cm:
            check_rank_one_inputs(V, self.E, self.t, 1.0)
        self.assertTrue(str(cm.exception).startswith("The columns of V must be"))

        # the check can be disabled
        check_rank_one_inputs(V, self.E, self.t, 1.0, ortho_tol=None)

    def test_non_finite(self):
        E = self.E.copy()
        E[1] = np.nan
        with self.assertRaises(InvalidInputError) as cm:
            check_rank_one_inputs(self.V, E, self.t, 1.0)
        self.assertTrue(str(cm.exception).startswith("Invalid E"))

    def test_error_hierarchy(self):
        # precondition failures are value errors raised before any computation
        with self.assertRaises(ValueError):
            eig_rank_one_update(self.V, self.E, self.t, 0.0)
        with self.assertRaises(RankOneUpdateError):
            eig_rank_one_update(self.V, self.E, self.t, 0.0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
