import math
import unittest
from functools import reduce

import numpy as np

from chembalance.balancer import (
    balance,
    balance_equation,
    format_balanced_equation,
    is_balanced,
    normalize_coefficients,
    null_space_vector,
    row_reduce,
)
from chembalance.errors import NoSolutionError, UnbalanceableError
from chembalance.parser import parse_equation


class TestRowReduce(unittest.TestCase):
    def test_reduced_form(self):
        matrix = np.array([[2, 0, -2], [0, 2, -1]])
        reduced, pivots = row_reduce(matrix)

        self.assertEqual(pivots, [0, 1])
        np.testing.assert_allclose(reduced, [[1.0, 0.0, -1.0], [0.0, 1.0, -0.5]])
        # Input is left untouched
        np.testing.assert_array_equal(matrix, [[2, 0, -2], [0, 2, -1]])

    def test_partial_pivoting_and_back_elimination(self):
        matrix = np.array([
            [3, 0, -1, 0],
            [8, 0, 0, -2],
            [0, 2, -2, -1],
        ])
        reduced, pivots = row_reduce(matrix)

        self.assertEqual(pivots, [0, 1, 2])
        np.testing.assert_allclose(reduced[:, :3], np.eye(3), atol=1e-12)
        np.testing.assert_allclose(reduced[:, 3], [-0.25, -1.25, -0.75])

    def test_zero_column_is_skipped(self):
        reduced, pivots = row_reduce(np.array([[0, 1], [0, 2]]))
        self.assertEqual(pivots, [1])
        np.testing.assert_allclose(reduced, [[0.0, 1.0], [0.0, 0.0]])

    def test_null_space_vector_fixes_first_free_column(self):
        matrix = np.array([[2, 0, -2, -2], [0, 2, -1, -2]])
        reduced, pivots = row_reduce(matrix)

        vector = null_space_vector(reduced, pivots, 4)
        np.testing.assert_allclose(vector, [1.0, 0.5, 1.0, 0.0])
        np.testing.assert_allclose(matrix @ vector, [0.0, 0.0], atol=1e-12)

    def test_null_space_vector_without_free_column(self):
        reduced, pivots = row_reduce(np.array([[2, 0], [0, -2]]))
        with self.assertRaises(ValueError):
            null_space_vector(reduced, pivots, 2)


class TestNormalizeCoefficients(unittest.TestCase):
    def test_positive_fractions(self):
        self.assertEqual(normalize_coefficients([0.25, 1.25, 0.75, 1.0]), [1, 5, 3, 4])

    def test_thirds_are_recovered_exactly(self):
        self.assertEqual(normalize_coefficients([1 / 2, 1 / 3, 1 / 6, 1.0]), [3, 2, 1, 6])

    def test_negative_vector_is_negated(self):
        self.assertEqual(normalize_coefficients([-0.5, -1.0]), [1, 2])

    def test_mixed_signs_take_absolute_values(self):
        self.assertEqual(normalize_coefficients([0.5, -1.0, 1.5]), [1, 2, 3])

    def test_all_zero_uses_unit_divisor(self):
        self.assertEqual(normalize_coefficients([0.0, 0.0]), [0, 0])


class TestBalance(unittest.TestCase):
    def assertValidBalance(self, text, expected):
        coefficients = balance_equation(text)
        self.assertEqual(coefficients, expected)
        self.assertTrue(all(isinstance(c, int) and c > 0 for c in coefficients))
        self.assertEqual(reduce(math.gcd, coefficients), 1)
        self.assertTrue(is_balanced(parse_equation(text), coefficients))

    def test_water(self):
        self.assertValidBalance("H2 + O2 -> H2O", [2, 1, 2])

    def test_propane_combustion(self):
        self.assertValidBalance("C3H8 + O2 -> CO2 + H2O", [1, 5, 3, 4])

    def test_rust(self):
        self.assertValidBalance("Fe + O2 -> Fe2O3", [4, 3, 2])

    def test_ammonia_equilibrium(self):
        self.assertValidBalance("N2 + H2 <=> NH3", [1, 3, 2])

    def test_permanganate(self):
        self.assertValidBalance(
            "KMnO4 + HCl -> KCl + MnCl2 + H2O + Cl2", [2, 16, 2, 2, 8, 5]
        )

    def test_groups(self):
        self.assertValidBalance(
            "Ca(OH)2 + H3PO4 -> Ca3(PO4)2 + H2O", [3, 2, 1, 6]
        )

    def test_hydrate(self):
        self.assertValidBalance("CuSO4·5H2O -> CuSO4 + H2O", [1, 1, 5])

    def test_states_do_not_affect_result(self):
        self.assertValidBalance("Zn(s) + HCl(aq) -> ZnCl2(aq) + H2(g)", [1, 2, 1, 1])

    def test_no_free_variable(self):
        with self.assertRaises(UnbalanceableError) as ctx:
            balance_equation("H2 -> O2")
        self.assertEqual(ctx.exception.kind, "Unbalanceable")

    def test_multiple_free_columns_are_not_resolved(self):
        with self.assertRaises(UnbalanceableError):
            balance_equation("H2 + O2 -> H2O + H2O2")

    def test_no_elements(self):
        equation = parse_equation("x -> y", strict=False)
        with self.assertRaises(NoSolutionError):
            balance(equation)

    def test_is_balanced_rejects_wrong_coefficients(self):
        equation = parse_equation("H2 + O2 -> H2O")
        self.assertFalse(is_balanced(equation, [1, 1, 1]))
        self.assertFalse(is_balanced(equation, [2, 1]))


class TestFormatBalancedEquation(unittest.TestCase):
    def test_unit_coefficients_are_omitted(self):
        equation = parse_equation("H2 + O2 -> H2O")
        self.assertEqual(
            format_balanced_equation(equation, balance(equation)), "2H2 + O2 -> 2H2O"
        )

    def test_written_coefficients_are_replaced(self):
        equation = parse_equation("2H2 + O2 -> 2H2O")
        self.assertEqual(
            format_balanced_equation(equation, balance(equation)), "2H2 + O2 -> 2H2O"
        )
        equation = parse_equation("3Fe + O2 -> Fe2O3")
        self.assertEqual(
            format_balanced_equation(equation, balance(equation)), "4Fe + 3O2 -> 2Fe2O3"
        )

    def test_arrow_is_preserved(self):
        equation = parse_equation("N2 + H2 <=> NH3")
        self.assertEqual(
            format_balanced_equation(equation, [1, 3, 2]), "N2 + 3H2 <=> 2NH3"
        )


if __name__ == '__main__':
    unittest.main()
