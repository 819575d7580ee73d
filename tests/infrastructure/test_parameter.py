import unittest

import numpy as np

from src.chaindnn.domain._errors import (
    MissingGradientError,
    MissingOptimizerError,
    ShapeMismatchError,
)
from src.chaindnn.infrastructure._optimizers import SGD, Adam
from src.chaindnn.infrastructure._parameter import Parameter


def make_param(values=(1.0, 2.0, 3.0)) -> Parameter:
    return Parameter("w", np.asarray(values, dtype=np.float32), owner="Test")


class TestParameterBasics(unittest.TestCase):
    def test_data_is_copied(self):
        src = np.array([1.0, 2.0], dtype=np.float32)
        p = Parameter("w", src)
        src[0] = 99.0
        self.assertEqual(float(p.data[0]), 1.0)

    def test_metadata(self):
        p = make_param()
        self.assertEqual(p.name, "w")
        self.assertEqual(p.shape, (3,))
        self.assertEqual(p.size, 3)
        self.assertEqual(p.dtype, np.float32)
        self.assertIsNone(p.grad)
        self.assertIsNone(p.state)

    def test_repr_mentions_name_and_shape(self):
        r = repr(make_param())
        self.assertIn("'w'", r)
        self.assertIn("(3,)", r)


class TestParameterGradients(unittest.TestCase):
    def test_set_grad_overwrites(self):
        p = make_param()
        p.set_grad(np.ones(3, dtype=np.float32))
        p.set_grad(np.full(3, 2.0, dtype=np.float32))
        np.testing.assert_allclose(p.grad, np.full(3, 2.0))

    def test_set_grad_shape_mismatch(self):
        p = make_param()
        with self.assertRaises(ShapeMismatchError):
            p.set_grad(np.ones((1, 3), dtype=np.float32))

    def test_zero_grad_clears(self):
        p = make_param()
        p.set_grad(np.ones(3, dtype=np.float32))
        p.zero_grad()
        self.assertIsNone(p.grad)


class TestParameterUpdates(unittest.TestCase):
    def test_apply_update_without_optimizer_raises(self):
        p = make_param()
        p.set_grad(np.ones(3, dtype=np.float32))
        with self.assertRaises(MissingOptimizerError):
            p.apply_update()

    def test_apply_update_without_grad_raises(self):
        p = make_param()
        p.register_optimizer(SGD(lr=0.1))
        with self.assertRaises(MissingGradientError):
            p.apply_update()

    def test_apply_update_sgd(self):
        p = make_param()
        p.register_optimizer(SGD(lr=0.5))
        g = np.array([0.1, -0.2, 0.3], dtype=np.float32)
        p.set_grad(g)
        p.apply_update()
        np.testing.assert_allclose(
            p.data, np.array([1.0, 2.0, 3.0]) - 0.5 * g, rtol=1e-6, atol=1e-7
        )
        # gradient is left in place
        np.testing.assert_allclose(p.grad, g)

    def test_update_is_in_place(self):
        p = make_param()
        ref = p.data
        p.register_optimizer(SGD(lr=1.0))
        p.set_grad(np.ones(3, dtype=np.float32))
        p.apply_update()
        self.assertIs(p.data, ref)

    def test_state_created_once(self):
        p = make_param()
        p.register_optimizer(Adam(lr=0.1))
        first = p.state
        p.register_optimizer(SGD(lr=0.1))
        self.assertIs(p.state, first)

    def test_state_matches_shape(self):
        p = Parameter("w", np.zeros((2, 5), dtype=np.float32))
        p.register_optimizer(Adam())
        self.assertEqual(p.state.shape, (2, 5))

    def test_copy_from(self):
        p = make_param()
        p.copy_from(np.array([7.0, 8.0, 9.0]))
        np.testing.assert_allclose(p.data, [7.0, 8.0, 9.0])
        with self.assertRaises(ShapeMismatchError):
            p.copy_from(np.zeros(2))


if __name__ == "__main__":
    unittest.main()
