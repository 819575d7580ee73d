import unittest

import numpy as np

from src.chaindnn.domain._errors import ShapeMismatchError
from src.chaindnn.infrastructure._optimizers import SGD, SGDState, Adam, AdamState


class TestSGD(unittest.TestCase):
    def test_defaults(self):
        opt = SGD()
        self.assertEqual(opt.lr, 1e-3)
        self.assertEqual(opt.momentum, 0.0)

    def test_plain_update_is_lr_times_grad(self):
        state = SGD(lr=0.5).create_state((3,), np.float32)
        self.assertIsInstance(state, SGDState)
        self.assertIsNone(state.velocity)
        g = np.array([0.1, -0.2, 0.3], dtype=np.float32)
        np.testing.assert_allclose(state.update(g), 0.5 * g, rtol=1e-6)

    def test_momentum_accumulates_velocity(self):
        state = SGD(lr=0.1, momentum=0.9).create_state((2,), np.float64)
        g = np.array([1.0, -1.0])
        d1 = state.update(g)
        d2 = state.update(g)
        np.testing.assert_allclose(d1, 0.1 * g)
        np.testing.assert_allclose(d2, 0.1 * (0.9 * g + g))

    def test_shape_mismatch(self):
        state = SGD(lr=0.1).create_state((2, 2), np.float32)
        with self.assertRaises(ShapeMismatchError):
            state.update(np.zeros((4,), dtype=np.float32))

    def test_invalid_hyperparams_raise(self):
        with self.assertRaises(ValueError):
            SGD(lr=0.0)
        with self.assertRaises(ValueError):
            SGD(lr=-1.0)
        with self.assertRaises(ValueError):
            SGD(lr=0.1, momentum=1.0)
        with self.assertRaises(ValueError):
            SGD(lr=0.1, momentum=-0.1)

    def test_factory_is_immutable(self):
        opt = SGD(lr=0.1)
        with self.assertRaises(Exception):
            opt.lr = 0.2  # type: ignore[misc]


class TestAdam(unittest.TestCase):
    def test_state_starts_at_zero_with_t1(self):
        state = Adam().create_state((2, 3), np.float32)
        self.assertIsInstance(state, AdamState)
        self.assertEqual(state.t, 1)
        np.testing.assert_array_equal(state.m, np.zeros((2, 3)))
        np.testing.assert_array_equal(state.v, np.zeros((2, 3)))
        self.assertEqual(state.m.dtype, np.float32)

    def test_first_update_matches_reference(self):
        lr, b1, b2, eps = 0.1, 0.9, 0.999, 1e-8
        state = Adam(lr=lr, betas=(b1, b2), eps=eps).create_state((2,), np.float64)
        g = np.array([0.5, -2.0])

        delta = state.update(g)

        m = (1 - b1) * g
        v = (1 - b2) * g * g
        m_hat = m / (1 - b1)
        v_hat = v / (1 - b2)
        expected = lr * m_hat / (np.sqrt(v_hat) + eps)
        np.testing.assert_allclose(delta, expected, rtol=1e-10)
        self.assertEqual(state.t, 2)

    def test_two_steps_match_reference(self):
        lr, b1, b2, eps = 0.01, 0.8, 0.99, 1e-8
        state = Adam(lr=lr, betas=(b1, b2), eps=eps).create_state((1,), np.float64)
        g1 = np.array([1.0])
        g2 = np.array([3.0])

        state.update(g1)
        delta = state.update(g2)

        m = b1 * ((1 - b1) * g1) + (1 - b1) * g2
        v = b2 * ((1 - b2) * g1**2) + (1 - b2) * g2**2
        expected = lr * (m / (1 - b1**2)) / (np.sqrt(v / (1 - b2**2)) + eps)
        np.testing.assert_allclose(delta, expected, rtol=1e-10)

    def test_constant_gradient_delta_converges_to_lr(self):
        lr = 0.01
        state = Adam(lr=lr).create_state((3,), np.float64)
        g = np.array([0.3, -1.5, 4.0])
        mags = [np.abs(state.update(g)) for _ in range(5000)]
        np.testing.assert_allclose(mags[-1], np.full(3, lr), rtol=1e-4)
        # bias correction keeps every step close to lr already
        np.testing.assert_allclose(mags[0], np.full(3, lr), rtol=1e-4)

    def test_states_are_independent(self):
        opt = Adam(lr=0.1)
        a = opt.create_state((2,), np.float32)
        b = opt.create_state((2,), np.float32)
        a.update(np.ones(2, dtype=np.float32))
        self.assertEqual(b.t, 1)
        np.testing.assert_array_equal(b.m, np.zeros(2))

    def test_shape_mismatch(self):
        state = Adam().create_state((3,), np.float32)
        with self.assertRaises(ShapeMismatchError):
            state.update(np.zeros((2,), dtype=np.float32))

    def test_invalid_hyperparams_raise(self):
        with self.assertRaises(ValueError):
            Adam(lr=0.0)
        with self.assertRaises(ValueError):
            Adam(betas=(1.0, 0.999))
        with self.assertRaises(ValueError):
            Adam(betas=(0.9, 0.0))
        with self.assertRaises(ValueError):
            Adam(eps=0.0)


if __name__ == "__main__":
    unittest.main()
