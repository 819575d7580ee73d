import unittest

import numpy as np

from src.chaindnn.domain._errors import ForwardNotCalledError, ShapeMismatchError
from src.chaindnn.domain._layer import LayerKind
from src.chaindnn.infrastructure._layers import Relu, Softmax, softmax
from src.chaindnn.infrastructure._optimizers import Adam


class TestRelu(unittest.TestCase):
    def test_forward_is_elementwise_max(self):
        x = np.array([[-2.0, -0.0, 0.5], [3.0, -0.01, 0.0]], dtype=np.float32)
        out = Relu().forward(x)
        np.testing.assert_array_equal(out, np.maximum(x, 0))
        self.assertEqual(out.dtype, np.float32)

    def test_backward_strict_rule(self):
        r = Relu()
        x = np.array([[-1.0, -0.005, 0.0, 2.0]], dtype=np.float32)
        r.forward(x)
        g = np.array([[10.0, 20.0, 30.0, 40.0]], dtype=np.float32)
        np.testing.assert_array_equal(r.backward(g), [[0.0, 0.0, 30.0, 40.0]])

    def test_backward_with_tolerance(self):
        r = Relu(tolerance=0.01)
        x = np.array([[-1.0, -0.005, 0.0, 2.0]], dtype=np.float32)
        r.forward(x)
        g = np.ones((1, 4), dtype=np.float32)
        np.testing.assert_array_equal(r.backward(g), [[0.0, 1.0, 1.0, 1.0]])

    def test_input_edited_after_forward_does_not_move_the_gate(self):
        r = Relu()
        x = np.array([[-1.0, 2.0]], dtype=np.float32)
        r.forward(x)
        x *= -1.0
        np.testing.assert_array_equal(r.backward(np.ones((1, 2), dtype=np.float32)), [[0.0, 1.0]])

    def test_backward_gates_on_input_not_output(self):
        r = Relu()
        r.forward(np.array([[-3.0, 3.0]], dtype=np.float32))
        out = r.backward(np.array([[5.0, 5.0]], dtype=np.float32))
        np.testing.assert_array_equal(out, [[0.0, 5.0]])

    def test_backward_before_forward(self):
        with self.assertRaises(ForwardNotCalledError):
            Relu().backward(np.ones((1, 2), dtype=np.float32))

    def test_backward_shape_mismatch(self):
        r = Relu()
        r.forward(np.ones((2, 3), dtype=np.float32))
        with self.assertRaises(ShapeMismatchError):
            r.backward(np.ones((3, 3), dtype=np.float32))

    def test_negative_tolerance_rejected(self):
        with self.assertRaises(ValueError):
            Relu(tolerance=-0.1)

    def test_is_not_trainable_and_step_is_noop(self):
        r = Relu()
        self.assertFalse(r.trainable)
        self.assertEqual(r.parameters(), [])
        r.register_optimizer(Adam())
        r.step()
        self.assertIs(r.kind, LayerKind.RELU)

    def test_output_features_passthrough(self):
        self.assertEqual(Relu().output_features(7), 7)
        self.assertIsNone(Relu().input_features)

    def test_config(self):
        self.assertEqual(Relu.from_config(Relu(0.01).get_config()).tolerance, 0.01)


class TestSoftmax(unittest.TestCase):
    def test_rows_sum_to_one(self):
        x = np.random.default_rng(0).normal(scale=10.0, size=(6, 5)).astype(np.float32)
        out = Softmax().forward(x)
        np.testing.assert_allclose(out.sum(axis=1), np.ones(6), atol=1e-3)
        self.assertTrue(np.all(out >= 0))

    def test_large_inputs_are_stable(self):
        x = np.array([[1000.0, 1001.0, 1002.0], [-1000.0, 0.0, 1000.0]], dtype=np.float32)
        out = Softmax().forward(x)
        self.assertTrue(np.all(np.isfinite(out)))
        np.testing.assert_allclose(out.sum(axis=1), [1.0, 1.0], atol=1e-3)

    def test_shift_invariance(self):
        x = np.random.default_rng(1).normal(size=(3, 4))
        for c in (-50.0, 0.5, 123.0):
            np.testing.assert_allclose(softmax(x), softmax(x + c), rtol=1e-9, atol=1e-12)

    def test_known_values(self):
        out = Softmax().forward(np.log(np.array([[1.0, 2.0, 1.0]])))
        np.testing.assert_allclose(out, [[0.25, 0.5, 0.25]], rtol=1e-7)

    def test_fused_backward_divides_by_batch(self):
        s = Softmax()
        s.forward(np.zeros((4, 3), dtype=np.float32))
        g = np.arange(12, dtype=np.float32).reshape(4, 3)
        np.testing.assert_allclose(s.backward(g), g / 4.0)

    def test_jvp_backward_matches_finite_differences(self):
        s = Softmax(fused_with_cross_entropy=False)
        x = np.random.default_rng(2).normal(size=(2, 4))
        g = np.random.default_rng(3).normal(size=(2, 4))
        s.forward(x)
        analytic = s.backward(g)

        eps = 1e-6
        numeric = np.zeros_like(x)
        for i in range(x.shape[0]):
            for j in range(x.shape[1]):
                xp = x.copy()
                xm = x.copy()
                xp[i, j] += eps
                xm[i, j] -= eps
                numeric[i, j] = (np.sum(softmax(xp) * g) - np.sum(softmax(xm) * g)) / (2 * eps)
        np.testing.assert_allclose(analytic, numeric, rtol=1e-5, atol=1e-8)

    def test_backward_before_forward(self):
        with self.assertRaises(ForwardNotCalledError):
            Softmax().backward(np.ones((1, 3), dtype=np.float32))

    def test_backward_shape_mismatch(self):
        s = Softmax()
        s.forward(np.ones((2, 3), dtype=np.float32))
        with self.assertRaises(ShapeMismatchError):
            s.backward(np.ones((2, 4), dtype=np.float32))

    def test_caches_output(self):
        s = Softmax()
        out = s.forward(np.array([[1.0, 2.0]], dtype=np.float32))
        self.assertEqual(s.output_shape, (1, 2))
        np.testing.assert_array_equal(s._cache, out)

    def test_output_edited_in_place_does_not_change_backward(self):
        x = np.array([[0.5, -1.0, 2.0]], dtype=np.float64)
        g = np.array([[1.0, 0.0, -1.0]], dtype=np.float64)
        s = Softmax(fused_with_cross_entropy=False)
        p = s.forward(x)
        expected = p * (g - np.sum(g * p, axis=-1, keepdims=True))
        p -= 1.0
        np.testing.assert_allclose(s.backward(g), expected, rtol=1e-12)

    def test_config(self):
        cfg = Softmax(fused_with_cross_entropy=False).get_config()
        self.assertFalse(Softmax.from_config(cfg).fused_with_cross_entropy)
        self.assertIs(Softmax.kind, LayerKind.SOFTMAX)


if __name__ == "__main__":
    unittest.main()
