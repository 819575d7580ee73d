import unittest

from src.chaindnn.domain._errors import (
    ChainDNNError,
    EmptyNetworkError,
    ForwardNotCalledError,
    MissingGradientError,
    MissingOptimizerError,
    ShapeMismatchError,
    UninitializedDistributionError,
)


class TestErrorHierarchy(unittest.TestCase):
    def test_all_errors_share_base(self):
        for exc in (
            ShapeMismatchError("op"),
            EmptyNetworkError("forward"),
            MissingOptimizerError("Network"),
            UninitializedDistributionError("glorot_uniform", "bad"),
            ForwardNotCalledError("Dense"),
            MissingGradientError("Dense.weight"),
        ):
            self.assertIsInstance(exc, ChainDNNError)

    def test_builtin_categories(self):
        self.assertTrue(issubclass(ShapeMismatchError, ValueError))
        self.assertTrue(issubclass(UninitializedDistributionError, ValueError))
        self.assertTrue(issubclass(EmptyNetworkError, RuntimeError))
        self.assertTrue(issubclass(MissingOptimizerError, RuntimeError))
        self.assertTrue(issubclass(ForwardNotCalledError, RuntimeError))
        self.assertTrue(issubclass(MissingGradientError, RuntimeError))


class TestShapeMismatchError(unittest.TestCase):
    def test_attributes_and_message(self):
        e = ShapeMismatchError("Dense.forward", expected=(2, 3), got=(2, 4))
        self.assertEqual(e.op, "Dense.forward")
        self.assertEqual(e.expected, (2, 3))
        self.assertEqual(e.got, (2, 4))
        msg = str(e)
        self.assertIn("Dense.forward", msg)
        self.assertIn("(2, 3)", msg)
        self.assertIn("(2, 4)", msg)

    def test_detail_only(self):
        e = ShapeMismatchError("op", detail="something off")
        self.assertIsNone(e.expected)
        self.assertIsNone(e.got)
        self.assertIn("something off", str(e))


class TestOtherErrors(unittest.TestCase):
    def test_empty_network_records_op(self):
        e = EmptyNetworkError("backward")
        self.assertEqual(e.op, "backward")
        self.assertIn("Network.backward", str(e))

    def test_missing_optimizer_with_parameter(self):
        e = MissingOptimizerError("Dense", "weight")
        self.assertEqual(e.owner, "Dense")
        self.assertEqual(e.parameter, "weight")
        self.assertIn("weight", str(e))

    def test_missing_optimizer_without_parameter(self):
        e = MissingOptimizerError("Network")
        self.assertIsNone(e.parameter)
        self.assertIn("Network", str(e))

    def test_uninitialized_distribution_records_scheme(self):
        e = UninitializedDistributionError("he_normal", "unknown scheme")
        self.assertEqual(e.scheme, "he_normal")

    def test_forward_not_called_records_layer(self):
        self.assertEqual(ForwardNotCalledError("Relu").layer, "Relu")

    def test_missing_gradient_records_parameter(self):
        self.assertEqual(MissingGradientError("Dense.bias").parameter, "Dense.bias")


if __name__ == "__main__":
    unittest.main()
