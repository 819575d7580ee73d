import unittest

import numpy as np

from src.chaindnn.domain._errors import UninitializedDistributionError
from src.chaindnn.domain.utils._weight_initialization import InitializationScheme
from src.chaindnn.infrastructure.utils.weight_initializer import WeightInitializer


class TestWeightInitializerRegistry(unittest.TestCase):
    def test_builtins_registered(self):
        available = WeightInitializer.available()
        for name in (
            "glorot_uniform",
            "glorot_normal",
            "xavier_uniform",
            "xavier",
            "zeros",
            "ones",
        ):
            self.assertIn(name, available)

    def test_available_is_sorted(self):
        available = WeightInitializer.available()
        self.assertEqual(list(available), sorted(available))

    def test_unknown_name_raises(self):
        with self.assertRaises(UninitializedDistributionError) as ctx:
            WeightInitializer("definitely_not_registered")
        self.assertEqual(ctx.exception.scheme, "definitely_not_registered")

    def test_accepts_scheme_enum(self):
        init = WeightInitializer(InitializationScheme.GLOROT_NORMAL)
        self.assertEqual(init.name, "glorot_normal")

    def test_every_scheme_is_registered(self):
        for scheme in InitializationScheme:
            WeightInitializer(scheme)

    def test_register_and_dispatch(self):
        name = "_test_fill_twos"

        @WeightInitializer.register_initializer(name, overwrite=True)
        def fill_twos(array, rng):
            array.fill(2)
            return array

        try:
            self.assertIs(WeightInitializer.get(name), fill_twos)
            out = WeightInitializer(name)(np.zeros((2, 2)))
            np.testing.assert_array_equal(out, np.full((2, 2), 2.0))
        finally:
            WeightInitializer.INITIALIZERS.pop(name, None)

    def test_duplicate_registration_rejected(self):
        with self.assertRaises(ValueError):

            @WeightInitializer.register_initializer("zeros")
            def other(array, rng):
                return array

    def test_empty_name_rejected(self):
        with self.assertRaises(ValueError):
            WeightInitializer.register_initializer("")


class TestConstantInitializers(unittest.TestCase):
    def test_zeros(self):
        a = np.full((2, 3), 7.0, dtype=np.float32)
        out = WeightInitializer("zeros")(a)
        self.assertIs(out, a)
        np.testing.assert_array_equal(a, np.zeros((2, 3)))
        self.assertEqual(a.dtype, np.float32)

    def test_ones(self):
        a = np.full((4,), 7.0)
        WeightInitializer("ones")(a)
        np.testing.assert_array_equal(a, np.ones(4))


if __name__ == "__main__":
    unittest.main()
