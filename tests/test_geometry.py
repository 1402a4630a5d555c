import unittest

import numpy as np

from framemixer.analysis.geometry import resolve_geometry
from framemixer.errors import GeometryError
from framemixer.model.frame import FrameConfig, MotorRecord, Topology, TOPOLOGY_LAYOUTS

STANDARD_TOPOLOGIES = [t for t in Topology if t is not Topology.CUSTOM]


def standard_config(topology, n=None):
    n = n or TOPOLOGY_LAYOUTS[topology].motor_count
    motors = [MotorRecord(port=i + 1, rotation=1 if i % 2 == 0 else -1) for i in range(n)]
    return FrameConfig(craft_id="test", topology=topology, motors=motors)


def custom_config(positions):
    motors = [MotorRecord(port=i + 1, rotation=1 if i % 2 == 0 else -1, position=p) for i, p in enumerate(positions)]
    return FrameConfig(craft_id="custom", topology=Topology.CUSTOM, motors=motors)


class TestStandardGeometry(unittest.TestCase):
    def test_points_on_unit_circle(self):
        for topology in STANDARD_TOPOLOGIES:
            with self.subTest(topology=topology):
                geometry = resolve_geometry(standard_config(topology))
                self.assertEqual(geometry.n, TOPOLOGY_LAYOUTS[topology].motor_count)
                np.testing.assert_allclose(np.hypot(geometry.x, geometry.y), 1.0, atol=1e-12)

    def test_even_spacing_and_phase(self):
        for topology in STANDARD_TOPOLOGIES:
            with self.subTest(topology=topology):
                layout = TOPOLOGY_LAYOUTS[topology]
                geometry = resolve_geometry(standard_config(topology))
                angles = np.unwrap(np.arctan2(geometry.y, geometry.x))
                np.testing.assert_allclose(np.diff(angles), np.deg2rad(360.0 / layout.motor_count), atol=1e-12)
                self.assertAlmostEqual(np.rad2deg(angles[0]), layout.phase, places=9)

    def test_quad_plus_points(self):
        geometry = resolve_geometry(standard_config(Topology.QUAD_PLUS))
        np.testing.assert_allclose(geometry.x, [1.0, 0.0, -1.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(geometry.y, [0.0, 1.0, 0.0, -1.0], atol=1e-12)

    def test_quad_x_points(self):
        s = np.sqrt(2.0) / 2.0
        geometry = resolve_geometry(standard_config(Topology.QUAD_X))
        np.testing.assert_allclose(geometry.x, [s, s, -s, -s], atol=1e-12)
        np.testing.assert_allclose(geometry.y, [-s, s, s, -s], atol=1e-12)

    def test_hex_points(self):
        h = np.sqrt(3.0) / 2.0
        plus = resolve_geometry(standard_config(Topology.HEX_PLUS))
        np.testing.assert_allclose(plus.x, [1.0, 0.5, -0.5, -1.0, -0.5, 0.5], atol=1e-12)
        np.testing.assert_allclose(plus.y, [0.0, h, h, 0.0, -h, -h], atol=1e-12)

        x = resolve_geometry(standard_config(Topology.HEX_X))
        np.testing.assert_allclose(x.x, [h, h, 0.0, -h, -h, 0.0], atol=1e-12)
        np.testing.assert_allclose(x.y, [-0.5, 0.5, 1.0, 0.5, -0.5, -1.0], atol=1e-12)

    def test_octo_x_first_motor(self):
        geometry = resolve_geometry(standard_config(Topology.OCTO_X))
        self.assertAlmostEqual(geometry.x[0], np.cos(np.deg2rad(-22.5)))
        self.assertAlmostEqual(geometry.y[0], np.sin(np.deg2rad(-22.5)))

    def test_wrong_motor_count(self):
        with self.assertRaises(GeometryError):
            resolve_geometry(standard_config(Topology.HEX_X, n=4))

    def test_geometry_is_read_only(self):
        geometry = resolve_geometry(standard_config(Topology.QUAD_X))
        with self.assertRaises(ValueError):
            geometry.x[0] = 2.0

    def test_scaling(self):
        geometry = resolve_geometry(standard_config(Topology.QUAD_PLUS))
        x, y = geometry.motor_positions(0.25)
        np.testing.assert_allclose(x, [0.25, 0.0, -0.25, 0.0], atol=1e-12)
        esc_x, _ = geometry.esc_positions(0.1)
        np.testing.assert_allclose(esc_x, [0.1, 0.0, -0.1, 0.0], atol=1e-12)
        arm_x, _ = geometry.arm_positions(0.25)
        np.testing.assert_allclose(arm_x, [0.125, 0.0, -0.125, 0.0], atol=1e-12)


class TestCustomGeometry(unittest.TestCase):
    def test_raw_positions_pass_through(self):
        positions = [(0.3, 0.4), (-0.3, 0.4), (-0.3, -0.4), (0.3, -0.4)]
        geometry = resolve_geometry(custom_config(positions))
        np.testing.assert_array_equal(geometry.x, [0.3, -0.3, -0.3, 0.3])
        np.testing.assert_array_equal(geometry.y, [0.4, 0.4, -0.4, -0.4])

        # Motor distance is not applied to custom coordinates
        x, y = geometry.motor_positions(0.25)
        np.testing.assert_array_equal(x, geometry.x)
        np.testing.assert_array_equal(y, geometry.y)

    def test_esc_uses_unit_direction(self):
        geometry = resolve_geometry(custom_config([(3.0, 4.0), (-3.0, -4.0)]))
        x, y = geometry.esc_positions(0.1)
        np.testing.assert_allclose(x, [0.06, -0.06])
        np.testing.assert_allclose(y, [0.08, -0.08])

    def test_esc_at_origin(self):
        geometry = resolve_geometry(custom_config([(0.0, 0.0), (0.3, 0.0)]))
        with self.assertRaises(GeometryError):
            geometry.esc_positions(0.1)

    def test_no_motors(self):
        with self.assertRaises(GeometryError):
            resolve_geometry(custom_config([]))

    def test_missing_position(self):
        motors = [MotorRecord(port=1, rotation=1, position=(0.2, 0.0)), MotorRecord(port=2, rotation=-1)]
        config = FrameConfig(craft_id="custom", topology=Topology.CUSTOM, motors=motors)
        with self.assertRaises(GeometryError):
            resolve_geometry(config)


class TestTopology(unittest.TestCase):
    def test_parse_is_case_insensitive(self):
        self.assertIs(Topology.parse("QUAD_X"), Topology.QUAD_X)
        self.assertIs(Topology.parse(" Octo_Plus "), Topology.OCTO_PLUS)

    def test_unknown_topology(self):
        with self.assertRaises(GeometryError):
            Topology.parse("tri_y")

    def test_default_config_ids(self):
        self.assertEqual(standard_config(Topology.QUAD_PLUS).config_id, 4)
        self.assertEqual(standard_config(Topology.OCTO_X).config_id, 31)
        self.assertEqual(custom_config([(1.0, 0.0)]).config_id, 0)

    def test_explicit_config_id(self):
        motors = [MotorRecord(port=i + 1, rotation=1) for i in range(4)]
        config = FrameConfig(craft_id="q", topology=Topology.QUAD_X, motors=motors, config_id=-1)
        self.assertEqual(config.config_id, -1)


if __name__ == "__main__":
    unittest.main()
