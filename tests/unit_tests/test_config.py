"""
Unit tests for configuration.
"""

import unittest
from argparse import Namespace
from config import UpgradeJobConfig


class TestUpgradeJobConfig(unittest.TestCase):
    """Test UpgradeJobConfig data model."""

    def test_config_defaults(self):
        """Test default configuration values."""
        config = UpgradeJobConfig(
            release_name="mayastor", rest_endpoint="http://api-rest:8081"
        )
        self.assertEqual(config.release_name, "mayastor")
        self.assertEqual(config.rest_endpoint, "http://api-rest:8081")
        self.assertEqual(config.namespace, "mayastor")
        self.assertIsNone(config.umbrella_chart_dir)
        self.assertIsNone(config.core_chart_dir)
        self.assertIsNone(config.pod_name)
        self.assertFalse(config.restart_data_plane)
        self.assertEqual(config.poll_interval, 10.0)
        self.assertEqual(config.rebuild_grace_period, 60.0)
        self.assertIsNone(config.quiescence_timeout)
        self.assertFalse(config.verbose)

    def test_config_from_args(self):
        """Test creating config from command-line arguments."""
        args = Namespace(
            release_name="openebs",
            rest_endpoint="http://api-rest:8081",
            namespace="openebs",
            umbrella_chart_dir="/charts/openebs",
            core_chart_dir=None,
            pod_name="upgrade-job-abcde",
            restart_data_plane=True,
            poll_interval=5.0,
            rebuild_grace_period=30.0,
            quiescence_timeout=3600.0,
            verbose=True,
        )
        config = UpgradeJobConfig.from_args(args)

        self.assertEqual(config.release_name, "openebs")
        self.assertEqual(config.namespace, "openebs")
        self.assertEqual(config.umbrella_chart_dir, "/charts/openebs")
        self.assertIsNone(config.core_chart_dir)
        self.assertEqual(config.pod_name, "upgrade-job-abcde")
        self.assertTrue(config.restart_data_plane)
        self.assertEqual(config.poll_interval, 5.0)
        self.assertEqual(config.rebuild_grace_period, 30.0)
        self.assertEqual(config.quiescence_timeout, 3600.0)
        self.assertTrue(config.verbose)

    def test_zero_timeout_means_unbounded(self):
        args = Namespace(
            release_name="mayastor",
            rest_endpoint="http://api-rest:8081",
            namespace="mayastor",
            umbrella_chart_dir=None,
            core_chart_dir="/chart",
            pod_name=None,
            restart_data_plane=False,
            poll_interval=10.0,
            rebuild_grace_period=60.0,
            quiescence_timeout=0,
            verbose=False,
        )
        self.assertIsNone(UpgradeJobConfig.from_args(args).quiescence_timeout)


if __name__ == "__main__":
    unittest.main()
