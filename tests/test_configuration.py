import json
import unittest
import tempfile
import os
from decimal import Decimal
from core.app_initializer import create_autosave_scheduler
from infrastructure.configuration import ConfigurationService, DEFAULT_ADDITIONAL_COST_BUCKETS


class TestConfigurationService(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "app_config.json")

    def tearDown(self):
        self.tmp.cleanup()

    def test_defaults_without_file(self):
        """A missing config file gives the defaults."""
        config = ConfigurationService(self.path)
        self.assertEqual(config.get_btw_rate(), Decimal("0.21"))
        self.assertEqual(config.get_default_average_transaction_value(), 13.0)
        self.assertEqual(config.get_autosave_delay(), 1.0)
        self.assertEqual(config.get_additional_cost_buckets(), DEFAULT_ADDITIONAL_COST_BUCKETS)

    def test_loaded_values_merge_with_defaults(self):
        """Keys missing from the file fall back to the defaults."""
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({"btw_rate": 9}, f)
        config = ConfigurationService(self.path)
        self.assertEqual(config.get_btw_rate(), Decimal("0.09"))
        self.assertEqual(config.get_autosave_delay(), 1.0)

    def test_unreadable_file_falls_back_to_defaults(self):
        """Invalid JSON is ignored."""
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write("{not json")
        self.assertEqual(ConfigurationService(self.path).get_btw_rate(), Decimal("0.21"))

    def test_setters_persist(self):
        """Setters write the file."""
        config = ConfigurationService(self.path)
        old = config.set_offers_root_folder(self.tmp.name)

        reloaded = ConfigurationService(self.path)
        self.assertIsNone(old)
        self.assertEqual(reloaded.get_offers_root_folder(), self.tmp.name)

    def test_autosave_scheduler_uses_configured_delay(self):
        """The editor's autosave debounce comes from the config file."""
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({"autosave_delay_seconds": 2.5}, f)
        config = ConfigurationService(self.path)
        self.assertEqual(config.get_autosave_delay(), 2.5)
        self.assertEqual(create_autosave_scheduler(config).delay, 2.5)


if __name__ == '__main__':
    unittest.main()
