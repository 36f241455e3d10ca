"""Tests for config file loading and priority."""

import os
import tempfile
from pathlib import Path
import unittest

from remotesampler import config
from remotesampler.errors import ConfigError


class TestConfigFileLoading(unittest.TestCase):
    """Test TOML config file loading."""

    def test_load_toml_config_basic(self):
        """Test loading a basic TOML config file."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.toml', delete=False) as f:
            f.write("""
[sampler]
service_name = "checkout"
endpoint = "http://agent:5778"
polling_interval = 10
initial_sampling_rate = 0.5

[sampler.operation_overrides]
health = 0.0
""")
            f.flush()

        try:
            loaded = config.load_toml_config(f.name)

            self.assertEqual(loaded["service_name"], "checkout")
            self.assertEqual(loaded["endpoint"], "http://agent:5778")
            self.assertEqual(loaded["polling_interval"], 10)
            self.assertEqual(loaded["initial_sampling_rate"], 0.5)
            self.assertEqual(loaded["operation_overrides"], {"health": 0.0})
        finally:
            os.unlink(f.name)

    def test_load_toml_config_missing_file(self):
        """Test that loading missing file returns empty dict."""
        loaded = config.load_toml_config("/nonexistent/file.toml")
        self.assertEqual(loaded, {})

    def test_load_toml_config_invalid_toml(self):
        """Test that invalid TOML raises ConfigError."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.toml', delete=False) as f:
            f.write("invalid [toml content")
            f.flush()

        try:
            with self.assertRaises(ConfigError):
                config.load_toml_config(f.name)
        finally:
            os.unlink(f.name)

    def test_find_config_file_current_directory(self):
        """Test finding config file in current directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "remotesampler.toml"
            config_path.write_text("[sampler]\nservice_name = \"test\"")

            original_cwd = os.getcwd()
            try:
                os.chdir(tmpdir)

                found = config.find_config_file()
                self.assertIsNotNone(found)
                self.assertEqual(Path(found).name, "remotesampler.toml")
            finally:
                os.chdir(original_cwd)


class TestConfigPriority(unittest.TestCase):
    """Test configuration loading priority."""

    def tearDown(self):
        for key in list(os.environ.keys()):
            if key.startswith("REMOTE_SAMPLER_"):
                del os.environ[key]

    def _write_config(self, content):
        f = tempfile.NamedTemporaryFile(mode='w', suffix='.toml', delete=False)
        with f:
            f.write(content)
        self.addCleanup(os.unlink, f.name)
        return f.name

    def test_explicit_params_override_env(self):
        """Test that explicit parameters override environment variables."""
        os.environ["REMOTE_SAMPLER_SERVICE_NAME"] = "env-service"

        merged = config.load_config_with_priority(
            config_file="/nonexistent/file.toml",
            overrides={"service_name": "explicit-service"},
        )

        self.assertEqual(merged["service_name"], "explicit-service")

    def test_env_override_config_file(self):
        """Test that environment variables override config file."""
        path = self._write_config('[sampler]\nservice_name = "file-service"\n')
        os.environ["REMOTE_SAMPLER_SERVICE_NAME"] = "env-service"

        merged = config.load_config_with_priority(config_file=path)

        self.assertEqual(merged["service_name"], "env-service")

    def test_none_overrides_are_ignored(self):
        """Test that None overrides don't clobber lower priority values."""
        path = self._write_config('[sampler]\nservice_name = "file-service"\n')

        merged = config.load_config_with_priority(config_file=path, overrides={"service_name": None})

        self.assertEqual(merged["service_name"], "file-service")

    def test_load_config_validates(self):
        """Test that load_config returns a validated SamplerConfig."""
        path = self._write_config('[sampler]\nservice_name = "svc"\ninitial_sampling_rate = 0.3\n')

        loaded = config.load_config(config_file=path)

        self.assertIsInstance(loaded, config.SamplerConfig)
        self.assertEqual(loaded.service_name, "svc")
        self.assertEqual(loaded.initial_sampling_rate, 0.3)
        self.assertEqual(loaded.polling_interval, 60.0)
        self.assertEqual(loaded.endpoint, "http://localhost:5778")

    def test_load_config_rejects_out_of_range_rate(self):
        """Test that an invalid initial rate is a ConfigError."""
        path = self._write_config('[sampler]\nservice_name = "svc"\ninitial_sampling_rate = 3\n')

        with self.assertRaises(ConfigError) as ctx:
            config.load_config(config_file=path)
        self.assertIn("initial_sampling_rate", str(ctx.exception))

    def test_load_config_rejects_unknown_keys(self):
        """Test that typos in the config file are reported."""
        path = self._write_config('[sampler]\nservice_name = "svc"\npolling_intervall = 5\n')

        with self.assertRaises(ConfigError):
            config.load_config(config_file=path)


class TestConfigFromEnv(unittest.TestCase):
    """Test loading configuration from environment variables."""

    def tearDown(self):
        for key in list(os.environ.keys()):
            if key.startswith("REMOTE_SAMPLER_"):
                del os.environ[key]

    def test_load_config_from_env_all_vars(self):
        """Test loading all supported environment variables."""
        os.environ.update({
            "REMOTE_SAMPLER_SERVICE_NAME": "svc",
            "REMOTE_SAMPLER_ENDPOINT": "http://test.com",
            "REMOTE_SAMPLER_POLLING_INTERVAL": "15",
            "REMOTE_SAMPLER_INITIAL_SAMPLING_RATE": "0.9",
            "REMOTE_SAMPLER_FETCH_TIMEOUT": "3",
            "REMOTE_SAMPLER_DEBUG": "yes",
        })

        env_config = config.load_config_from_env()

        self.assertEqual(env_config["service_name"], "svc")
        self.assertEqual(env_config["endpoint"], "http://test.com")
        self.assertEqual(env_config["polling_interval"], 15.0)
        self.assertEqual(env_config["initial_sampling_rate"], 0.9)
        self.assertEqual(env_config["fetch_timeout"], 3.0)
        self.assertTrue(env_config["debug"])

    def test_load_config_from_env_boolean_conversion(self):
        """Test that boolean environment variables are converted."""
        os.environ["REMOTE_SAMPLER_DEBUG"] = "off"
        self.assertFalse(config.load_config_from_env()["debug"])

        os.environ["REMOTE_SAMPLER_DEBUG"] = "maybe"
        with self.assertRaises(ConfigError):
            config.load_config_from_env()

    def test_load_config_from_env_invalid_number(self):
        """Test that non-numeric values raise ConfigError."""
        os.environ["REMOTE_SAMPLER_INITIAL_SAMPLING_RATE"] = "lots"
        with self.assertRaises(ConfigError):
            config.load_config_from_env()

    def test_load_config_from_env_missing_vars(self):
        """Test that missing env vars don't appear in result."""
        env_config = config.load_config_from_env()
        self.assertEqual(env_config, {})


if __name__ == "__main__":
    unittest.main()
