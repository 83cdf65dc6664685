# (c) Copyright Datacraft, 2026
"""Tests for TenantServiceProvider registration and config publishing."""
import shutil
from unittest.mock import patch

from samehouse import TenantManager, TenantServiceProvider
from samehouse.config import DEFAULT_CONFIG_FILE, Settings


def test_register_binds_singleton(container, settings):
    provider = TenantServiceProvider(container, settings)
    provider.register()

    first = container.make(TenantManager)
    second = container.make(TenantManager)

    assert isinstance(first, TenantManager)
    assert first is second
    assert first.settings is settings


def test_boot_without_config_path_is_noop(container, settings, tmp_path):
    provider = TenantServiceProvider(container, settings)

    with patch("samehouse.provider.shutil.copyfile") as copyfile:
        provider.boot()

    copyfile.assert_not_called()
    assert provider.publishes() == {}
    assert list(tmp_path.iterdir()) == []


def test_boot_publishes_config_once(container, settings, tmp_path):
    provider = TenantServiceProvider(
        container, settings, config_path=lambda name: tmp_path / "config" / name
    )
    target = tmp_path / "config" / "samehouse.yaml"

    with patch(
        "samehouse.provider.shutil.copyfile", wraps=shutil.copyfile
    ) as copyfile:
        provider.boot()

    assert copyfile.call_count == 1
    assert target.read_bytes() == DEFAULT_CONFIG_FILE.read_bytes()


def test_boot_keeps_existing_config(container, settings, tmp_path):
    provider = TenantServiceProvider(container, settings, config_path=lambda name: tmp_path / name)
    target = tmp_path / "samehouse.yaml"
    target.write_text("default_tenant_columns: [team_id]\n")

    provider.boot()

    assert target.read_text() == "default_tenant_columns: [team_id]\n"


def test_publish_force_overwrites(container, settings, tmp_path):
    provider = TenantServiceProvider(container, settings, config_path=lambda name: tmp_path / name)
    target = tmp_path / "samehouse.yaml"
    target.write_text("edited\n")

    copied = provider.publish(force=True)

    assert copied == [target]
    assert target.read_bytes() == DEFAULT_CONFIG_FILE.read_bytes()


def test_config_dir_setting_enables_publishing(container, tmp_path):
    settings = Settings(config_dir=tmp_path)
    provider = TenantServiceProvider(container, settings)

    provider.boot()

    assert (tmp_path / "samehouse.yaml").read_bytes() == DEFAULT_CONFIG_FILE.read_bytes()
    assert provider.publishes() == {
        DEFAULT_CONFIG_FILE.resolve(): tmp_path / "samehouse.yaml"
    }


def test_boot_logs_copy_failure(container, settings, tmp_path, caplog):
    provider = TenantServiceProvider(container, settings, config_path=lambda name: tmp_path / name)

    with patch("samehouse.provider.shutil.copyfile", side_effect=PermissionError("read-only")):
        provider.boot()

    assert "Failed to publish samehouse.yaml" in caplog.text
