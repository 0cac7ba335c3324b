"""Tests for the vault model, settings and registry."""
import subprocess
from pathlib import Path

import orjson
import pytest

from vault_autounlock.exceptions import CommandFailedError, IllegalVaultState
from vault_autounlock.passphrase import Passphrase
from vault_autounlock.vault import (
    SystemRevealer,
    Vault,
    VaultList,
    VaultSettings,
    VaultState,
)


class TestVaultSettings:
    """Tests for persisted per-vault settings."""

    def test_defaults(self):
        """Test the documented policy defaults."""
        settings = VaultSettings()
        assert settings.unlock_after_startup is False
        assert settings.mount_after_unlock is True
        assert settings.reveal_after_mount is True

    def test_camel_case_aliases(self):
        """Test settings read and write the persisted camelCase keys."""
        settings = VaultSettings.model_validate({
            "unlockAfterStartup": True,
            "mountAfterUnlock": False,
        })
        assert settings.unlock_after_startup is True
        assert settings.mount_after_unlock is False
        assert settings.to_dict() == {
            "unlockAfterStartup": True,
            "mountAfterUnlock": False,
            "revealAfterMount": True,
        }

    def test_assignment_is_validated(self):
        """Test live assignments are type checked."""
        settings = VaultSettings()
        with pytest.raises(ValueError):
            settings.mount_after_unlock = "maybe"


class TestVaultState:
    """Tests for vault state transitions."""

    def test_full_lifecycle(self, make_vault, driver):
        """Test locked → unlocked → mounted → revealed."""
        vault = make_vault("v1")
        assert vault.state is VaultState.LOCKED
        vault.unlock(Passphrase("pw"))
        assert vault.state is VaultState.UNLOCKED
        assert vault.mount() == Path("/mnt/v1")
        assert vault.state is VaultState.MOUNTED
        assert vault.mount_point == Path("/mnt/v1")
        vault.reveal()
        assert driver.ops("v1") == ["unlock", "mount", "reveal"]

    def test_mount_requires_unlock(self, make_vault):
        """Test mounting a locked vault is rejected."""
        with pytest.raises(IllegalVaultState):
            make_vault("v1").mount()

    def test_reveal_requires_mount(self, make_vault):
        """Test revealing an unmounted vault is rejected."""
        vault = make_vault("v1")
        vault.unlock(Passphrase("pw"))
        with pytest.raises(IllegalVaultState):
            vault.reveal()

    def test_unlock_twice_rejected(self, make_vault):
        """Test unlocking an unlocked vault is rejected."""
        vault = make_vault("v1")
        vault.unlock(Passphrase("pw"))
        with pytest.raises(IllegalVaultState):
            vault.unlock(Passphrase("pw"))

    def test_failed_mount_keeps_vault_unlocked(self, make_vault, driver):
        """Test a failed mount leaves state and mount point untouched."""
        driver.fail_mount.add("v1")
        vault = make_vault("v1")
        vault.unlock(Passphrase("pw"))
        with pytest.raises(CommandFailedError):
            vault.mount()
        assert vault.state is VaultState.UNLOCKED
        assert vault.mount_point is None


class TestVaultList:
    """Tests for the settings-file backed vault registry."""

    def _write(self, path: Path, directories: list) -> None:
        path.write_bytes(orjson.dumps({"directories": directories}))

    def test_load_preserves_file_order(self, tmp_path, driver):
        """Test vaults keep the order of the settings file."""
        settings = tmp_path / "settings.json"
        self._write(settings, [
            {"id": "b", "path": "/vaults/b", "unlockAfterStartup": True},
            {"id": "a", "path": "/vaults/a", "revealAfterMount": False},
        ])
        vaults = VaultList.load(settings, driver)
        assert [v.id for v in vaults] == ["b", "a"]
        assert vaults.get("b").settings.unlock_after_startup is True
        assert vaults.get("a").settings.reveal_after_mount is False
        assert vaults.get("a").path == Path("/vaults/a")

    def test_missing_file_is_empty(self, tmp_path, driver):
        """Test a missing settings file gives an empty list."""
        assert len(VaultList.load(tmp_path / "missing.json", driver)) == 0

    def test_invalid_entries_skipped(self, tmp_path, driver):
        """Test invalid entries are skipped, valid ones kept."""
        settings = tmp_path / "settings.json"
        self._write(settings, [
            {"path": "/vaults/no-id"},
            {"id": "x", "path": "/vaults/x", "mountAfterUnlock": "nope"},
            {"id": "ok", "path": "/vaults/ok"},
        ])
        assert [v.id for v in VaultList.load(settings, driver)] == ["ok"]

    def test_save_round_trips_settings(self, tmp_path, driver, make_vault):
        """Test saved settings load back unchanged."""
        settings = tmp_path / "conf" / "settings.json"
        vaults = VaultList([make_vault("v1", mount_after_unlock=False)], path=settings)
        vaults.save()
        loaded = VaultList.load(settings, driver)
        assert loaded.get("v1").settings.mount_after_unlock is False
        assert loaded.get("v1").settings.unlock_after_startup is True

    def test_top_level_list_rejected(self, tmp_path, driver):
        """Test a settings file holding a JSON list is rejected."""
        path = tmp_path / "settings.json"
        path.write_bytes(orjson.dumps([{"id": "v1", "path": "/vaults/v1"}]))
        with pytest.raises(ValueError):
            VaultList.load(path, driver)

    def test_directories_must_be_a_list(self, tmp_path, driver):
        """Test a non-list directories value is rejected."""
        path = tmp_path / "settings.json"
        path.write_bytes(orjson.dumps({"directories": {"id": "v1"}}))
        with pytest.raises(ValueError):
            VaultList.load(path, driver)

    def test_save_without_path(self, make_vault):
        """Test saving a list that has no path raises ValueError."""
        with pytest.raises(ValueError):
            VaultList([make_vault("v1")]).save()

    def test_add_and_remove(self, make_vault):
        """Test duplicate ids are refused and removal works."""
        vaults = VaultList()
        vaults.add(make_vault("v1"))
        with pytest.raises(ValueError):
            vaults.add(make_vault("v1"))
        vaults.remove("v1")
        assert vaults.get("v1") is None


class TestSystemRevealer:
    """Tests for the file browser reveal helper."""

    def test_reveal_runs_command(self, monkeypatch):
        """Test the browser command receives the mount point."""
        calls = []
        monkeypatch.setattr("shutil.which", lambda cmd: f"/usr/bin/{cmd}")

        def fake_run(args, **kwargs):
            calls.append(args)
            return subprocess.CompletedProcess(args, 0, "", "")

        monkeypatch.setattr("subprocess.run", fake_run)
        SystemRevealer(["xdg-open"]).reveal(Path("/mnt/v1"))
        assert calls == [["xdg-open", "/mnt/v1"]]

    def test_nonzero_exit_raises(self, monkeypatch):
        """Test a failing command raises CommandFailedError."""
        monkeypatch.setattr("shutil.which", lambda cmd: f"/usr/bin/{cmd}")
        monkeypatch.setattr(
            "subprocess.run",
            lambda args, **kwargs: subprocess.CompletedProcess(args, 4, "", "no display"),
        )
        with pytest.raises(CommandFailedError):
            SystemRevealer(["xdg-open"]).reveal(Path("/mnt/v1"))

    def test_missing_command_raises(self, monkeypatch):
        """Test a missing command raises CommandFailedError."""
        monkeypatch.setattr("shutil.which", lambda cmd: None)
        with pytest.raises(CommandFailedError):
            SystemRevealer(["xdg-open"]).reveal(Path("/mnt/v1"))
