"""Tests for power status normalization."""

import subprocess
from types import SimpleNamespace

import pytest

from syspeek import power
from syspeek.models import PowerSource, PowerStatus
from syspeek.power import (
    PmsetPowerNormalizer,
    PowerStatusNormalizer,
    PsutilPowerNormalizer,
    StructuredPowerReading,
    SysfsPowerNormalizer,
    extract_percentage,
    select_normalizer,
)

PMSET_AC = (
    "Now drawing from 'AC Power'\n"
    " -InternalBattery-0 (id=4653155)\t95%; charging; 0:42 remaining present: true\n"
)
PMSET_BATTERY = (
    "Now drawing from 'Battery Power'\n"
    " -InternalBattery-0 (id=4653155)\t61%; discharging; 3:12 remaining present: true\n"
)


class TestExtractPercentage:
    """Tests for extract_percentage."""

    def test_token_after_tab(self):
        """Test the token is cut at the preceding whitespace."""
        assert extract_percentage("Battery\t95%; charging") == "95%"

    def test_token_at_start(self):
        """Test a percentage at the very start of the text."""
        assert extract_percentage("80% left") == "80%"

    def test_first_token_only(self):
        """Test only the first percentage token is taken."""
        assert extract_percentage("at 30% then 40%") == "30%"

    def test_no_percent(self):
        """Test text without a percent sign has no charge."""
        assert extract_percentage("No batteries available") is None

    def test_empty(self):
        """Test empty text has no charge."""
        assert extract_percentage("") is None

    def test_token_glued_to_text(self):
        """Test non-whitespace before the number stays in the token."""
        assert extract_percentage("level=77%") == "level=77%"


class TestPmsetPowerNormalizer:
    """Tests for the free-text strategy."""

    def test_ac_power(self):
        """Test pmset output on AC power."""
        status = PmsetPowerNormalizer().normalize(PMSET_AC)
        assert status == PowerStatus(source=PowerSource.AC, charge="95%")

    def test_battery_power(self):
        """Test pmset output on battery power."""
        status = PmsetPowerNormalizer().normalize(PMSET_BATTERY)
        assert status.source is PowerSource.BATTERY
        assert status.charge == "61%"

    def test_no_battery(self):
        """Test a desktop without battery still reports the source."""
        status = PmsetPowerNormalizer().normalize("Now drawing from 'AC Power'\n")
        assert status.source is PowerSource.AC
        assert status.charge_display == "N/A"

    def test_unreadable(self):
        """Test a failed command degrades to Unknown."""
        assert PmsetPowerNormalizer().normalize(None) == PowerStatus.unknown()

    def test_missing_command(self):
        """Test a command that does not exist degrades to Unknown without raising."""
        normalizer = PmsetPowerNormalizer(command=("syspeek-no-such-command-xyz",))
        assert normalizer.read_raw() is None
        assert normalizer.status() == PowerStatus.unknown()

    def test_timeout(self, monkeypatch):
        """Test a hung command degrades to Unknown."""

        def fake_run(*args, **kwargs):
            raise subprocess.TimeoutExpired(cmd="pmset", timeout=5.0)

        monkeypatch.setattr(power.subprocess, "run", fake_run)
        assert PmsetPowerNormalizer().status() == PowerStatus.unknown()

    def test_failed_command(self, monkeypatch):
        """Test a non-zero exit status degrades to Unknown."""

        def fake_run(command, **kwargs):
            return SimpleNamespace(stdout=b"", returncode=1)

        monkeypatch.setattr(power.subprocess, "run", fake_run)
        normalizer = PmsetPowerNormalizer()
        assert normalizer.read_raw() is None
        assert normalizer.status() == PowerStatus.unknown()

    def test_reads_command_stdout(self, monkeypatch):
        """Test status() parses the command's stdout."""

        def fake_run(command, **kwargs):
            assert command == ("pmset", "-g", "batt")
            return SimpleNamespace(stdout=PMSET_AC.encode(), returncode=0)

        monkeypatch.setattr(power.subprocess, "run", fake_run)
        assert PmsetPowerNormalizer().status() == PowerStatus(source=PowerSource.AC, charge="95%")


class TestStructuredNormalize:
    """Tests for the structured-counters strategy."""

    def test_ac_online(self):
        """Test an online adapter and a readable capacity."""
        reading = StructuredPowerReading(ac_online="1\n", capacity="87\n")
        status = SysfsPowerNormalizer().normalize(reading)
        assert status == PowerStatus(source=PowerSource.AC, charge="87%")

    def test_ac_offline(self):
        """Test an offline adapter means battery power."""
        reading = StructuredPowerReading(ac_online="0\n", capacity="40")
        status = SysfsPowerNormalizer().normalize(reading)
        assert status.source is PowerSource.BATTERY
        assert status.charge == "40%"

    def test_ac_unreadable(self):
        """Test an unreadable adapter gives Unknown but keeps the charge."""
        reading = StructuredPowerReading(ac_online=None, capacity="55")
        status = SysfsPowerNormalizer().normalize(reading)
        assert status.source is PowerSource.UNKNOWN
        assert status.charge == "55%"

    def test_capacity_unreadable(self):
        """Test an unreadable capacity is reported as N/A."""
        reading = StructuredPowerReading(ac_online="1", capacity=None)
        status = SysfsPowerNormalizer().normalize(reading)
        assert status.source is PowerSource.AC
        assert status.charge_display == "N/A"

    def test_blank_capacity(self):
        """Test a blank capacity file is treated as unreadable."""
        reading = StructuredPowerReading(ac_online="1", capacity="  \n")
        assert SysfsPowerNormalizer().normalize(reading).charge is None

    def test_boolean_fields(self):
        """Test boolean and numeric fields as psutil reports them."""
        reading = StructuredPowerReading(ac_online=False, capacity=63.0)
        status = PsutilPowerNormalizer().normalize(reading)
        assert status == PowerStatus(source=PowerSource.BATTERY, charge="63%")

    def test_fractional_capacity(self):
        """Test a fractional capacity keeps its decimals."""
        reading = StructuredPowerReading(ac_online=True, capacity=63.5)
        assert PsutilPowerNormalizer().normalize(reading).charge == "63.5%"

    def test_no_reading(self):
        """Test a missing reading degrades to Unknown."""
        assert PsutilPowerNormalizer().normalize(None) == PowerStatus.unknown()


class TestSysfsPowerNormalizer:
    """Tests for reading sysfs files."""

    def test_reads_files(self, tmp_path):
        """Test online and capacity files are read from the supply directory."""
        (tmp_path / "AC").mkdir()
        (tmp_path / "AC" / "online").write_text("1\n")
        (tmp_path / "BAT0").mkdir()
        (tmp_path / "BAT0" / "capacity").write_text("95\n")

        status = SysfsPowerNormalizer(root=tmp_path).status()
        assert status == PowerStatus(source=PowerSource.AC, charge="95%")

    def test_custom_supply_names(self, tmp_path):
        """Test supply names can be configured."""
        (tmp_path / "ADP1").mkdir()
        (tmp_path / "ADP1" / "online").write_text("0\n")
        (tmp_path / "BAT1").mkdir()
        (tmp_path / "BAT1" / "capacity").write_text("12\n")

        normalizer = SysfsPowerNormalizer(root=tmp_path, ac_supply="ADP1", battery_supply="BAT1")
        assert normalizer.status() == PowerStatus(source=PowerSource.BATTERY, charge="12%")

    def test_missing_files(self, tmp_path):
        """Test a host without power_supply entries reports Unknown and N/A."""
        status = SysfsPowerNormalizer(root=tmp_path / "missing").status()
        assert status == PowerStatus.unknown()
        assert status.charge_display == "N/A"


class TestPsutilPowerNormalizer:
    """Tests for reading psutil battery sensors."""

    def test_reads_sensor(self, monkeypatch):
        """Test psutil battery data is normalized."""
        battery = SimpleNamespace(percent=81.0, secsleft=3600, power_plugged=True)
        monkeypatch.setattr(power.psutil, "sensors_battery", lambda: battery, raising=False)
        assert PsutilPowerNormalizer().status() == PowerStatus(source=PowerSource.AC, charge="81%")

    def test_no_battery(self, monkeypatch):
        """Test a host without a battery reports Unknown."""
        monkeypatch.setattr(power.psutil, "sensors_battery", lambda: None, raising=False)
        assert PsutilPowerNormalizer().status() == PowerStatus.unknown()

    def test_plugged_state_unknown(self, monkeypatch):
        """Test psutil reporting power_plugged=None gives Unknown source."""
        battery = SimpleNamespace(percent=50, secsleft=-2, power_plugged=None)
        monkeypatch.setattr(power.psutil, "sensors_battery", lambda: battery, raising=False)
        status = PsutilPowerNormalizer().status()
        assert status.source is PowerSource.UNKNOWN
        assert status.charge == "50%"

    def test_sensor_error(self, monkeypatch):
        """Test an error from psutil degrades to Unknown without raising."""

        def broken():
            raise RuntimeError("sensor failure")

        monkeypatch.setattr(power.psutil, "sensors_battery", broken, raising=False)
        assert PsutilPowerNormalizer().status() == PowerStatus.unknown()


class TestStatusNeverRaises:
    """Tests for the degrade-on-failure contract."""

    def test_parse_failure(self):
        """Test an exception from normalize() is turned into Unknown."""

        class Broken(PowerStatusNormalizer[str]):
            name = "broken"

            def read_raw(self):
                return "whatever"

            def normalize(self, raw):
                raise ValueError("cannot parse")

        assert Broken().status() == PowerStatus.unknown()


class TestSelectNormalizer:
    """Tests for select_normalizer."""

    @pytest.mark.parametrize(
        "platform, expected",
        [
            ("linux", SysfsPowerNormalizer),
            ("darwin", PmsetPowerNormalizer),
            ("win32", PsutilPowerNormalizer),
            ("freebsd14", PsutilPowerNormalizer),
        ],
    )
    def test_auto_by_platform(self, platform, expected):
        """Test auto picks one strategy per platform."""
        assert type(select_normalizer("auto", platform=platform)) is expected

    def test_explicit_backend(self):
        """Test an explicit backend overrides the platform."""
        assert isinstance(select_normalizer("pmset", platform="linux"), PmsetPowerNormalizer)

    def test_unknown_backend(self):
        """Test an unknown backend name is rejected."""
        with pytest.raises(ValueError, match="Unknown power backend"):
            select_normalizer("acpi")
