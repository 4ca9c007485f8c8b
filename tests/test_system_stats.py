import json
import statistics
from types import SimpleNamespace

import psutil
import pytest

from ewwcore.system_stats import (
    get_battery_capacity,
    get_cpus,
    get_disks,
    get_ram,
    get_temperatures,
    net,
)


def _battery(root, name, **files):
    supply = root / name
    supply.mkdir()
    for key, value in files.items():
        (supply / key).write_text(f"{value}\n")
    return supply


def test_ram_fields(monkeypatch):
    monkeypatch.setattr(psutil, "virtual_memory", lambda: SimpleNamespace(total=1000, free=200, available=400))
    monkeypatch.setattr(psutil, "swap_memory", lambda: SimpleNamespace(total=500, free=100))
    ram = json.loads(get_ram())
    assert ram["total_mem"] == 1000
    assert ram["free_swap"] == 100
    assert ram["used_mem"] == ram["total_mem"] - ram["available_mem"]
    assert ram["used_mem_perc"] == pytest.approx(ram["used_mem"] / ram["total_mem"] * 100)


def test_disks_keyed_by_mount_point(monkeypatch):
    monkeypatch.setattr(
        psutil, "disk_partitions", lambda: [SimpleNamespace(device="/dev/sda1", mountpoint="/")]
    )
    monkeypatch.setattr(psutil, "disk_usage", lambda path: SimpleNamespace(total=100, free=25))
    disks = json.loads(get_disks())
    root = disks["/"]
    assert root["name"] == "/dev/sda1"
    assert root["used"] == root["total"] - root["free"]
    assert root["used_perc"] == pytest.approx(root["used"] / root["total"] * 100)


def test_disks_skip_unreadable(monkeypatch):
    monkeypatch.setattr(psutil, "disk_partitions", lambda: [SimpleNamespace(device="x", mountpoint="/gone")])

    def refuse(path):
        raise PermissionError(path)

    monkeypatch.setattr(psutil, "disk_usage", refuse)
    assert json.loads(get_disks()) == {}


def test_temperature_labels(monkeypatch):
    monkeypatch.setattr(
        psutil,
        "sensors_temperatures",
        lambda: {"coretemp": [SimpleNamespace(label="Package id 0", current=42.5)]},
        raising=False,
    )
    temps = json.loads(get_temperatures())
    assert temps == {"CORETEMP_PACKAGE_ID_0": 42.5}


def test_cpus_average(monkeypatch):
    usages = [10.0, 30.0]
    monkeypatch.setattr(psutil, "cpu_percent", lambda percpu: usages)
    monkeypatch.setattr(psutil, "cpu_freq", lambda percpu: [SimpleNamespace(current=2400.0)] * 2)
    cpus = json.loads(get_cpus())
    assert [core["core"] for core in cpus["cores"]] == ["cpu0", "cpu1"]
    assert [core["freq"] for core in cpus["cores"]] == [2400, 2400]
    assert cpus["avg"] == pytest.approx(statistics.mean(usages))


def test_net_reports_deltas(monkeypatch):
    counters = {"testnic0": SimpleNamespace(bytes_sent=1000, bytes_recv=5000)}
    monkeypatch.setattr(psutil, "net_io_counters", lambda pernic: counters)
    first = json.loads(net())
    assert first["testnic0"] == {"NET_UP": 0, "NET_DOWN": 0}
    counters["testnic0"] = SimpleNamespace(bytes_sent=1300, bytes_recv=5900)
    second = json.loads(net())
    assert second["testnic0"] == {"NET_UP": 1300 - 1000, "NET_DOWN": 5900 - 5000}


def test_battery_energy(tmp_path):
    _battery(tmp_path, "BAT0", capacity=87, status="Discharging", energy_full=50000000, energy_now=25000000)
    battery = json.loads(get_battery_capacity(tmp_path))
    assert battery["BAT0"] == {"status": "Discharging", "capacity": 87}
    assert battery["total_avg"] == 50.0


def test_battery_charge_uses_voltage(tmp_path):
    _battery(
        tmp_path, "BAT1", capacity=40, status="Charging",
        charge_full=4000000, charge_now=1000000, voltage_now=12000000,
    )
    battery = json.loads(get_battery_capacity(tmp_path))
    assert battery["BAT1"]["status"] == "Charging"
    assert battery["total_avg"] == 25.0


def test_battery_none_gives_empty(tmp_path):
    _battery(tmp_path, "AC", online=1)
    assert get_battery_capacity(tmp_path) == ""


def test_battery_bad_number_raises(tmp_path):
    _battery(tmp_path, "BAT0", capacity=50, status="Full", energy_full="lots", energy_now=1)
    with pytest.raises(ValueError):
        get_battery_capacity(tmp_path)


def test_battery_missing_dir_raises(tmp_path):
    with pytest.raises(RuntimeError, match="Couldn't read"):
        get_battery_capacity(tmp_path / "missing")