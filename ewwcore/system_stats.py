"""System statistics rendered as JSON text for the built-in variables."""

from __future__ import annotations

import json
import logging
import math
import re
import subprocess
import sys
import threading
from pathlib import Path

import psutil

from .util import average

logger = logging.getLogger("ewwcore")

_DEFAULT_POWER_SUPPLY_DIR = Path("/sys/class/power_supply")

_net_lock = threading.Lock()
_last_net_counters: dict[str, tuple[int, int]] = {}


def _fmt(value: float) -> str:
    """Render a number the way the stats output expects: integral floats without a fraction."""
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _percent(part: float, whole: float) -> float:
    return part / whole * 100 if whole else math.nan


def get_disks() -> str:
    """Size and usage of every mounted partition, keyed by mount point."""
    entries = []
    for partition in psutil.disk_partitions():
        try:
            usage = psutil.disk_usage(partition.mountpoint)
        except OSError:
            continue
        total, free = usage.total, usage.free
        used = total - free
        entries.append(
            f'"{partition.mountpoint}": {{"name": {json.dumps(partition.device)}, "total": {total}, '
            f'"free": {free}, "used": {used}, "used_perc": {_fmt(_percent(used, total))}}}'
        )
    return "{ " + ",".join(entries) + " }"


def get_ram() -> str:
    """Memory and swap totals and usage."""
    memory = psutil.virtual_memory()
    swap = psutil.swap_memory()
    used = float(memory.total) - float(memory.available)
    return (
        f'{{"total_mem": {memory.total}, "free_mem": {memory.free}, "total_swap": {swap.total}, '
        f'"free_swap": {swap.free}, "available_mem": {memory.available}, "used_mem": {_fmt(used)}, '
        f'"used_mem_perc": {_fmt(_percent(used, memory.total))}}}'
    )


def get_temperatures() -> str:
    """Temperatures of all sensors in Celsius, keyed by upper-cased label."""
    reader = getattr(psutil, "sensors_temperatures", None)
    sensors = reader() if reader is not None else {}
    entries = []
    for chip, readings in sensors.items():
        for reading in readings:
            label = f"{chip} {reading.label}" if reading.label else chip
            key = label.upper().replace(" ", "_")
            entries.append(f'"{key}": {_fmt(reading.current)}')
    return "{ " + ",".join(entries) + " }"


def get_cpus() -> str:
    """Frequency and usage of every core plus the average usage."""
    usages = psutil.cpu_percent(percpu=True)
    freqs = psutil.cpu_freq(percpu=True) or []
    cores = []
    for number, usage in enumerate(usages):
        if number < len(freqs):
            freq = freqs[number]
        elif freqs:
            freq = freqs[0]
        else:
            freq = None
        mhz = int(freq.current) if freq is not None else 0
        cores.append(f'{{"core": "cpu{number}", "freq": {mhz}, "usage": {usage:.0f}}}')
    return f'{{ "cores": [{",".join(cores)}], "avg": {_fmt(average(usages))} }}'


def _read_trimmed(path: Path) -> str | None:
    try:
        return path.read_text().rstrip("\n")
    except OSError:
        return None


def _battery_from_sysfs(power_supply_dir: Path) -> str:
    try:
        supplies = sorted(power_supply_dir.iterdir())
    except OSError as err:
        raise RuntimeError(f"Couldn't read {power_supply_dir} directory") from err

    current = 0.0
    total = 0.0
    json_text = "{"
    for supply in supplies:
        if not supply.is_dir():
            continue
        capacity = _read_trimmed(supply / "capacity")
        status = _read_trimmed(supply / "status")
        if capacity is None or status is None:
            continue
        json_text += f'{json.dumps(supply.name)}: {{ "status": "{status}", "capacity": {capacity} }},'

        charge_full = _read_trimmed(supply / "charge_full")
        charge_now = _read_trimmed(supply / "charge_now")
        voltage_now = _read_trimmed(supply / "voltage_now")
        energy_full = _read_trimmed(supply / "energy_full")
        energy_now = _read_trimmed(supply / "energy_now")
        if charge_full is not None and charge_now is not None and voltage_now is not None:
            # (uAh / 1e6) * uV gives uWh scaled by 1e6
            voltage = float(voltage_now)
            current += float(charge_now) / 1_000_000 * voltage / 1_000_000
            total += float(charge_full) / 1_000_000 * voltage / 1_000_000
        elif energy_full is not None and energy_now is not None:
            current += float(energy_now)
            total += float(energy_full)
        else:
            logger.warning(
                "Failed to get/calculate uWh: the total_avg value of the battery magic var will "
                "probably be a garbage value that can not be trusted."
            )
    if total == 0:
        return ""
    return json_text + f' "total_avg": {current / total * 100:.1f}}}'


def _battery_from_pmset() -> str:
    try:
        output = subprocess.run(["pmset", "-g", "batt"], capture_output=True, check=False).stdout
    except OSError as err:
        raise RuntimeError("Error while getting the battery value on macos, with `pmset`") from err
    text = output.decode("utf-8")
    match = re.search(r"[0-9]*%", text)
    if match is None:
        raise RuntimeError("pmset output contained no battery percentage")
    number = match.group(0)[:-1]
    status = text.split(";")[1]
    return f'{{ "BAT0": {{ "capacity": "{number}", "status": "{status}" }}}}'


def get_battery_capacity(power_supply_dir: str | Path | None = None) -> str:
    """Capacity and status of every battery, plus the combined charge percentage.

    Returns an empty string if no battery energy could be read.
    """
    if power_supply_dir is not None:
        return _battery_from_sysfs(Path(power_supply_dir))
    if sys.platform == "darwin":
        return _battery_from_pmset()
    if sys.platform.startswith("linux"):
        return _battery_from_sysfs(_DEFAULT_POWER_SUPPLY_DIR)
    raise RuntimeError("Eww doesn't support your OS for getting the battery capacity")


def net() -> str:
    """Bytes sent and received on every interface since the previous call."""
    counters = psutil.net_io_counters(pernic=True)
    entries = []
    with _net_lock:
        for name, stats in counters.items():
            previous = _last_net_counters.get(name, (stats.bytes_sent, stats.bytes_recv))
            up = max(stats.bytes_sent - previous[0], 0)
            down = max(stats.bytes_recv - previous[1], 0)
            _last_net_counters[name] = (stats.bytes_sent, stats.bytes_recv)
            entries.append(f'"{name}": {{ "NET_UP": {up}, "NET_DOWN": {down} }}')
    return "{ " + ",".join(entries) + " }"