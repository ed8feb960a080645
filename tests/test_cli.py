"""Tests for the command line front end."""

import json
from unittest.mock import patch

import pytest

from pynetsweep import cli
from pynetsweep.models import Protocol


@pytest.fixture
def fake_probes(recording_probe):
    probes = {
        Protocol.TCP: recording_probe(open_ports={"10.0.0.1": {80}, "10.0.0.2": {80, 443}}),
        Protocol.UDP: recording_probe(protocol=Protocol.UDP),
        Protocol.ARP: recording_probe(protocol=Protocol.ARP, macs={"10.0.0.2": "00:11:22:33:44:55"}),
    }
    with patch("pynetsweep.cli.default_probes", return_value=probes):
        yield probes


def test_tcp_scan_exports_json(tmp_path, fake_probes, capsys):
    out = tmp_path / "result.json"
    cli.main(["--targets", "10.0.0.1 10.0.0.2", "--ports", "80,443", "--export", str(out)])
    with open(out) as f:
        data = json.load(f)
    assert data == [
        {"host": "10.0.0.1", "protocol": "tcp", "ports": [80]},
        {"host": "10.0.0.2", "protocol": "tcp", "ports": [80, 443]},
    ]
    assert "Results saved to" in capsys.readouterr().out


def test_targets_file(tmp_path, fake_probes):
    targets = tmp_path / "targets.txt"
    targets.write_text("10.0.0.2\n\n")
    out = tmp_path / "result.csv"
    cli.main(["--targets", str(targets), "--ports", "443", "--export", str(out), "--export-format", "csv"])
    assert out.read_text().splitlines()[1] == "10.0.0.2,443"


def test_arp_scan_over_range(tmp_path, fake_probes):
    cli.main(["--start", "10.0.0.1", "--end", "10.0.0.3", "--protocol", "arp",
              "--out-dir", str(tmp_path), "--export-format", "xml"])
    exported = list(tmp_path.glob("arp_scan_*.xml"))
    assert len(exported) == 1
    assert len(fake_probes[Protocol.ARP].calls) == 3


def test_default_ports_used(tmp_path, fake_probes):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--cidr", "10.0.1.0/31", "--protocol", "udp", "--out-dir", str(tmp_path)])
    assert exc.value.code == 0
    assert len(fake_probes[Protocol.UDP].calls) == 2 * 33


def test_bad_ports_exit_before_scanning(fake_probes, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--targets", "10.0.0.1", "--ports", "80-22"])
    assert exc.value.code == 1
    assert "Error:" in capsys.readouterr().out
    assert fake_probes[Protocol.TCP].calls == []


def test_bad_cidr_exit(fake_probes):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--cidr", "10.0.0.0/32"])
    assert exc.value.code == 1


def test_missing_targets(fake_probes):
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 1


def test_bad_concurrency(fake_probes):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--targets", "10.0.0.1", "--hosts", "0"])
    assert exc.value.code == 1
