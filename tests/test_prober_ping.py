"""Unit tests for PingProber and ping output parsing."""

import subprocess

import pytest

from pingwatch.models import ProbeOutcome
from pingwatch.prober_ping import PingProber, parse_ping_latency_ms


class TestParsePingLatency:
    """Test parsing across platforms and output shapes."""

    def test_linux_output(self):
        output = """
PING google.com (142.250.185.46) 56(84) bytes of data.
64 bytes from lga25s78-in-f14.1e100.net (142.250.185.46): icmp_seq=1 ttl=117 time=12.3 ms

--- google.com ping statistics ---
1 packets transmitted, 1 received, 0% packet loss, time 0ms
rtt min/avg/max/mdev = 12.345/12.345/12.345/0.000 ms
"""
        assert parse_ping_latency_ms(output) == 12.3

    def test_macos_output(self):
        output = "64 bytes from 172.217.14.206: icmp_seq=0 ttl=56 time=8.123 ms"
        assert parse_ping_latency_ms(output) == 8.123

    def test_windows_output(self):
        output = """
Pinging google.com [142.250.185.46] with 32 bytes of data:
Reply from 142.250.185.46: bytes=32 time=15ms TTL=117

Ping statistics for 142.250.185.46:
    Packets: Sent = 1, Received = 1, Lost = 0 (0% loss),
"""
        assert parse_ping_latency_ms(output) == 15.0

    def test_windows_less_than(self):
        """Test "time<Nms" is read as the midpoint N/2."""
        assert parse_ping_latency_ms("Reply from 127.0.0.1: bytes=32 time<1ms TTL=128") == 0.5
        assert parse_ping_latency_ms("Reply from 192.168.1.1: bytes=32 time<10ms TTL=64") == 5.0

    def test_whitespace_variants(self):
        assert parse_ping_latency_ms("time = 25.7 ms") == 25.7
        assert parse_ping_latency_ms("time= 20 ms") == 20.0

    def test_case_insensitive(self):
        assert parse_ping_latency_ms("TIME=15.5 MS") == 15.5
        assert parse_ping_latency_ms("Time=11ms") == 11.0

    def test_empty_output(self):
        assert parse_ping_latency_ms("") is None
        assert parse_ping_latency_ms(None) is None

    def test_timeout_output(self):
        assert parse_ping_latency_ms("Request timed out.") is None

    def test_unreachable_output(self):
        """Test the summary line "time 0ms" is not mistaken for a reply."""
        output = """
PING 192.168.1.254 (192.168.1.254) 56(84) bytes of data.
From 192.168.1.1 icmp_seq=1 Destination Host Unreachable

--- 192.168.1.254 ping statistics ---
1 packets transmitted, 0 received, +1 errors, 100% packet loss, time 0ms
"""
        assert parse_ping_latency_ms(output) is None

    def test_localized_output_is_not_parsed(self):
        """Test non-English output returns None and is treated as a drop."""
        assert parse_ping_latency_ms("Antwort von 8.8.8.8: Bytes=32 Zeit=15ms TTL=117") is None
        assert parse_ping_latency_ms("Respuesta desde 8.8.8.8: bytes=32 tiempo=25ms TTL=117") is None


class TestBuildCommand:
    """Test platform-specific command building."""

    def test_windows(self):
        prober = PingProber(timeout_ms=1000)
        prober.system = "Windows"
        assert prober.build_command("google.com") == ["ping", "-n", "1", "-w", "1000", "google.com"]

    def test_linux(self):
        prober = PingProber(timeout_ms=1000)
        prober.system = "Linux"
        assert prober.build_command("google.com") == ["ping", "-c", "1", "-W", "1", "google.com"]

    def test_linux_rounds_timeout_up(self):
        prober = PingProber(timeout_ms=1500)
        prober.system = "Linux"
        assert prober.build_command("google.com") == ["ping", "-c", "1", "-W", "2", "google.com"]

    def test_linux_sub_second_timeout(self):
        prober = PingProber(timeout_ms=300)
        prober.system = "Linux"
        assert prober.build_command("8.8.8.8")[4] == "1"

    def test_macos(self):
        prober = PingProber(timeout_ms=1000)
        prober.system = "Darwin"
        assert prober.build_command("google.com") == ["ping", "-c", "1", "google.com"]


class TestInitialization:
    def test_default_timeout(self):
        prober = PingProber()
        assert prober.timeout_ms == 1000
        assert prober.timeout_seconds == 1.0

    @pytest.mark.parametrize("timeout_ms", [0, -100])
    def test_invalid_timeout(self, timeout_ms):
        with pytest.raises(ValueError, match="timeout_ms must be positive"):
            PingProber(timeout_ms=timeout_ms)


def completed(returncode=0, stdout=""):
    return subprocess.CompletedProcess(args=["ping"], returncode=returncode, stdout=stdout, stderr="")


class TestProbe:
    """Test probe classification with subprocess.run replaced."""

    def test_reply_is_success(self, monkeypatch):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append((cmd, kwargs))
            return completed(stdout="64 bytes from 10.0.0.1: icmp_seq=1 ttl=64 time=21.4 ms")

        monkeypatch.setattr(subprocess, "run", fake_run)
        prober = PingProber(timeout_ms=1000)

        assert prober.probe("10.0.0.1") == ProbeOutcome.success("10.0.0.1", 21.4)
        cmd, kwargs = calls[0]
        assert cmd[-1] == "10.0.0.1"
        assert kwargs["shell"] is False
        assert kwargs["timeout"] == 1.5

    def test_nonzero_returncode_is_failure(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", lambda cmd, **kw: completed(returncode=1))
        assert PingProber().probe("10.0.0.1").loss is True

    def test_unparseable_output_is_failure(self, monkeypatch):
        monkeypatch.setattr(
            subprocess, "run", lambda cmd, **kw: completed(stdout="Antwort von 10.0.0.1: Zeit=3ms")
        )
        assert PingProber().probe("10.0.0.1").loss is True

    def test_timeout_is_failure(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert PingProber().probe("10.0.0.1").loss is True

    def test_missing_ping_binary_is_failure(self, monkeypatch):
        """Test OS errors are reported as a drop, not raised."""

        def fake_run(cmd, **kwargs):
            raise FileNotFoundError("ping")

        monkeypatch.setattr(subprocess, "run", fake_run)
        outcome = PingProber().probe("10.0.0.1")

        assert outcome.loss is True
        assert outcome.host == "10.0.0.1"

    @pytest.mark.parametrize("host", ["", "   "])
    def test_blank_host_is_failure_without_running_ping(self, monkeypatch, host):
        def fake_run(cmd, **kwargs):
            raise AssertionError("ping must not run for a blank host")

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert PingProber().probe(host).loss is True

    @pytest.mark.parametrize("system", ["Linux", "Darwin"])
    def test_ping_runs_in_own_session(self, monkeypatch, system):
        """Test ping is detached from the terminal so Ctrl+C does not kill it mid-probe."""
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(kwargs)
            return completed(stdout="time=9.1 ms")

        monkeypatch.setattr(subprocess, "run", fake_run)
        prober = PingProber()
        prober.system = system

        prober.probe("10.0.0.1")

        assert calls[0]["start_new_session"] is True
        assert "creationflags" not in calls[0]

    def test_ping_runs_in_own_process_group_on_windows(self, monkeypatch):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(kwargs)
            return completed(stdout="Reply from 10.0.0.1: bytes=32 time=9ms TTL=64")

        monkeypatch.setattr(subprocess, "run", fake_run)
        prober = PingProber()
        prober.system = "Windows"

        prober.probe("10.0.0.1")

        assert calls[0]["creationflags"] == 0x200
        assert "start_new_session" not in calls[0]
