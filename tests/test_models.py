"""
Tests for domain models — probes, catalog, results and privilege context.
"""

import pytest
from pydantic import ValidationError

from sysreport.core.models import (
    Catalog,
    CommandOutcome,
    ExecutionResult,
    ExitStatus,
    FailureKind,
    PrivilegeContext,
    Probe,
    Section,
    Subsection,
    detect_privilege,
)

# ── Probe ────────────────────────────────────────────────────────────


class TestProbe:
    def test_governing_tool_defaults_to_first_word(self):
        assert Probe(command="lspci -v").governing_tool == "lspci"

    def test_governing_tool_override(self):
        probe = Probe(command="lsmod | sort", tool="lsmod")
        assert probe.governing_tool == "lsmod"

    def test_governing_tool_empty_command(self):
        assert Probe(command="").governing_tool == ""

    def test_label_defaults_to_command(self):
        assert Probe(command="uptime").label == "uptime"
        assert Probe(command="uptime", description="Load").label == "Load"

    def test_chain_order(self):
        probe = Probe(
            command="ip route show",
            fallback=Probe(command="route -n", fallback=Probe(command="netstat -rn")),
        )
        assert [p.command for p in probe.chain()] == [
            "ip route show",
            "route -n",
            "netstat -rn",
        ]

    def test_chain_single(self):
        assert [p.command for p in Probe(command="w").chain()] == ["w"]

    def test_hint_from_fallback(self):
        probe = Probe(
            command="ip a",
            fallback=Probe(command="ifconfig", install_hint="apt install net-tools"),
        )
        assert probe.hint() == "apt install net-tools"

    def test_frozen(self):
        probe = Probe(command="w")
        with pytest.raises(ValidationError):
            probe.command = "who"

    def test_nested_fallback_from_dict(self):
        probe = Probe.model_validate(
            {"command": "lspci -v", "fallback": {"command": "lspci"}}
        )
        assert probe.fallback is not None
        assert probe.fallback.command == "lspci"
        assert probe.fallback.fallback is None


# ── Catalog ──────────────────────────────────────────────────────────


class TestCatalog:
    def test_get_section(self, small_catalog: Catalog):
        assert small_catalog.get_section("network").title == "NETWORK"
        assert small_catalog.get_section("nope") is None

    def test_section_names_in_order(self, small_catalog: Catalog):
        assert small_catalog.section_names == ["hardware", "network"]

    def test_section_probes(self, small_catalog: Catalog):
        hardware = small_catalog.get_section("hardware")
        assert [p.command for p in hardware.probes()] == [
            "lscpu",
            "nproc --all",
            "dmidecode -t bios",
        ]

    def test_tools_include_fallbacks(self, small_catalog: Catalog):
        tools = small_catalog.tools()
        assert list(tools) == ["lscpu", "nproc", "dmidecode", "ip", "ifconfig"]
        assert tools["dmidecode"] == "Install with 'apt install dmidecode'"

    def test_tools_keep_first_non_empty_hint(self):
        catalog = Catalog(
            sections=[
                Section(
                    name="s",
                    title="S",
                    subsections=[
                        Subsection(
                            title="x",
                            probes=[
                                Probe(command="ss -s"),
                                Probe(command="ss -tulpn", install_hint="apt install iproute2"),
                            ],
                        )
                    ],
                )
            ]
        )
        assert catalog.tools() == {"ss": "apt install iproute2"}


# ── Results ──────────────────────────────────────────────────────────


class TestCommandOutcome:
    def test_success(self):
        outcome = CommandOutcome.success(stdout="hi")
        assert outcome.ok
        assert outcome.return_code == 0

    def test_failure(self):
        outcome = CommandOutcome.failure(error="boom", return_code=2)
        assert not outcome.ok
        assert outcome.status == "failed"


class TestExecutionResult:
    def test_success(self):
        result = ExecutionResult.success(command="w", stdout="out")
        assert result.ok
        assert result.exit_status == ExitStatus.SUCCESS
        assert result.failure is None
        assert not result.used_fallback

    def test_failure(self):
        result = ExecutionResult.failure_of(
            command="w", kind=FailureKind.EXECUTION_FAILURE, error="exit 1"
        )
        assert result.failed
        assert not result.ok
        assert result.error == "exit 1"

    def test_not_attempted(self):
        result = ExecutionResult.not_attempted(command="sensors", reason="missing")
        assert result.exit_status == ExitStatus.NOT_ATTEMPTED
        assert result.failure == FailureKind.TOOL_UNAVAILABLE
        assert not result.ok
        assert not result.failed

    def test_status_values_serialize(self):
        data = ExecutionResult.success(command="w").model_dump(mode="json")
        assert data["exit_status"] == "success"


# ── Privilege ────────────────────────────────────────────────────────


class TestPrivilegeContext:
    def test_defaults(self):
        ctx = PrivilegeContext()
        assert not ctx.is_elevated
        assert not ctx.escalation_available
        assert ctx.user == ""

    def test_frozen(self):
        ctx = PrivilegeContext()
        with pytest.raises(ValidationError):
            ctx.is_elevated = True


class TestDetectPrivilege:
    def test_root_with_sudo(self, monkeypatch):
        monkeypatch.setattr("os.geteuid", lambda: 0)
        monkeypatch.setattr("shutil.which", lambda name: "/usr/bin/sudo")
        ctx = detect_privilege()
        assert ctx.is_elevated
        assert ctx.escalation_available

    def test_user_without_sudo(self, monkeypatch):
        monkeypatch.setattr("os.geteuid", lambda: 1000)
        monkeypatch.setattr("shutil.which", lambda name: None)
        ctx = detect_privilege()
        assert not ctx.is_elevated
        assert not ctx.escalation_available

    def test_never_fails_without_user(self, monkeypatch):
        def _no_user():
            raise KeyError("no passwd entry")

        monkeypatch.setattr("getpass.getuser", _no_user)
        ctx = detect_privilege()
        assert ctx.user == ""
