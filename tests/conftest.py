"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from sysreport.adapters.mock import MockAvailability, MockRunner
from sysreport.core.models.privilege import PrivilegeContext
from sysreport.core.models.probe import Catalog, Probe, Section, Subsection


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def root_ctx() -> PrivilegeContext:
    """Already running as root."""
    return PrivilegeContext(is_elevated=True, escalation_available=True, user="root")


@pytest.fixture
def sudo_ctx() -> PrivilegeContext:
    """Unprivileged user with sudo installed."""
    return PrivilegeContext(is_elevated=False, escalation_available=True, user="alice")


@pytest.fixture
def bare_ctx() -> PrivilegeContext:
    """Unprivileged user without any escalation helper."""
    return PrivilegeContext(is_elevated=False, escalation_available=False, user="alice")


@pytest.fixture
def runner() -> MockRunner:
    return MockRunner()


@pytest.fixture
def availability() -> MockAvailability:
    return MockAvailability()


@pytest.fixture
def small_catalog() -> Catalog:
    """Two sections, a fallback and an elevated probe."""
    return Catalog(
        sections=[
            Section(
                name="hardware",
                title="HARDWARE",
                subsections=[
                    Subsection(
                        title="CPU",
                        probes=[
                            Probe(command="lscpu", description="CPU architecture"),
                            Probe(command="nproc --all", description="Processing units"),
                        ],
                    ),
                    Subsection(
                        title="DMI",
                        probes=[
                            Probe(
                                command="dmidecode -t bios",
                                description="BIOS information",
                                requires_elevation=True,
                                install_hint="Install with 'apt install dmidecode'",
                            ),
                        ],
                    ),
                ],
            ),
            Section(
                name="network",
                title="NETWORK",
                subsections=[
                    Subsection(
                        title="Interfaces",
                        probes=[
                            Probe(
                                command="ip -brief address",
                                description="Addresses",
                                fallback=Probe(command="ifconfig -a", description="Addresses (ifconfig)"),
                            ),
                        ],
                    ),
                ],
            ),
        ]
    )
