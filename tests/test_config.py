"""
Tests for catalog loading — YAML parsing, validation and section selection.
"""

import textwrap
from pathlib import Path

import pytest

from sysreport.core.config.catalog_loader import CatalogError, load_catalog, select_sections
from sysreport.core.data import BUILTIN_CATALOG


@pytest.fixture
def valid_catalog_yml(tmp_path: Path) -> Path:
    content = textwrap.dedent("""\
        sections:
          - name: network
            title: NETWORK
            subsections:
              - title: Routing
                probes:
                  - command: ip route show
                    description: Routing table
                    fallback:
                      command: route -n
                      fallback:
                        command: netstat -rn
          - name: disk
            title: DISK
            subsections:
              - title: Usage
                probes:
                  - command: df -hT
                  - command: fdisk -l
                    requires_elevation: true
                    install_hint: "Install with 'apt install fdisk'"
    """)
    path = tmp_path / "catalog.yml"
    path.write_text(content)
    return path


class TestLoadCatalog:
    def test_load_valid(self, valid_catalog_yml: Path):
        catalog = load_catalog(valid_catalog_yml)
        assert catalog.section_names == ["network", "disk"]
        routing = catalog.sections[0].subsections[0].probes[0]
        assert [p.command for p in routing.chain()] == [
            "ip route show",
            "route -n",
            "netstat -rn",
        ]
        fdisk = catalog.sections[1].subsections[0].probes[1]
        assert fdisk.requires_elevation
        assert fdisk.install_hint == "Install with 'apt install fdisk'"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "bad.yml"
        path.write_text("sections: [unclosed\n")
        with pytest.raises(CatalogError, match="Invalid YAML"):
            load_catalog(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "list.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(CatalogError, match="Expected a YAML mapping"):
            load_catalog(path)

    def test_schema_violation(self, tmp_path: Path):
        path = tmp_path / "schema.yml"
        path.write_text("sections:\n  - title: missing name\n")
        with pytest.raises(CatalogError, match="Invalid probe catalog"):
            load_catalog(path)

    def test_duplicate_section_names(self, tmp_path: Path):
        path = tmp_path / "dup.yml"
        path.write_text(textwrap.dedent("""\
            sections:
              - name: disk
                title: A
              - name: disk
                title: B
        """))
        with pytest.raises(CatalogError, match="Duplicate section names"):
            load_catalog(path)


class TestBuiltinCatalog:
    def test_builtin_file_exists(self):
        assert BUILTIN_CATALOG.is_file()

    def test_five_sections_in_order(self):
        catalog = load_catalog()
        assert catalog.section_names == ["hardware", "disk", "network", "performance", "process"]

    def test_every_probe_has_a_tool(self):
        catalog = load_catalog()
        for section in catalog.sections:
            for probe in section.probes():
                for link in probe.chain():
                    assert link.governing_tool, link.command

    def test_hardware_section_has_twelve_subsections(self):
        hardware = load_catalog().get_section("hardware")
        titles = [s.title for s in hardware.subsections]
        assert titles[0] == "System Information"
        assert titles[-1] == "System Temperature"
        assert len(titles) == 12

    def test_pci_probe_falls_back_to_basic_listing(self):
        hardware = load_catalog().get_section("hardware")
        pci = next(p for p in hardware.probes() if p.command == "lspci -v")
        assert pci.requires_elevation
        assert pci.fallback is not None
        assert pci.fallback.command == "lspci"
        assert not pci.fallback.requires_elevation

    def test_sampling_probes_declare_duration(self):
        performance = load_catalog().get_section("performance")
        vmstat = next(p for p in performance.probes() if p.command.startswith("vmstat"))
        assert vmstat.expected_seconds == 5


class TestSelectSections:
    def test_all_by_default(self, valid_catalog_yml: Path):
        catalog = load_catalog(valid_catalog_yml)
        assert [(n, s.name) for n, s in select_sections(catalog)] == [
            (1, "network"),
            (2, "disk"),
        ]

    def test_keeps_catalog_order_and_numbers(self, valid_catalog_yml: Path):
        catalog = load_catalog(valid_catalog_yml)
        selected = select_sections(catalog, ["disk", "network"])
        assert [(n, s.name) for n, s in selected] == [(1, "network"), (2, "disk")]

    def test_subset_numbering(self, valid_catalog_yml: Path):
        catalog = load_catalog(valid_catalog_yml)
        assert [(n, s.name) for n, s in select_sections(catalog, ["disk"])] == [(2, "disk")]

    def test_unknown_section(self, valid_catalog_yml: Path):
        catalog = load_catalog(valid_catalog_yml)
        with pytest.raises(CatalogError, match="Unknown section\\(s\\): gpu"):
            select_sections(catalog, ["gpu"])
