"""
Probe catalog models — what the report runs, and in which order.

A probe is one diagnostic command plus its metadata. Probes are
grouped into subsections, subsections into sections, and sections
into the catalog. All of it is static data loaded from YAML.

Fallbacks are a recursive ``Probe.fallback`` field, so a chain is
finite and acyclic by construction.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field


class Probe(BaseModel):
    """One diagnostic command."""

    model_config = ConfigDict(frozen=True)

    command: str
    description: str = ""
    requires_elevation: bool = False
    fallback: Probe | None = None

    tool: str | None = None          # governing executable (default: first word)
    install_hint: str = ""           # shown when the tool is missing
    requires_path: str | None = None  # only applies if this path exists
    expected_seconds: float = 0.0    # intentional blocking time (samplers)

    @property
    def governing_tool(self) -> str:
        """The executable whose presence decides if this probe can run."""
        if self.tool:
            return self.tool
        parts = self.command.split()
        return parts[0] if parts else ""

    @property
    def label(self) -> str:
        """Description line, defaulting to the command itself."""
        return self.description or self.command

    def chain(self) -> Iterator[Probe]:
        """Yield this probe followed by every fallback, in order."""
        probe: Probe | None = self
        while probe is not None:
            yield probe
            probe = probe.fallback

    def hint(self) -> str:
        """First install hint found along the fallback chain."""
        for probe in self.chain():
            if probe.install_hint:
                return probe.install_hint
        return ""


class Subsection(BaseModel):
    """An ordered group of probes under one subtitle."""

    model_config = ConfigDict(frozen=True)

    title: str
    probes: list[Probe] = Field(default_factory=list)


class Section(BaseModel):
    """A topical report section (hardware, disk, network, ...)."""

    model_config = ConfigDict(frozen=True)

    name: str
    title: str
    subsections: list[Subsection] = Field(default_factory=list)

    def probes(self) -> Iterator[Probe]:
        """Every top-level probe in the section, in declaration order."""
        for subsection in self.subsections:
            yield from subsection.probes


class Catalog(BaseModel):
    """The full, ordered list of report sections."""

    model_config = ConfigDict(frozen=True)

    sections: list[Section] = Field(default_factory=list)

    @property
    def section_names(self) -> list[str]:
        return [s.name for s in self.sections]

    def get_section(self, name: str) -> Section | None:
        """Look up a section by name."""
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def tools(self) -> dict[str, str]:
        """Every governing tool in the catalog, mapped to its install hint.

        Fallback tools are included. Order is first appearance.
        """
        found: dict[str, str] = {}
        for section in self.sections:
            for top in section.probes():
                for probe in top.chain():
                    tool = probe.governing_tool
                    if not tool:
                        continue
                    if tool not in found or (not found[tool] and probe.install_hint):
                        found[tool] = probe.install_hint
        return found


Probe.model_rebuild()
