"""
Unit tests for loanmap.registry module.
"""

import pytest
from loanmap.registry import RegionInfo, RegionRegistry


class TestRegionRegistry:

    def test_default_table_has_states_and_territories(self):
        """The bundled table covers the states plus territories."""
        reg = RegionRegistry.default()
        assert len(reg) >= 50
        assert reg.by_name("California").code == "CA"
        assert reg.by_code("CA").population == 37254522

    def test_territory_population_is_unknown(self):
        reg = RegionRegistry.default()
        assert reg.by_name("Guam").population is None
        assert reg.population_for("GU") is None

    def test_name_lookup_ignores_case_and_spacing(self, registry):
        assert registry.code_for("  california ") == "CA"
        assert RegionRegistry.default().code_for("Federated States of Micronesia") == "FM"

    def test_code_lookup_is_case_insensitive(self, registry):
        assert registry.by_code("or").name == "Oregon"

    def test_unknown_name_is_unresolved(self, registry):
        assert registry.code_for("Atlantis") is None
        assert registry.code_for(None) is None
        assert registry.by_code("") is None

    def test_resolve_accepts_code_or_name(self, registry):
        assert registry.resolve("CA").name == "California"
        assert registry.resolve("Oregon").code == "OR"

    def test_negative_population_rejected(self):
        with pytest.raises(ValueError, match="Negative population"):
            RegionRegistry([RegionInfo(name="Nowhere", code="NW", population=-1)])
