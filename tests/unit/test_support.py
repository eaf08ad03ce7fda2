"""
Tests for the support checker: which assertion calls the engine handles.
"""

import pytest
from assertnarrow.narrowing.catalog import CATALOG
from assertnarrow.narrowing.support import is_supported


class TestSupportChecker:

    @pytest.mark.parametrize("raw, arg_count, supported", [
        ("string", 1, True),
        ("string", 2, True),
        ("string", 0, False),
        ("nullOrString", 1, True),
        ("allString", 1, True),
        ("allNullOrString", 1, True),
        ("isInstanceOf", 1, False),
        ("isInstanceOf", 2, True),
        ("countBetween", 2, False),
        ("countBetween", 3, True),
        ("nullOrLengthBetween", 3, True),
        ("uuid", 1, False),
        ("allUuid", 1, False),
    ])
    def test_catalog_backed_names(self, raw, arg_count, supported):
        assert is_supported(raw, arg_count) is supported

    @pytest.mark.parametrize("raw, minimum", [
        ("allNotNull", 1),
        ("allNotInstanceOf", 2),
        ("allNotSame", 2),
    ])
    def test_per_element_negations_need_their_minimum(self, raw, minimum):
        assert is_supported(raw, minimum)
        assert is_supported(raw, minimum + 1)
        assert not is_supported(raw, minimum - 1)

    @pytest.mark.parametrize("raw", ["allNotEmpty", "allNotFalse", "allNotEq"])
    def test_other_per_element_negations_are_unsupported(self, raw):
        assert not is_supported(raw, 3)

    def test_every_catalog_entry_is_supported_at_its_arity(self):
        for name, template in CATALOG.items():
            assert is_supported(name, template.arity), name
            assert not is_supported(name, template.arity - 1), name
