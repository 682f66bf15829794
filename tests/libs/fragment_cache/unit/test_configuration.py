"""
Tests for fragment_cache.configuration

Tests cover:
- Defaults of FragmentCacheConfiguration
- Silent coercion of expiration/version (non-numeric, None, negative, bool)
- Fluent setters
- Options handling
- fragment_cache decorator and get_configuration()
"""

import pytest
from fragment_cache.configuration import (
    ALIAS_NAME,
    CONFIGURATION_ATTRIBUTE,
    KEY_ATTRIBUTE,
    FragmentCacheConfiguration,
    fragment_cache,
    get_configuration,
)


class TestFragmentCacheConfigurationDefaults:
    """Test default values."""

    def test_default_values(self) -> None:
        """Test default expiration, version and options."""
        configuration = FragmentCacheConfiguration()

        assert configuration.expiration == 1
        assert configuration.version == 1
        assert configuration.options == {}

    def test_attribute_names(self) -> None:
        """Test the alias and request attribute names."""
        assert ALIAS_NAME == "fragment_cache"
        assert CONFIGURATION_ATTRIBUTE == "_fragment_cache"
        assert KEY_ATTRIBUTE == "_fragment_cache_key"
        assert FragmentCacheConfiguration().alias_name == ALIAS_NAME


class TestCoercion:
    """Invalid numeric input falls back to 1 without raising."""

    @pytest.mark.parametrize(
        "value",
        ["abc", None, "", True, False, -5, [3], {"a": 1}, "1_000", "0x1A", "inf", "1e"],
    )
    def test_invalid_expiration_defaults_to_one(self, value) -> None:
        """Test that non-numeric or negative expiration falls back to 1."""
        assert FragmentCacheConfiguration(expiration=value).expiration == 1

    @pytest.mark.parametrize("value", ["abc", None, "", True, -1, float("nan")])
    def test_invalid_version_defaults_to_one(self, value) -> None:
        """Test that non-numeric or negative version falls back to 1."""
        assert FragmentCacheConfiguration(version=value).version == 1

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0, 0),
            (15, 15),
            ("30", 30),
            ("2.9", 2),
            (4.7, 4),
            (" 12 ", 12),
            ("1e2", 100),
            (".5", 0),
            ("+7", 7),
        ],
    )
    def test_numeric_input_is_truncated(self, value, expected) -> None:
        """Test that numeric strings and floats are truncated to int."""
        assert FragmentCacheConfiguration(expiration=value).expiration == expected
        assert FragmentCacheConfiguration(version=value).version == expected

    def test_set_expiration_non_numeric(self) -> None:
        """Test set_expiration with a non-numeric value."""
        configuration = FragmentCacheConfiguration(expiration=20)

        result = configuration.set_expiration("abc")

        assert result is configuration
        assert configuration.expiration == 1

    def test_set_version_none(self) -> None:
        """Test set_version with None."""
        configuration = FragmentCacheConfiguration(version=3)

        result = configuration.set_version(None)

        assert result is configuration
        assert configuration.version == 1

    def test_setters_accept_valid_values(self) -> None:
        """Test fluent setters with valid values."""
        configuration = FragmentCacheConfiguration()

        configuration.set_expiration("45").set_version(7)

        assert configuration.expiration == 45
        assert configuration.version == 7


class TestOptions:
    """Test custom options."""

    def test_options_are_kept(self) -> None:
        """Test that options are stored as given."""
        configuration = FragmentCacheConfiguration(options={"vary": "country"})

        assert configuration.options == {"vary": "country"}

    def test_set_options_replaces(self) -> None:
        """Test that set_options replaces existing options."""
        configuration = FragmentCacheConfiguration(options={"a": "1"})

        configuration.set_options({"b": "2"})

        assert configuration.options == {"b": "2"}

    def test_set_options_non_mapping_clears(self) -> None:
        """Test that a non-mapping value clears the options."""
        configuration = FragmentCacheConfiguration(options={"a": "1"})

        configuration.set_options("not-a-dict")

        assert configuration.options == {}

    def test_option_values_are_stringified(self) -> None:
        """Test that option values are converted to strings."""
        configuration = FragmentCacheConfiguration(options={"limit": 10})

        assert configuration.options == {"limit": "10"}


class TestFragmentCacheDecorator:
    """Test the handler decorator."""

    def test_decorator_attaches_configuration(self) -> None:
        """Test that the decorator attaches a configuration to the handler."""
        @fragment_cache(expiration=5, version=3, options={"vary": "lang"})
        def handler(request):
            return "body"

        configuration = get_configuration(handler)

        assert isinstance(configuration, FragmentCacheConfiguration)
        assert configuration.expiration == 5
        assert configuration.version == 3
        assert configuration.options == {"vary": "lang"}

    def test_decorator_returns_same_function(self) -> None:
        """Test that the decorator returns the handler unchanged."""
        def handler(request):
            return "body"

        assert fragment_cache()(handler) is handler
        assert handler(None) == "body"

    def test_decorator_coerces_invalid_values(self) -> None:
        """Test that decorator arguments go through the same coercion."""
        @fragment_cache(expiration="soon", version=None)
        def handler(request):
            return "body"

        configuration = get_configuration(handler)

        assert configuration.expiration == 1
        assert configuration.version == 1

    def test_undecorated_handler_has_no_configuration(self) -> None:
        """Test get_configuration on a plain handler."""
        def handler(request):
            return "body"

        assert get_configuration(handler) is None
