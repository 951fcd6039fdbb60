"""Tests for provider base module."""
import pytest

from providers.accuweather import AccuWeatherProvider
from providers.base import (
    BadSyntaxError,
    ConfigError,
    LocationNotFoundError,
    MissingParameterError,
    ProviderError,
    ProviderNotFoundError,
    ProviderRequestError,
    UnknownParameterError,
    UnsupportedDateError,
    WeatherProvider,
    require_params,
)
from providers.openweather import OpenWeatherProvider
from providers.weatherapi import WeatherApiProvider
from weather_cli.models import ParamDescriptor, ProviderDescriptor

ALL_PROVIDERS = [OpenWeatherProvider, WeatherApiProvider, AccuWeatherProvider]


class TestWeatherProviderProtocol:
    """Tests for WeatherProvider protocol compliance."""

    @pytest.mark.parametrize("provider_cls", ALL_PROVIDERS)
    def test_implements_protocol(self, provider_cls, rest):
        provider = provider_cls.from_section({"apikey": "k"}, rest=rest)
        assert isinstance(provider, WeatherProvider)

    @pytest.mark.parametrize("provider_cls", ALL_PROVIDERS)
    def test_construct_requires_apikey(self, provider_cls, rest, mock_client):
        """Construction validates parameters without network I/O."""
        with pytest.raises(MissingParameterError) as exc_info:
            provider_cls.from_section({}, rest=rest)
        assert exc_info.value.param_id == "apikey"
        mock_client.get.assert_not_called()

    @pytest.mark.parametrize("provider_cls", ALL_PROVIDERS)
    def test_param_ids_unique(self, provider_cls):
        ids = provider_cls.describe().param_ids()
        assert len(ids) == len(set(ids))


class TestRequireParams:
    """Tests for section validation."""

    DESCRIPTOR = ProviderDescriptor(
        description="Test",
        params=(
            ParamDescriptor("apikey", "API key", "auth"),
            ParamDescriptor("region", "Region", "area"),
        ),
    )

    def test_all_present(self):
        section = {"apikey": "x", "region": "eu", "extra": "ignored"}
        assert require_params(self.DESCRIPTOR, section) == {"apikey": "x", "region": "eu"}

    def test_first_missing_in_descriptor_order(self):
        with pytest.raises(MissingParameterError) as exc_info:
            require_params(self.DESCRIPTOR, {})
        assert exc_info.value.param_id == "apikey"

    def test_keys_are_case_sensitive(self):
        with pytest.raises(MissingParameterError) as exc_info:
            require_params(self.DESCRIPTOR, {"apikey": "x", "Region": "eu"})
        assert exc_info.value.param_id == "region"

    def test_section_not_mutated(self):
        section = {"apikey": "x", "region": "eu"}
        require_params(self.DESCRIPTOR, section)
        assert section == {"apikey": "x", "region": "eu"}


class TestErrors:
    """Tests for error classes."""

    def test_provider_error_formatting(self):
        error = ProviderError("test", "Something went wrong")
        assert str(error) == "[test] Something went wrong"
        assert error.provider == "test"

    def test_provider_not_found(self):
        error = ProviderNotFoundError("nope")
        assert "No such provider: nope" in str(error)

    def test_subclasses(self):
        assert isinstance(UnsupportedDateError("x"), ProviderError)
        assert isinstance(LocationNotFoundError("x", "Atlantis"), ProviderError)
        assert isinstance(ProviderRequestError("x", "HTTP 500"), ProviderError)
        assert "Atlantis" in str(LocationNotFoundError("x", "Atlantis"))

    def test_config_errors(self):
        assert isinstance(MissingParameterError("a"), ConfigError)
        assert "'a'" in str(UnknownParameterError("a"))
        assert "novalue" in str(BadSyntaxError("novalue"))
