"""
Tests for converter_ui.py

Tests cover:
- Dash app and layout structure
- convert_value callback (success and each failure reason)
- Result caption, logging and server settings helpers
"""

import logging

import pytest
from unittest.mock import patch
import dash.exceptions

import converter_ui
from errors import IncompatibleUnits
from unit_registry import registry


def find_component(component, component_id):
    """Walk a Dash layout and return the component with the given id, or None"""
    if getattr(component, "id", None) == component_id:
        return component
    children = getattr(component, "children", None)
    if children is None or isinstance(children, str):
        return None
    if not isinstance(children, (list, tuple)):
        children = [children]
    for child in children:
        found = find_component(child, component_id)
        if found is not None:
            return found
    return None


class TestDashApp:
    """Test cases for Dash app configuration"""

    def test_app_exists(self):
        assert converter_ui.app is not None
        assert converter_ui.server is converter_ui.app.server

    def test_app_layout_exists(self):
        assert converter_ui.app.layout is not None

    @pytest.mark.parametrize(
        "component_id",
        [
            "input-unit",
            "output-unit",
            "input-value",
            "convert-button",
            "conversion-alert",
            "converted-value",
            "converted-unit",
            "conversion-grid",
        ],
    )
    def test_layout_components(self, component_id):
        assert find_component(converter_ui.app.layout, component_id) is not None

    def test_dropdowns_list_registry_units(self):
        for dropdown_id in ("input-unit", "output-unit"):
            dropdown = find_component(converter_ui.app.layout, dropdown_id)
            assert dropdown.options == registry.dropdown_options()
            assert getattr(dropdown, "value", None) is None

    def test_initial_result_display(self):
        assert find_component(converter_ui.app.layout, "converted-value").children == "0"
        assert find_component(converter_ui.app.layout, "converted-unit").children == "Unit"

    def test_alert_starts_closed(self):
        alert = find_component(converter_ui.app.layout, "conversion-alert")
        assert alert.is_open is False


class TestConvertValueCallback:
    """Test cases for the convert_value callback"""

    def test_no_click_prevents_update(self):
        with pytest.raises(dash.exceptions.PreventUpdate):
            converter_ui.convert_value(0, "1", "Meters (m)", "Feet (ft)")
        with pytest.raises(dash.exceptions.PreventUpdate):
            converter_ui.convert_value(None, "1", "Meters (m)", "Feet (ft)")

    def test_successful_conversion(self):
        value, caption, message, is_open, rows = converter_ui.convert_value(
            1, "1000", "Millimeters (mm)", "Meters (m)"
        )
        assert value == "1.00"
        assert caption == "Meters (m)"
        assert message == ""
        assert is_open is False
        assert [row["unit"] for row in rows] == list(registry.list_units("length"))

    def test_gallons_to_liters_display(self):
        value, caption, _, _, _ = converter_ui.convert_value(
            3, "1", "Gallons (gal)", "Liters (l)"
        )
        assert value == "3.79"
        assert caption == "Liters (l)"

    def test_table_rows_are_records(self):
        *_, rows = converter_ui.convert_value(1, "1", "Kilograms (kg)", "Grams (g)")
        grams = next(row for row in rows if row["unit"] == "Grams (g)")
        assert grams == {"unit": "Grams (g)", "symbol": "g", "value": 1000.0}

    def test_incompatible_units(self):
        value, caption, message, is_open, rows = converter_ui.convert_value(
            1, "10", "Meters (m)", "Grams (g)"
        )
        assert value == "0"
        assert caption == "Grams (g)"
        assert message == "Incompatible unit types selected."
        assert is_open is True
        assert rows == []

    def test_missing_selection(self):
        value, caption, message, is_open, rows = converter_ui.convert_value(
            1, "10", None, None
        )
        assert value == "0"
        assert caption == "Unit"
        assert message == "Please fill all fields."
        assert is_open is True
        assert rows == []

    @pytest.mark.parametrize("raw_value", ["", None, "abc", "nan"])
    def test_invalid_value(self, raw_value):
        value, _, message, is_open, rows = converter_ui.convert_value(
            1, raw_value, "Meters (m)", "Feet (ft)"
        )
        assert value == "0"
        assert message == "Please enter a valid number."
        assert is_open is True
        assert rows == []

    def test_rejection_is_logged(self, caplog):
        with caplog.at_level("INFO", logger="converter_ui"):
            converter_ui.convert_value(1, "10", "Meters (m)", "Grams (g)")
        assert "Conversion rejected" in caplog.text

    def test_engine_called_with_raw_inputs(self):
        with patch("converter_ui.converter.convert", side_effect=IncompatibleUnits("boom")) as mock_convert:
            result = converter_ui.convert_value(2, " 5 ", "Feet (ft)", "Inches (in)")
        mock_convert.assert_called_once_with(" 5 ", "Feet (ft)", "Inches (in)")
        assert result[2] == "Incompatible unit types selected."

    def test_unexpected_errors_propagate(self):
        with patch("converter_ui.converter.convert", side_effect=RuntimeError("bug")):
            with pytest.raises(RuntimeError):
                converter_ui.convert_value(1, "1", "Feet (ft)", "Inches (in)")


class TestUnitCaption:
    def test_selected_unit(self):
        assert converter_ui.unit_caption("Cups (cup)") == "Cups (cup)"

    @pytest.mark.parametrize("unit", [None, ""])
    def test_no_unit(self, unit):
        assert converter_ui.unit_caption(unit) == "Unit"


class TestConfigureLogging:
    """Test cases for configure_logging"""

    def test_import_leaves_root_logging_alone(self):
        """Logging is configured only when the page runs as a script"""
        assert not hasattr(converter_ui, "log_level")
        assert not hasattr(converter_ui, "log_level_name")

    def test_default_level(self):
        with patch("converter_ui.logging.basicConfig") as mock_basic_config:
            level = converter_ui.configure_logging({})
        assert level == logging.INFO
        assert mock_basic_config.call_args.kwargs["level"] == logging.INFO

    def test_level_from_environment(self):
        with patch("converter_ui.logging.basicConfig") as mock_basic_config:
            level = converter_ui.configure_logging({"LOG_LEVEL": "debug"})
        assert level == logging.DEBUG
        assert "%(lineno)d" in mock_basic_config.call_args.kwargs["format"]

    @pytest.mark.parametrize("name", ["loud", "BASIC_FORMAT"])
    def test_unknown_level_falls_back_to_info(self, name):
        with patch("converter_ui.logging.basicConfig"):
            assert converter_ui.configure_logging({"LOG_LEVEL": name}) == logging.INFO


class TestServerSettings:
    """Test cases for server_settings"""

    def test_defaults_are_development(self):
        settings = converter_ui.server_settings({})
        assert settings == {"host": "localhost", "port": 8050, "debug": False, "production": False}

    def test_custom_address_and_debug(self):
        settings = converter_ui.server_settings({"CONVERTER_ADDR": "127.0.0.1", "DEBUG": "yes"})
        assert settings["host"] == "127.0.0.1"
        assert settings["debug"] is True

    def test_production_mode_flag(self):
        settings = converter_ui.server_settings({"PRODUCTION_MODE": "true", "DEBUG": "true"})
        assert settings == {"host": "0.0.0.0", "port": 8050, "debug": False, "production": True}

    def test_production_mode_flag_wins_over_environment(self):
        settings = converter_ui.server_settings({"PRODUCTION_MODE": "false", "ENVIRONMENT": "production"})
        assert settings["production"] is False

    def test_environment_variable(self):
        assert converter_ui.server_settings({"ENVIRONMENT": "production"})["production"] is True
        assert converter_ui.server_settings({"ENVIRONMENT": "staging"})["production"] is False

    def test_port_fallback(self):
        settings = converter_ui.server_settings({"PORT": "5000"})
        assert settings["port"] == 5000
        assert settings["production"] is True

    @patch.dict("os.environ", {"PORT": "8050", "DEBUG": "1"}, clear=True)
    def test_reads_process_environment(self):
        settings = converter_ui.server_settings()
        assert settings["debug"] is True
        assert settings["production"] is False
