"""Tests for portbridge/lib/errors.py - structured exception hierarchy."""

from portbridge.lib.errors import (
    BridgeError,
    ConfigurationError,
    OutputWriteError,
    PortClosedError,
    PortError,
    UnitLoadError,
)


class TestBridgeError:
    """Tests for base BridgeError class."""

    def test_basic_message(self):
        error = BridgeError("Something went wrong")
        assert str(error) == "Something went wrong"

    def test_with_port(self):
        error = BridgeError("Write failed", port="user_file")
        assert "[user_file]" in str(error)

    def test_with_details_and_suggestion(self):
        error = BridgeError(
            "Bad wiring",
            details={"path": "users.json"},
            suggestion="Fix the config",
        )
        assert "path: users.json" in str(error)
        assert "Suggestion: Fix the config" in str(error)

    def test_to_dict(self):
        error = BridgeError("Oops", port="tx_file", details={"k": "v"})
        d = error.to_dict()
        assert d["error_type"] == "BridgeError"
        assert d["port"] == "tx_file"
        assert d["details"] == {"k": "v"}


class TestSubclasses:
    """Tests for the specific error types."""

    def test_hierarchy(self):
        for cls in (ConfigurationError, UnitLoadError, PortError, OutputWriteError):
            assert issubclass(cls, BridgeError)
        assert issubclass(PortClosedError, PortError)

    def test_configuration_error_field(self):
        error = ConfigurationError("Bad value", field="unit", value="x")
        assert error.details == {"field": "unit", "value": "x"}

    def test_unit_load_error_default_suggestion(self):
        error = UnitLoadError("Cannot load", reference="a:B", cause=ImportError("no"))
        assert error.details["reference"] == "a:B"
        assert error.details["cause_type"] == "ImportError"
        assert "module:Name" in error.suggestion

    def test_port_error_known_ports(self):
        error = PortError("Unknown", port="x", known_ports=["a", "b"])
        assert error.port == "x"
        assert error.details["known_ports"] == "a, b"

    def test_output_write_error(self):
        cause = PermissionError("denied")
        error = OutputWriteError("Failed", port="user_file", path="/out/users.json", cause=cause)
        assert error.path == "/out/users.json"
        assert error.cause is cause
        assert error.details["cause_type"] == "PermissionError"
        assert "[user_file]" in str(error)
