import asyncio

import pytest
from slokeeper.core.errors import (
    ConfigurationError,
    ConflictError,
    ExitCode,
    NotFoundError,
    OperationCancelled,
    SloKeeperError,
    StateWriteFailed,
    TransportError,
    ValidationError,
    format_error_message,
    main_with_error_handling,
)


def test_validation_error_carries_path_and_code():
    error = ValidationError("indicator.aggregation", "bad value", code="PatternMismatch")

    assert error.path == "indicator.aggregation"
    assert error.code == "PatternMismatch"
    assert str(error) == "indicator.aggregation: bad value"
    assert not error.retryable


def test_not_found_error():
    error = NotFoundError("SLO", "abc")

    assert error.identifier == "abc"
    assert format_error_message(error) == "SLO 'abc' not found (id=abc)"


def test_conflict_is_retryable_after_read():
    assert ConflictError("version mismatch").retryable


def test_transport_error_status():
    error = TransportError("boom", status_code=503)

    assert error.status_code == 503
    assert isinstance(error, SloKeeperError)


def test_state_write_failed_names_field():
    error = StateWriteFailed("indicator", TypeError("bad type"))

    assert error.field == "indicator"
    assert "indicator" in format_error_message(error)


def test_operation_cancelled_is_a_cancelled_error():
    error = OperationCancelled("GET /slos/abc cancelled")

    assert isinstance(error, asyncio.CancelledError)
    assert isinstance(error, SloKeeperError)


class TestExitCodes:
    @pytest.mark.parametrize(
        "error,expected",
        [
            (ConfigurationError("no url"), ExitCode.CONFIG_ERROR),
            (ValidationError("compliance.size", "required"), ExitCode.VALIDATION_ERROR),
            (NotFoundError("SLO", "abc"), ExitCode.PROVIDER_ERROR),
            (ConflictError("version mismatch"), ExitCode.PROVIDER_ERROR),
            (TransportError("boom", status_code=503), ExitCode.PROVIDER_ERROR),
            (StateWriteFailed("indicator", TypeError("bad")), ExitCode.PROVIDER_ERROR),
            (OperationCancelled("cancelled"), ExitCode.INTERRUPTED),
            (SloKeeperError("unknown"), ExitCode.UNKNOWN_ERROR),
        ],
    )
    def test_error_exit_codes(self, error, expected):
        assert error.exit_code == expected

    def test_exit_code_values(self):
        assert ExitCode.SUCCESS == 0
        assert ExitCode.CONFIG_ERROR == 10
        assert ExitCode.PROVIDER_ERROR == 11
        assert ExitCode.VALIDATION_ERROR == 12
        assert ExitCode.UNKNOWN_ERROR == 127
        assert ExitCode.INTERRUPTED == 130


class TestMainWithErrorHandling:
    def test_success_passes_through(self):
        @main_with_error_handling()
        def command() -> int:
            return ExitCode.SUCCESS

        assert command() == 0

    def test_validation_error_maps_to_exit_code(self):
        @main_with_error_handling(log_errors=False)
        def command() -> int:
            raise ValidationError("indicator.aggregation", "bad value", code="PatternMismatch")

        assert command() == ExitCode.VALIDATION_ERROR

    def test_transport_error_maps_to_provider_error(self):
        @main_with_error_handling()
        def command() -> int:
            raise TransportError("GET /slos/abc failed", status_code=503, details={"slo_id": "abc"})

        assert command() == ExitCode.PROVIDER_ERROR

    def test_async_lifecycle_error_surfaces_through_asyncio_run(self):
        async def reconcile() -> None:
            raise NotFoundError("SLO folder", "root")

        @main_with_error_handling(log_errors=False)
        def command() -> int:
            asyncio.run(reconcile())
            return ExitCode.SUCCESS

        assert command() == ExitCode.PROVIDER_ERROR

    def test_keyboard_interrupt(self):
        @main_with_error_handling(log_errors=False)
        def command() -> int:
            raise KeyboardInterrupt

        assert command() == 130

    def test_unexpected_error(self):
        @main_with_error_handling(log_errors=False)
        def command() -> int:
            raise RuntimeError("boom")

        assert command() == ExitCode.UNKNOWN_ERROR

    def test_traceback_printed_on_request(self, capsys):
        @main_with_error_handling(show_traceback=True, log_errors=False)
        def command() -> int:
            raise ConfigurationError("Sumo Logic API url is required")

        assert command() == ExitCode.CONFIG_ERROR
        assert "ConfigurationError" in capsys.readouterr().err

    def test_preserves_function_name(self):
        @main_with_error_handling()
        def reconcile_slos() -> int:
            return 0

        assert reconcile_slos.__name__ == "reconcile_slos"
