"""
Tests for the exception hierarchy.
"""
from phenoforce.core.exceptions import (
    BufferContractError, ErrorContext, ForcingDataError, InvalidForcingError,
    PhenoforceError, PhysicsModelError, handle_exception
)


class TestExceptions:
    """Test suite for PhenoforceError and friends"""

    def test_str_includes_context(self):
        error = InvalidForcingError(
            "bad month",
            ErrorContext(unit_id="site-1", year=3, day=10, component="interpolation")
        )
        message = str(error)
        assert message.startswith("InvalidForcingError: bad month")
        assert "[Unit: site-1]" in message
        assert "[Year: 3]" in message
        assert "[Day: 10]" in message
        assert "[Component: interpolation]" in message

    def test_str_without_context(self):
        assert str(PhenoforceError("plain")) == "PhenoforceError: plain"

    def test_hierarchy(self):
        assert issubclass(InvalidForcingError, ForcingDataError)
        assert issubclass(ForcingDataError, PhenoforceError)

    def test_handle_exception_maps_builtin_errors(self):
        assert isinstance(handle_exception(ValueError("x")), InvalidForcingError)
        assert isinstance(handle_exception(IndexError("x")), BufferContractError)
        assert isinstance(handle_exception(RuntimeError("x")), PhysicsModelError)
        assert type(handle_exception(KeyError("x"))) is PhenoforceError

    def test_handle_exception_passes_through(self):
        error = InvalidForcingError("already wrapped")
        assert handle_exception(error) is error
