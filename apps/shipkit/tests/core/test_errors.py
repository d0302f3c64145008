from conftest import make_step
from shipkit.core.errors import (
    CommandFailedError,
    ListingError,
    ShipkitError,
    TransferError,
    describe,
)


class TestErrors:
    def test_command_failure_message_uses_stderr_tail(self):
        step = make_step("s3-sync", exit_code=1, stderr="line one\nAccess Denied\n")
        assert str(TransferError(step)) == "Step 's3-sync' failed with exit code 1: Access Denied"

    def test_with_context_keeps_kind(self):
        wrapped = ListingError("gone").with_context("could not upload tree")
        assert isinstance(wrapped, ListingError)
        assert str(wrapped) == "could not upload tree: gone"

    def test_with_context_keeps_step_result(self):
        step = make_step("cp", exit_code=2)
        wrapped = TransferError(step).with_context("could not upload file")
        assert isinstance(wrapped, TransferError)
        assert wrapped.step_result is step
        assert str(wrapped).startswith("could not upload file: Step 'cp'")

    def test_hierarchy(self):
        assert issubclass(TransferError, CommandFailedError)
        assert issubclass(CommandFailedError, ShipkitError)

    def test_describe(self):
        assert describe(ListingError("gone"), "flatten") == "flatten: ListingError: gone"
