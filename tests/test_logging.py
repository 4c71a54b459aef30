import structlog

from linodebatch.utils.logging import logging_context


def test_logging_context_binds_and_restores():
    with logging_context(call_id="abc"):
        assert structlog.contextvars.get_contextvars()["call_id"] == "abc"
    assert "call_id" not in structlog.contextvars.get_contextvars()


def test_logging_context_keeps_outer_values():
    with logging_context(call_id="outer"):
        with logging_context(call_id="inner", batch_index=0):
            context = structlog.contextvars.get_contextvars()
            assert context["call_id"] == "outer"
            assert context["batch_index"] == 0
        assert "batch_index" not in structlog.contextvars.get_contextvars()
