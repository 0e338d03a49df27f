import logging

from propagator.logging_utils import LOGGER_NAME, get_logger


def test_child_loggers_share_one_handler():
    root = get_logger()
    child = get_logger("propagator.engine.fixpoint")
    short = get_logger("engine")
    get_logger()

    assert root.name == LOGGER_NAME
    assert child.name == "propagator.engine.fixpoint"
    assert short.name == "propagator.engine"
    assert child.handlers == []
    marked = [h for h in root.handlers if getattr(h, "_propagator_handler", False)]
    assert len(marked) == 1


def test_engine_modules_log_under_package_logger():
    from propagator.engine import fixpoint, incremental

    assert fixpoint.logger.name == "propagator.engine.fixpoint"
    assert incremental.logger.name.startswith(LOGGER_NAME + ".")
    assert isinstance(fixpoint.logger, logging.Logger)
