from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from slotbook.core.exceptions import ServiceException, ValidationException
from slotbook.services.base import BaseService


class _Timed(BaseService):
    @BaseService.measure_operation("tick")
    def run(self, fail: bool = False) -> str:
        if fail:
            raise ValidationException("nope")
        return "ok"


class TestTransaction:
    def test_commits_on_success(self):
        db = MagicMock()
        with BaseService(db).transaction():
            pass
        db.commit.assert_called_once()
        db.rollback.assert_not_called()

    def test_domain_errors_roll_back_and_propagate(self):
        db = MagicMock()
        with pytest.raises(ValidationException):
            with BaseService(db).transaction():
                raise ValidationException("bad")
        db.rollback.assert_called_once()
        db.commit.assert_not_called()

    def test_sqlalchemy_errors_become_service_exceptions(self):
        db = MagicMock()
        db.commit.side_effect = OperationalError("COMMIT", {}, Exception("disk full"))
        with pytest.raises(ServiceException) as exc_info:
            with BaseService(db).transaction():
                pass
        assert exc_info.value.to_http_exception().status_code == 500
        db.rollback.assert_called_once()


class TestMetrics:
    def test_measure_operation_records_success_and_failure(self):
        timed = _Timed(MagicMock())
        assert timed.run() == "ok"
        with pytest.raises(ValidationException):
            timed.run(fail=True)

        metrics = timed.get_metrics()["tick"]
        assert metrics["count"] == 2
        assert metrics["success_count"] == 1
        assert metrics["failure_count"] == 1
        assert metrics["success_rate"] == 0.5

    def test_slow_operations_are_logged(self, monkeypatch, caplog):
        clock = MagicMock()
        clock.time.side_effect = [0.0, 2.5]
        monkeypatch.setattr("slotbook.services.base.time", clock)
        timed = _Timed(MagicMock())
        with caplog.at_level("WARNING", logger="_Timed"):
            timed.run()
        assert "Slow operation detected: tick took 2.50s" in caplog.text
