from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from atc_booking.core.exceptions import PastBookingException, ServiceException
from atc_booking.monitoring.prometheus_metrics import prometheus_metrics
from atc_booking.services.base import BaseService


class ProbeService(BaseService):
    @BaseService.measure_operation("probe")
    def probe(self, fail_with=None):
        if fail_with is not None:
            raise fail_with
        return "ok"


def test_transaction_commits_on_success():
    db = Mock()
    service = ProbeService(db)

    with service.transaction():
        pass

    db.commit.assert_called_once()
    db.rollback.assert_not_called()


def test_domain_exceptions_roll_back_unchanged():
    db = Mock()
    service = ProbeService(db)

    with pytest.raises(PastBookingException):
        with service.transaction():
            raise PastBookingException("a", "b")

    db.rollback.assert_called_once()
    db.commit.assert_not_called()


def test_storage_failures_become_service_exceptions():
    db = Mock()
    service = ProbeService(db)

    with pytest.raises(ServiceException):
        with service.transaction():
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    db.rollback.assert_called_once()


def test_measure_operation_records_outcome():
    service = ProbeService(Mock())

    assert service.probe() == "ok"
    with pytest.raises(ValueError):
        service.probe(fail_with=ValueError("boom"))

    exposition = prometheus_metrics.get_metrics().decode()
    assert 'service="ProbeService"' in exposition
    assert 'error_type="ValueError"' in exposition
