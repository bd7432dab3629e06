import logging
from unittest.mock import Mock

import pytest

from roombook.services.base import BaseService


def test_log_operation_renames_logrecord_attributes(caplog):
    caplog.set_level(logging.INFO)
    service = BaseService(Mock())

    service.log_operation("resource_renamed", name="Lab", module="rooms", resource_id="r1")

    record = caplog.records[-1]
    assert record.getMessage() == "Operation: resource_renamed"
    assert record.operation == "resource_renamed"
    assert record.ctx_name == "Lab"
    assert record.ctx_module == "rooms"
    assert record.resource_id == "r1"
    assert record.name == "BaseService"


def test_transaction_rolls_back_on_error():
    db = Mock()
    service = BaseService(db)

    with pytest.raises(ValueError):
        with service.transaction():
            raise ValueError("boom")

    db.rollback.assert_called_once()
    db.commit.assert_not_called()
