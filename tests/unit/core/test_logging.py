"""
Unit Tests for log formatting and request log levels
"""
import json
import logging

from phdhub.core.logging_config import JSONFormatter, request_id_var, user_id_var
from phdhub.core.middleware import logging_level_for


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord('phdhub', logging.INFO, __file__, 10, 'toggled %s', ('p1',), None)
    record.__dict__.update(extra)
    return record


class TestJSONFormatter:

    def test_carries_request_context_and_extras(self):
        request_token = request_id_var.set('req-9')
        user_token = user_id_var.set('user_1')
        try:
            line = JSONFormatter().format(make_record(event_type='like_toggle'))
        finally:
            request_id_var.reset(request_token)
            user_id_var.reset(user_token)

        entry = json.loads(line)
        assert entry['message'] == 'toggled p1'
        assert entry['request_id'] == 'req-9'
        assert entry['user_id'] == 'user_1'
        assert entry['event_type'] == 'like_toggle'
        assert 'args' not in entry

    def test_omits_empty_context(self):
        entry = json.loads(JSONFormatter().format(make_record()))

        assert 'request_id' not in entry
        assert 'user_id' not in entry


class TestRequestLogLevel:

    def test_levels(self):
        assert logging_level_for(200, 12.0) == logging.INFO
        assert logging_level_for(200, 5000.0) == logging.WARNING
        assert logging_level_for(404, 3.0) == logging.WARNING
        assert logging_level_for(500, 3.0) == logging.ERROR
