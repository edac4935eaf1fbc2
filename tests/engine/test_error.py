# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for error classification."""

import pytest
from awslabs.rds_resource_handlers.engine.error import (
    DEFAULT_ERROR_RULE_SET,
    ErrorRuleSet,
    classify,
    error_message,
    handle_exception,
)
from awslabs.rds_resource_handlers.engine.progress import (
    ErrorKind,
    OperationStatus,
    ProgressEvent,
    ResumeContext,
)
from botocore.exceptions import EndpointConnectionError


class TestClassify:
    """Test cases for classify."""

    @pytest.mark.parametrize(
        'code,expected',
        [
            ('Throttling', ErrorKind.RETRYABLE),
            ('RequestThrottledException', ErrorKind.RETRYABLE),
            ('AccessDenied', ErrorKind.UNAUTHORIZED),
            ('InvalidParameterCombination', ErrorKind.INVALID_REQUEST),
            ('SomethingUnexpected', ErrorKind.FATAL),
        ],
    )
    def test_default_rule_set(self, client_error, code, expected):
        """Test the codes the default rule set knows about."""
        assert classify(client_error(code), DEFAULT_ERROR_RULE_SET) == expected

    @pytest.mark.parametrize('status', [429, 500, 502, 503, 504])
    def test_retryable_status_codes(self, client_error, status):
        """Test that server side and throttling statuses are retryable."""
        error = client_error('Unknown', status=status)
        assert classify(error, DEFAULT_ERROR_RULE_SET) == ErrorKind.RETRYABLE

    def test_connection_error_is_retryable(self):
        """Test that connection failures are retryable."""
        error = EndpointConnectionError(endpoint_url='https://rds.us-east-1.amazonaws.com')
        assert classify(error, DEFAULT_ERROR_RULE_SET) == ErrorKind.RETRYABLE

    def test_non_remote_error_is_fatal(self):
        """Test that a local exception matching no class rule is fatal."""
        rule_set = ErrorRuleSet(default=ErrorKind.RETRYABLE)
        assert classify(RuntimeError('boom'), rule_set) == ErrorKind.FATAL

    def test_child_rules_take_precedence(self, client_error):
        """Test that rules of an extension are tried before the parent's."""
        child = DEFAULT_ERROR_RULE_SET.extend().with_error_codes(
            ErrorKind.ACCESS_DENIED_CONTINUE, 'AccessDenied'
        )
        assert classify(client_error('AccessDenied'), child) == ErrorKind.ACCESS_DENIED_CONTINUE
        assert (
            classify(client_error('AccessDenied'), DEFAULT_ERROR_RULE_SET)
            == ErrorKind.UNAUTHORIZED
        )

    def test_first_matching_rule_wins(self, client_error):
        """Test rule order within one set."""
        rule_set = (
            ErrorRuleSet()
            .with_error_codes(ErrorKind.NOT_FOUND, 'Thing*')
            .with_error_codes(ErrorKind.ALREADY_EXISTS, 'ThingExists')
        )
        assert classify(client_error('ThingExists'), rule_set) == ErrorKind.NOT_FOUND

    def test_error_class_rule(self):
        """Test matching on the exception class."""
        rule_set = ErrorRuleSet().with_error_classes(ErrorKind.NOT_FOUND, LookupError)
        assert classify(KeyError('x'), rule_set) == ErrorKind.NOT_FOUND

    def test_default_applies_to_unmatched_remote_errors(self, client_error):
        """Test the fallback kind of a rule set."""
        rule_set = ErrorRuleSet(default=ErrorKind.INVALID_REQUEST)
        assert classify(client_error('Nope'), rule_set) == ErrorKind.INVALID_REQUEST

    def test_rule_sets_are_immutable(self, client_error):
        """Test that adding rules leaves the original set untouched."""
        base = ErrorRuleSet()
        base.with_error_codes(ErrorKind.NOT_FOUND, 'Gone')
        assert classify(client_error('Gone'), base) == ErrorKind.FATAL


class TestErrorMessage:
    """Test cases for error_message."""

    def test_client_error(self, client_error):
        """Test that remote errors carry their code."""
        error = client_error('DBClusterNotFoundFault', 'Cluster x not found')
        assert error_message(error) == 'DBClusterNotFoundFault: Cluster x not found'

    def test_local_error_without_message(self):
        """Test that an empty exception falls back to its class name."""
        assert error_message(RuntimeError()) == 'RuntimeError'


class TestHandleException:
    """Test cases for handle_exception."""

    def test_returns_failed_event(self, client_error):
        """Test that the event carries the classified kind."""
        progress = ProgressEvent.progress(None, ResumeContext().enter('rds::step'))
        event = handle_exception(progress, client_error('Throttling'), DEFAULT_ERROR_RULE_SET)
        assert event.status == OperationStatus.FAILED
        assert event.error_kind == ErrorKind.RETRYABLE
        assert 'Throttling' in event.message
