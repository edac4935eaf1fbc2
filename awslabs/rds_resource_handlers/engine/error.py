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

"""Error classification.

Remote failures are mapped to an ``ErrorKind`` by an ``ErrorRuleSet``: an ordered, immutable
list of rules matching on error code patterns, HTTP status codes or exception classes. The
first matching rule wins. A rule set may extend a parent set, in which case its own rules
are tried before the parent's. Anything no rule matches gets the rule set's default.

Example:
    ```python
    CREATE_RULE_SET = (
        DEFAULT_ERROR_RULE_SET.extend()
        .with_error_codes(ErrorKind.ALREADY_EXISTS, 'DBClusterAlreadyExistsFault')
        .with_error_codes(ErrorKind.ACCESS_DENIED_CONTINUE, 'AccessDenied*')
    )
    kind = classify(error, CREATE_RULE_SET)
    ```
"""

from .progress import ErrorKind, ProgressEvent
from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)
from dataclasses import dataclass, replace
from fnmatch import fnmatchcase
from loguru import logger
from typing import Optional, Tuple, Type


@dataclass(frozen=True)
class RemoteError:
    """Code, HTTP status and message of a failed control-plane call."""

    code: str
    status: Optional[int]
    message: str

    @classmethod
    def from_client_error(cls, error: ClientError) -> 'RemoteError':
        details = error.response.get('Error', {})
        metadata = error.response.get('ResponseMetadata', {})
        return cls(
            code=details.get('Code', ''),
            status=metadata.get('HTTPStatusCode'),
            message=details.get('Message', str(error)),
        )


@dataclass(frozen=True)
class ErrorRule:
    """One classification rule. Matches if any of its criteria match."""

    kind: ErrorKind
    codes: Tuple[str, ...] = ()
    statuses: Tuple[int, ...] = ()
    error_classes: Tuple[Type[BaseException], ...] = ()

    def matches(self, error: BaseException, remote: Optional[RemoteError]) -> bool:
        if self.error_classes and isinstance(error, self.error_classes):
            return True
        if remote is None:
            return False
        if any(fnmatchcase(remote.code, pattern) for pattern in self.codes):
            return True
        return remote.status is not None and remote.status in self.statuses


@dataclass(frozen=True)
class ErrorRuleSet:
    """Ordered, immutable set of classification rules."""

    rules: Tuple[ErrorRule, ...] = ()
    parent: Optional['ErrorRuleSet'] = None
    default: ErrorKind = ErrorKind.FATAL

    def with_error_codes(self, kind: ErrorKind, *codes: str) -> 'ErrorRuleSet':
        """Return a copy with a rule for error codes appended. Codes may be glob patterns."""
        return replace(self, rules=self.rules + (ErrorRule(kind=kind, codes=tuple(codes)),))

    def with_status_codes(self, kind: ErrorKind, *statuses: int) -> 'ErrorRuleSet':
        return replace(self, rules=self.rules + (ErrorRule(kind=kind, statuses=tuple(statuses)),))

    def with_error_classes(
        self, kind: ErrorKind, *error_classes: Type[BaseException]
    ) -> 'ErrorRuleSet':
        return replace(
            self, rules=self.rules + (ErrorRule(kind=kind, error_classes=tuple(error_classes)),)
        )

    def extend(self) -> 'ErrorRuleSet':
        """Start a child rule set whose rules take precedence over this one."""
        return ErrorRuleSet(parent=self, default=self.default)

    def lookup(self, error: BaseException) -> Optional[ErrorKind]:
        """Return the kind of the first matching rule, or None if no rule matches."""
        remote = RemoteError.from_client_error(error) if isinstance(error, ClientError) else None
        rule_set: Optional[ErrorRuleSet] = self
        while rule_set is not None:
            for rule in rule_set.rules:
                if rule.matches(error, remote):
                    return rule.kind
            rule_set = rule_set.parent
        return None


def classify(error: BaseException, rule_set: ErrorRuleSet) -> ErrorKind:
    """Classify an error.

    Args:
        error: The exception raised by a remote call or a step
        rule_set: Rules to evaluate

    Returns:
        The matching ErrorKind. Exceptions that are not remote errors and match no class
        rule are always FATAL.
    """
    kind = rule_set.lookup(error)
    if kind is not None:
        return kind
    if isinstance(error, ClientError):
        return rule_set.default
    return ErrorKind.FATAL


def error_message(error: BaseException) -> str:
    if isinstance(error, ClientError):
        remote = RemoteError.from_client_error(error)
        return f'{remote.code}: {remote.message}' if remote.code else remote.message
    return str(error) or type(error).__name__


def handle_exception(
    progress: ProgressEvent, error: BaseException, rule_set: ErrorRuleSet
) -> ProgressEvent:
    """Turn an exception into a failed progress event.

    The step chain turns a RETRYABLE failure into a suspension, every other kind is final
    unless the caller handles it.

    Args:
        progress: The event of the step that failed
        error: The exception
        rule_set: Rules to classify with

    Returns:
        A FAILED event carrying the error kind and message
    """
    kind = classify(error, rule_set)
    message = error_message(error)
    step = progress.callback_context.step if progress.callback_context else None
    if kind == ErrorKind.FATAL:
        logger.error(f'Step {step} failed with unrecoverable error: {message}')
    else:
        logger.warning(f'Step {step} failed with {kind.value} error: {message}')
    return ProgressEvent.failed(kind, message)


DEFAULT_ERROR_RULE_SET = (
    ErrorRuleSet()
    .with_error_codes(
        ErrorKind.RETRYABLE,
        'Throttling',
        'ThrottlingException',
        'RequestLimitExceeded',
        'RequestThrottled*',
        'TooManyRequestsException',
        'InternalFailure',
        'InternalError',
        'ServiceUnavailable',
    )
    .with_error_codes(
        ErrorKind.UNAUTHORIZED,
        'AccessDenied',
        'AccessDeniedException',
        'NotAuthorized',
        'UnauthorizedOperation',
        'InvalidClientTokenId',
        'ExpiredToken*',
    )
    .with_error_codes(
        ErrorKind.INVALID_REQUEST,
        'InvalidParameter*',
        'MissingParameter',
        'ValidationError',
        'ValidationException',
    )
    .with_status_codes(ErrorKind.RETRYABLE, 429, 500, 502, 503, 504)
    .with_error_classes(
        ErrorKind.RETRYABLE, EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError
    )
)
