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

"""Three-tier tag reconciliation.

Tags come from three tiers: system tags set by the provisioning engine, stack tags set on
the stack, and resource tags declared on the resource. When a key appears in several tiers
the resource tier wins over the stack tier, which wins over the system tier.

Tags are applied in one of three modes:

* at creation: the merged tags are sent with the create call;
* at creation, partial failure: if the caller may not tag with its own tags the create is
  retried with system tags only, and the stack and resource tags are added once the
  resource exists;
* at update: the difference between the previous and desired tags is applied with one
  remove call followed by one add call.
"""

from ..common.constants import (
    ERROR_UNAUTHORIZED_TAGGING,
    SCRATCH_EXTRA_TAGS_PENDING,
    SCRATCH_RESOURCE_ARN,
)
from .error import DEFAULT_ERROR_RULE_SET, ErrorRuleSet, handle_exception
from .progress import ErrorKind, OperationStatus, ProgressEvent
from dataclasses import dataclass, field
from loguru import logger
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class TagSet:
    """Tags split by tier."""

    system_tags: Mapping[str, str] = field(default_factory=dict)
    stack_tags: Mapping[str, str] = field(default_factory=dict)
    resource_tags: Mapping[str, str] = field(default_factory=dict)

    def flatten(self) -> Dict[str, str]:
        return merge(self.system_tags, self.stack_tags, self.resource_tags)

    def system_only(self) -> 'TagSet':
        return TagSet(system_tags=self.system_tags)

    def without_system(self) -> 'TagSet':
        return TagSet(stack_tags=self.stack_tags, resource_tags=self.resource_tags)

    def is_empty(self) -> bool:
        return not (self.system_tags or self.stack_tags or self.resource_tags)


@dataclass(frozen=True)
class TagDelta:
    """Changes turning one tag mapping into another."""

    to_apply: Mapping[str, str] = field(default_factory=dict)
    to_remove: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not self.to_apply and not self.to_remove

    def operations(self) -> List[Tuple[str, Any]]:
        """Ordered operations: removals first, then additions."""
        operations: List[Tuple[str, Any]] = []
        if self.to_remove:
            operations.append(('remove', list(self.to_remove)))
        if self.to_apply:
            operations.append(('apply', dict(self.to_apply)))
        return operations


def merge(
    system_tags: Optional[Mapping[str, str]],
    stack_tags: Optional[Mapping[str, str]],
    resource_tags: Optional[Mapping[str, str]],
) -> Dict[str, str]:
    """Flatten the three tiers, resource over stack over system."""
    merged: Dict[str, str] = {}
    for tier in (system_tags, stack_tags, resource_tags):
        merged.update(tier or {})
    return merged


def reconcile(
    previous: Union[TagSet, Mapping[str, str]], desired: Union[TagSet, Mapping[str, str]]
) -> TagDelta:
    """Compute the changes from previous tags to desired tags.

    Keys present on both sides with the same value are left alone. A key whose value changed
    is only applied, not removed first.
    """
    previous_tags = previous.flatten() if isinstance(previous, TagSet) else dict(previous)
    desired_tags = desired.flatten() if isinstance(desired, TagSet) else dict(desired)

    to_remove = tuple(sorted(key for key in previous_tags if key not in desired_tags))
    to_apply = {
        key: value
        for key, value in desired_tags.items()
        if key not in previous_tags or previous_tags[key] != value
    }
    return TagDelta(to_apply=to_apply, to_remove=to_remove)


def to_sdk_tags(tags: Mapping[str, str]) -> List[Dict[str, str]]:
    return [{'Key': key, 'Value': tags[key]} for key in sorted(tags)]


def from_sdk_tags(tags: Optional[List[Dict[str, str]]]) -> Dict[str, str]:
    return {tag['Key']: tag.get('Value', '') for tag in tags or []}


def create_with_tag_fallback(
    create: Callable[[ProgressEvent, TagSet], ProgressEvent],
    progress: ProgressEvent,
    tag_set: TagSet,
) -> ProgressEvent:
    """Run a create step with all tags, falling back to system tags only.

    The create step must classify an authorization failure on tagging as
    ACCESS_DENIED_CONTINUE. In that case, if there are stack or resource tags, the step is
    run again with system tags only and the context is flagged so that add_extra_tags adds
    the rest later.

    Args:
        create: Runs the create step with the given tags
        progress: The current event
        tag_set: Desired tags

    Returns:
        The result of the create step
    """
    context = progress.callback_context
    if context.get(SCRATCH_EXTRA_TAGS_PENDING):
        return _deny_continue(create(progress, tag_set.system_only()))

    result = create(progress, tag_set)
    if not _is_access_denied_continue(result):
        return result
    if tag_set.without_system().is_empty():
        return _deny_continue(result)

    logger.warning(
        'Not authorized to create with stack and resource tags, retrying with system tags only'
    )
    fallback = ProgressEvent.progress(
        progress.resource_model, context.set(SCRATCH_EXTRA_TAGS_PENDING, True)
    )
    return _deny_continue(create(fallback, tag_set.system_only()))


def _is_access_denied_continue(result: ProgressEvent) -> bool:
    return (
        result.status == OperationStatus.FAILED
        and result.error_kind == ErrorKind.ACCESS_DENIED_CONTINUE
    )


def _deny_continue(result: ProgressEvent) -> ProgressEvent:
    if _is_access_denied_continue(result):
        return ProgressEvent.failed(ErrorKind.UNAUTHORIZED, result.message or 'Access denied')
    return result


def add_extra_tags(
    session: Any,
    progress: ProgressEvent,
    tag_set: TagSet,
    rule_set: ErrorRuleSet = DEFAULT_ERROR_RULE_SET,
) -> ProgressEvent:
    """Add stack and resource tags left out by create_with_tag_fallback.

    Does nothing unless the create fell back to system tags only. The resource ARN is read
    from the context scratch, where the create step stores it.
    """
    context = progress.callback_context
    if not context.get(SCRATCH_EXTRA_TAGS_PENDING):
        return progress

    arn = context.get(SCRATCH_RESOURCE_ARN)
    extra_tags = tag_set.without_system().flatten()
    return (
        session.initiate('rds::add-extra-tags', progress.resource_model, context)
        .translate(lambda model: {'ResourceName': arn, 'Tags': to_sdk_tags(extra_tags)})
        .invoke(lambda client, request: client.add_tags_to_resource(**request))
        .handle_error(
            lambda request, error, client, model, ctx: _unauthorized_tagging(
                handle_exception(ProgressEvent.progress(model, ctx), error, rule_set), arn
            )
        )
        .progress()
    )


def update_tags(
    session: Any,
    progress: ProgressEvent,
    arn: str,
    previous: TagSet,
    desired: TagSet,
    rule_set: ErrorRuleSet = DEFAULT_ERROR_RULE_SET,
) -> ProgressEvent:
    """Apply the difference between previous and desired tags.

    Runs a remove step then an add step, each only when it has something to do.
    """
    delta = reconcile(previous, desired)
    if delta.is_empty():
        return progress

    def handle_error(request, error, client, model, ctx):
        return _unauthorized_tagging(
            handle_exception(ProgressEvent.progress(model, ctx), error, rule_set), arn
        )

    for operation, payload in delta.operations():
        if operation == 'remove':
            progress = progress.then(
                lambda p, keys=payload: session.initiate(
                    'rds::remove-tags-from-resource', p.resource_model, p.callback_context
                )
                .translate(lambda model: {'ResourceName': arn, 'TagKeys': keys})
                .invoke(lambda client, request: client.remove_tags_from_resource(**request))
                .handle_error(handle_error)
                .progress()
            )
        else:
            progress = progress.then(
                lambda p, tags=payload: session.initiate(
                    'rds::add-tags-to-resource', p.resource_model, p.callback_context
                )
                .translate(lambda model: {'ResourceName': arn, 'Tags': to_sdk_tags(tags)})
                .invoke(lambda client, request: client.add_tags_to_resource(**request))
                .handle_error(handle_error)
                .progress()
            )
    return progress


def _unauthorized_tagging(result: ProgressEvent, arn: Optional[str]) -> ProgressEvent:
    if result.status == OperationStatus.FAILED and result.error_kind in (
        ErrorKind.UNAUTHORIZED,
        ErrorKind.ACCESS_DENIED_CONTINUE,
    ):
        message = f'{ERROR_UNAUTHORIZED_TAGGING.format(arn)}: {result.message}'
        return ProgressEvent.failed(ErrorKind.UNAUTHORIZED, message)
    return result
