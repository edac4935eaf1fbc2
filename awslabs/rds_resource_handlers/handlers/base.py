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

"""Pieces shared by the resource kinds."""

from ..common.constants import SCRATCH_RESOURCE_ARN
from ..engine.error import ErrorRuleSet, classify, error_message, handle_exception
from ..engine.progress import ErrorKind, ProgressEvent
from ..engine.tagging import from_sdk_tags, to_sdk_tags
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Callable, Dict, List, Mapping, Optional


class Tag(BaseModel):
    """A resource tag."""

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(alias='Key')
    value: str = Field(default='', alias='Value')


class ResourceModel(BaseModel):
    """Base for resource models. Properties use the CloudFormation PascalCase names."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    tags: Optional[List[Tag]] = Field(default=None, alias='Tags')

    @classmethod
    def from_state(cls, state: Optional[Mapping[str, Any]]):
        if state is None:
            return None
        return cls.model_validate(state)

    def tag_map(self) -> Dict[str, str]:
        return from_sdk_tags([tag.model_dump(by_alias=True) for tag in self.tags or []])


def tags_from_map(tags: Mapping[str, str]) -> Optional[List[Tag]]:
    if not tags:
        return None
    return [Tag(key=item['Key'], value=item['Value']) for item in to_sdk_tags(tags)]


def remember_arn(arn: Optional[str], progress: ProgressEvent) -> ProgressEvent:
    """Store the resource ARN in the context scratch for later tagging steps."""
    if not arn:
        return progress
    return ProgressEvent.progress(
        progress.resource_model, progress.callback_context.set(SCRATCH_RESOURCE_ARN, arn)
    )


def read_tags(
    session: Any, progress: ProgressEvent, step: str, rule_set: ErrorRuleSet
) -> ProgressEvent:
    """Read the tags of the resource whose ARN is in the scratch into the model."""
    arn = progress.callback_context.get(SCRATCH_RESOURCE_ARN)
    return (
        session.initiate(step, progress.resource_model, progress.callback_context)
        .translate(lambda model: {'ResourceName': arn})
        .invoke(lambda client, request: client.list_tags_for_resource(**request))
        .handle_error(error_handler(rule_set))
        .done(
            lambda response, p: ProgressEvent.progress(
                p.resource_model.model_copy(
                    update={'tags': tags_from_map(from_sdk_tags(response.get('TagList')))}
                ),
                p.callback_context,
            )
        )
        .progress()
    )


def error_handler(rule_set: ErrorRuleSet, *tolerated: ErrorKind):
    """Build a CallChain error handler classifying with rule_set.

    Errors of a tolerated kind complete the step instead of failing it.
    """

    def handle_error(request, error, client, model, context):
        if tolerated and classify(error, rule_set) in tolerated:
            logger.info(f'Ignoring {error_message(error)}')
            return ProgressEvent.progress(model, context)
        return handle_exception(ProgressEvent.progress(model, context), error, rule_set)

    return handle_error


def none_if_not_found(read: Callable[[], Any], rule_set: ErrorRuleSet) -> Any:
    """Run read, returning None when it fails with an error classified NOT_FOUND."""
    try:
        return read()
    except Exception as error:
        if classify(error, rule_set) == ErrorKind.NOT_FOUND:
            return None
        raise
