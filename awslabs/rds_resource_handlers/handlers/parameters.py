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

"""Parameter application shared by DB parameter groups and DB cluster parameter groups.

Parameters are applied in two phases, each a chain step: one read of the parameter metadata
to find the apply method of every parameter involved, then one modify or reset call per
batch of at most 20 parameters. Static parameters are applied with 'pending-reboot',
dynamic ones with 'immediate'.
"""

from ..common.constants import MAX_PARAMETERS_PER_REQUEST, SCRATCH_PARAMETERS_APPLIED
from ..common.utils import chunked, handle_paginated_aws_api_call
from ..engine.error import ErrorRuleSet
from ..engine.progress import ErrorKind, ProgressEvent
from .base import error_handler
from dataclasses import dataclass
from loguru import logger
from typing import Any, Dict, List, Mapping, Optional, Tuple


APPLY_METHOD_IMMEDIATE = 'immediate'
APPLY_METHOD_PENDING_REBOOT = 'pending-reboot'

SCRATCH_APPLY_METHODS = 'apply-methods'
SCRATCH_RESET_METHODS = 'reset-methods'


@dataclass(frozen=True)
class ParameterApi:
    """RDS operations used to manage the parameters of one kind of parameter group.

    Attributes:
        resource: Short resource name used in step markers
        name_key: Request key naming the group
        describe_paginator: Paginator listing the group's parameters
        defaults_paginator: Paginator listing default parameters, used for resets
        defaults_result_key: Key holding the parameters in a defaults page
        defaults_by_family: Whether the defaults paginator takes the family instead of the name
        modify_operation: Client method modifying parameters
        reset_operation: Client method resetting parameters
    """

    resource: str
    name_key: str
    describe_paginator: str
    defaults_paginator: str
    defaults_result_key: str
    defaults_by_family: bool
    modify_operation: str
    reset_operation: str


def apply_method(parameter: Mapping[str, Any]) -> str:
    if parameter.get('ApplyType') == 'static':
        return APPLY_METHOD_PENDING_REBOOT
    return APPLY_METHOD_IMMEDIATE


def diff_parameters(
    previous: Optional[Mapping[str, Any]], desired: Optional[Mapping[str, Any]]
) -> Tuple[List[str], Dict[str, Any]]:
    """Return (names to reset, parameters to apply)."""
    previous = previous or {}
    desired = desired or {}
    to_reset = sorted(name for name in previous if name not in desired)
    to_apply = {
        name: value
        for name, value in desired.items()
        if name not in previous or previous[name] != value
    }
    return to_reset, to_apply


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _collect_apply_methods(
    parameters: List[Dict[str, Any]], names: List[str], strict: bool
) -> Tuple[Dict[str, str], Optional[str]]:
    by_name = {parameter.get('ParameterName'): parameter for parameter in parameters}
    methods = {}
    for name in names:
        parameter = by_name.get(name)
        if parameter is None:
            if strict:
                return {}, f'Invalid / Unsupported DB Parameter: {name}'
            methods[name] = APPLY_METHOD_PENDING_REBOOT
            continue
        if strict and parameter.get('IsModifiable') is False:
            return {}, f'Unmodifiable DB Parameter: {name}'
        methods[name] = apply_method(parameter)
    return methods, None


def _describe_methods(
    session: Any,
    progress: ProgressEvent,
    step: str,
    paginator: str,
    operation_parameters: Dict[str, Any],
    result_key: str,
    names: List[str],
    scratch_key: str,
    strict: bool,
    rule_set: ErrorRuleSet,
) -> ProgressEvent:
    def done(response, p):
        methods, problem = _collect_apply_methods(response, names, strict)
        if problem:
            return ProgressEvent.failed(ErrorKind.INVALID_REQUEST, problem)
        return ProgressEvent.progress(
            p.resource_model, p.callback_context.set(scratch_key, methods)
        )

    return (
        session.initiate(step, progress.resource_model, progress.callback_context)
        .translate(lambda model: dict(operation_parameters))
        .invoke(
            lambda client, request: handle_paginated_aws_api_call(
                client, paginator, request, lambda parameter: parameter, result_key
            )
        )
        .handle_error(error_handler(rule_set))
        .done(done)
        .progress()
    )


def apply_parameters(
    session: Any,
    progress: ProgressEvent,
    api: ParameterApi,
    group_name: str,
    parameters: Optional[Mapping[str, Any]],
    rule_set: ErrorRuleSet,
) -> ProgressEvent:
    """Set parameter values on a group.

    Unknown or unmodifiable parameters fail the operation with INVALID_REQUEST before any
    modify call is made.
    """
    if not parameters or progress.callback_context.get(SCRATCH_PARAMETERS_APPLIED):
        return progress

    names = sorted(parameters)
    logger.info(f'Applying {len(names)} parameters to {api.resource} {group_name}')
    progress = progress.then(
        lambda p: _describe_methods(
            session,
            p,
            f'rds::describe-{api.resource}-parameters',
            api.describe_paginator,
            {api.name_key: group_name},
            'Parameters',
            names,
            SCRATCH_APPLY_METHODS,
            True,
            rule_set,
        )
    )

    for index, batch in enumerate(chunked(names, MAX_PARAMETERS_PER_REQUEST)):
        progress = progress.then(
            lambda p, index=index, batch=batch: session.initiate(
                f'rds::modify-{api.resource}::{index}', p.resource_model, p.callback_context
            )
            .translate(
                lambda model: {
                    api.name_key: group_name,
                    'Parameters': [
                        {
                            'ParameterName': name,
                            'ParameterValue': _format_value(parameters[name]),
                            'ApplyMethod': p.callback_context.get(SCRATCH_APPLY_METHODS)[name],
                        }
                        for name in batch
                    ],
                }
            )
            .invoke(lambda client, request: getattr(client, api.modify_operation)(**request))
            .handle_error(error_handler(rule_set))
            .progress()
        )

    return progress.then(
        lambda p: ProgressEvent.progress(
            p.resource_model, p.callback_context.set(SCRATCH_PARAMETERS_APPLIED, True)
        )
    )


def reset_parameters(
    session: Any,
    progress: ProgressEvent,
    api: ParameterApi,
    group_name: str,
    family: Optional[str],
    names: List[str],
    rule_set: ErrorRuleSet,
) -> ProgressEvent:
    """Reset parameters to their defaults."""
    if not names:
        return progress

    logger.info(f'Resetting {len(names)} parameters of {api.resource} {group_name}')
    if api.defaults_by_family:
        defaults_parameters = {'DBParameterGroupFamily': family}
    else:
        defaults_parameters = {api.name_key: group_name}

    progress = progress.then(
        lambda p: _describe_methods(
            session,
            p,
            f'rds::describe-{api.resource}-defaults',
            api.defaults_paginator,
            defaults_parameters,
            api.defaults_result_key,
            names,
            SCRATCH_RESET_METHODS,
            False,
            rule_set,
        )
    )

    for index, batch in enumerate(chunked(names, MAX_PARAMETERS_PER_REQUEST)):
        progress = progress.then(
            lambda p, index=index, batch=batch: session.initiate(
                f'rds::reset-{api.resource}::{index}', p.resource_model, p.callback_context
            )
            .translate(
                lambda model: {
                    api.name_key: group_name,
                    'Parameters': [
                        {
                            'ParameterName': name,
                            'ApplyMethod': p.callback_context.get(SCRATCH_RESET_METHODS)[name],
                        }
                        for name in batch
                    ],
                }
            )
            .invoke(lambda client, request: getattr(client, api.reset_operation)(**request))
            .handle_error(error_handler(rule_set))
            .progress()
        )
    return progress
