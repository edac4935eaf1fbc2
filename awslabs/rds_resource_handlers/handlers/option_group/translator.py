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

"""Request builders and response readers for option groups."""

from ...engine.tagging import to_sdk_tags
from .model import OptionConfiguration, OptionGroup, OptionSetting
from typing import Any, Dict, List, Mapping, Optional, Tuple


DEFAULT_OPTION_GROUP_PREFIX = 'default:'


def _compact(params: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


def create_option_group_request(model: OptionGroup, tags: Mapping[str, str]) -> Dict[str, Any]:
    return {
        'OptionGroupName': model.option_group_name,
        'EngineName': model.engine_name,
        'MajorEngineVersion': model.major_engine_version,
        'OptionGroupDescription': model.option_group_description,
        'Tags': to_sdk_tags(tags),
    }


def _option_configuration(option: OptionConfiguration) -> Dict[str, Any]:
    settings = None
    if option.option_settings:
        settings = [
            _compact({'Name': setting.name, 'Value': setting.value})
            for setting in option.option_settings
        ]
    return _compact(
        {
            'OptionName': option.option_name,
            'OptionVersion': option.option_version,
            'Port': option.port,
            'DBSecurityGroupMemberships': option.db_security_group_memberships,
            'VpcSecurityGroupMemberships': option.vpc_security_group_memberships,
            'OptionSettings': settings,
        }
    )


def option_diff(
    previous: Optional[List[OptionConfiguration]], desired: Optional[List[OptionConfiguration]]
) -> Tuple[List[OptionConfiguration], List[str]]:
    """Return (options to include, option names to remove).

    An option is included when it is new or any of its attributes changed.
    """
    previous_by_name = {option.option_name: option for option in previous or []}
    desired_by_name = {option.option_name: option for option in desired or []}
    to_include = [
        option
        for name, option in desired_by_name.items()
        if previous_by_name.get(name) != option
    ]
    to_remove = sorted(name for name in previous_by_name if name not in desired_by_name)
    return to_include, to_remove


def modify_option_group_request(
    group_name: str, to_include: List[OptionConfiguration], to_remove: List[str]
) -> Dict[str, Any]:
    params: Dict[str, Any] = {'OptionGroupName': group_name, 'ApplyImmediately': True}
    if to_include:
        params['OptionsToInclude'] = [_option_configuration(option) for option in to_include]
    if to_remove:
        params['OptionsToRemove'] = list(to_remove)
    return params


def describe_option_groups_request(group_name: str) -> Dict[str, Any]:
    return {'OptionGroupName': group_name}


def delete_option_group_request(model: OptionGroup) -> Dict[str, Any]:
    return {'OptionGroupName': model.option_group_name}


def list_option_groups_request(
    next_token: Optional[str], max_records: Optional[int] = None
) -> Dict[str, Any]:
    return _compact({'Marker': next_token, 'MaxRecords': max_records})


def is_default_option_group(group: Dict[str, Any]) -> bool:
    return group.get('OptionGroupName', '').startswith(DEFAULT_OPTION_GROUP_PREFIX)


def _option_from_sdk(
    option: Dict[str, Any], declared: Optional[OptionConfiguration]
) -> OptionConfiguration:
    # describe lists every setting of the option, keep only the declared ones
    declared_names = set()
    if declared is not None:
        declared_names = {setting.name for setting in declared.option_settings or []}
    settings = [
        OptionSetting(name=setting['Name'], value=setting.get('Value'))
        for setting in option.get('OptionSettings', [])
        if setting.get('Name') in declared_names
    ]
    return OptionConfiguration(
        option_name=option['OptionName'],
        option_version=option.get('OptionVersion'),
        port=option.get('Port'),
        db_security_group_memberships=[
            membership['DBSecurityGroupName']
            for membership in option.get('DBSecurityGroupMemberships', [])
        ]
        or None,
        vpc_security_group_memberships=[
            membership['VpcSecurityGroupId']
            for membership in option.get('VpcSecurityGroupMemberships', [])
        ]
        or None,
        option_settings=settings or None,
    )


def translate_option_group_from_sdk(
    group: Dict[str, Any], declared: Optional[List[OptionConfiguration]] = None
) -> OptionGroup:
    """Build the resource model from a describe_option_groups entry.

    Args:
        group: The OptionGroupsList entry
        declared: Option configurations of the current model, used to filter settings

    Returns:
        The resource model, without tags
    """
    declared_by_name = {option.option_name: option for option in declared or []}
    options = [
        _option_from_sdk(option, declared_by_name.get(option.get('OptionName')))
        for option in group.get('Options', [])
    ]
    return OptionGroup(
        option_group_name=group.get('OptionGroupName'),
        option_group_description=group.get('OptionGroupDescription'),
        engine_name=group.get('EngineName'),
        major_engine_version=group.get('MajorEngineVersion'),
        option_configurations=options or None,
    )
