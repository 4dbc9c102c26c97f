#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Type hints used internally by this package"""

from typing import Union, List, Dict, Any

Jsonable = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]
"""A value that can be serialized to JSON with json.dumps()"""
