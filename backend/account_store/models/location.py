"""
location 结构化字段的编解码
location 是嵌入在用户行里的 JSON 对象（str -> 任意 JSON 值），没有独立身份
"""

import json
from typing import Any, Dict, Mapping, Optional

LocationDict = Dict[str, Any]


def parse_location(value: Any) -> Optional[LocationDict]:
    """
    校验并规范化 location

    接受 dict/Mapping 或解码后为 JSON 对象的字符串；
    返回一个只包含 JSON 原生类型的新 dict

    Raises:
        ValueError: 不是 JSON 对象、键不是字符串、值无法序列化为 JSON
    """
    if value is None:
        return None

    if isinstance(value, (str, bytes, bytearray)):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"location is not valid JSON: {e.msg}") from e

    if not isinstance(value, Mapping):
        raise ValueError(
            f"location must be a JSON object, got {type(value).__name__}"
        )

    _check_keys(value, "location")

    # 通过一次序列化往返得到深拷贝，同时拒绝 NaN/Infinity 和非 JSON 类型
    return json.loads(dump_location(dict(value)))


def dump_location(value: Optional[Mapping[str, Any]]) -> Optional[str]:
    """序列化为 JSON 文本"""
    if value is None:
        return None
    try:
        return json.dumps(value, ensure_ascii=False, allow_nan=False, sort_keys=True)
    except (TypeError, ValueError) as e:
        raise ValueError(f"location is not JSON-serializable: {e}") from e


def load_location(raw: Any) -> Optional[LocationDict]:
    """
    反序列化数据库中的 location 列

    不同驱动返回的可能是已解码的 dict，也可能是 JSON 文本
    """
    if raw is None:
        return None
    return parse_location(raw)


def _check_keys(value: Any, path: str) -> None:
    """递归检查所有对象的键都是字符串，json.dumps 会把非字符串键静默转换"""
    if isinstance(value, Mapping):
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValueError(f"{path} keys must be strings, got {key!r}")
            _check_keys(item, f"{path}.{key}")
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _check_keys(item, f"{path}[{index}]")
