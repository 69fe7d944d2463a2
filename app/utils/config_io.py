"""
本文件用于读取项目根目录的 `config.yaml`，以及读写小组件客户端的本地 JSON 状态文件。
主要函数:
- `load_yaml_dict`: 从 YAML 文件读取为字典（不存在则返回空字典）
- `load_json_dict`: 从 JSON 状态文件读取为字典（不存在或损坏则返回空字典）
- `save_json_dict`: 将字典写入 JSON 状态文件（自动创建父目录，先写临时文件再替换）
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger("ConfigIO")


def load_yaml_dict(file_path: Path) -> Dict[str, Any]:
    if not file_path.exists():
        return {}

    raw_text = file_path.read_text(encoding="utf-8").strip()
    if not raw_text:
        return {}

    data = yaml.safe_load(raw_text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{file_path.name} 顶层必须为映射（key-value）结构")
    return data


def load_json_dict(file_path: Path) -> Dict[str, Any]:
    if not file_path.exists():
        return {}

    try:
        data = json.loads(file_path.read_text(encoding="utf-8") or "{}")
    except json.JSONDecodeError as e:
        logger.warning(f"⚠️ 状态文件损坏，已忽略 {file_path}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def save_json_dict(file_path: Path, data: Dict[str, Any]) -> None:
    file_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp_path.replace(file_path)
