import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from anneal.errors import InvalidInputError

from .tools.schema import AnnealingSettings


# 加载 .env 文件中的环境变量
load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parents[1]

logger = logging.getLogger("tsp_sa.config")


@dataclass
class AppConfig:
    """运行环境相关配置。

    说明：
    - 这些配置只影响日志与运行设置文件的位置，不改变命令行的两个位置参数；
    - 通过环境变量 TSP_SA_LOG_DIR / TSP_SA_LOG_LEVEL / TSP_SA_SETTINGS
      或项目根目录的 .env 文件覆盖。
    """

    log_dir: Path = PROJECT_ROOT / "logs"
    log_level: str = "INFO"
    # 可选的 YAML 运行设置文件（初始温度、终止温度、迭代上限、随机种子等）
    settings_path: Optional[Path] = None


def get_app_config() -> AppConfig:
    settings_path = os.getenv("TSP_SA_SETTINGS")
    return AppConfig(
        log_dir=Path(os.getenv("TSP_SA_LOG_DIR", str(PROJECT_ROOT / "logs"))),
        log_level=os.getenv("TSP_SA_LOG_LEVEL", "INFO").upper(),
        settings_path=Path(settings_path) if settings_path else None,
    )


def load_annealing_settings(path: Optional[Union[str, Path]] = None) -> AnnealingSettings:
    """
    读取 YAML 运行设置并用 AnnealingSettings(Pydantic) 校验。

    path 为空时返回默认设置；文件缺失、无法解析或字段不合法时抛出 InvalidInputError。
    """
    if path is None:
        return AnnealingSettings()

    path = Path(path)
    if not path.exists():
        raise InvalidInputError(f"未找到运行设置文件: {path}")

    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        logger.exception("解析运行设置文件失败：%s", path)
        raise InvalidInputError(f"解析运行设置文件失败: {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidInputError(f"运行设置文件的顶层结构必须是映射(dict)，但实际为: {type(data)!r}")

    try:
        settings = AnnealingSettings.model_validate(data)
    except ValidationError as exc:
        raise InvalidInputError(f"运行设置不合法: {path}: {exc}") from exc

    logger.info("成功加载运行设置：%s", path)
    return settings
