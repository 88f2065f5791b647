import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from anneal.errors import InvalidInputError
from anneal.schedules import CoolingSchedule
from anneal.sa import anneal, make_rng

from .config import AppConfig, get_app_config, load_annealing_settings
from .tools.tour_io import format_tour, load_points


logger = logging.getLogger("tsp_sa.cli")

# 只保留最近的若干个运行日志
MAX_LOG_FILES = 10


def setup_logging(cfg: AppConfig) -> Path:
    """为本次运行创建带时间戳的日志文件，并清理旧日志。"""
    cfg.log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = cfg.log_dir / f"tsp_{timestamp}.log"

    log_files = sorted(cfg.log_dir.glob("tsp_*.log"), key=lambda p: p.stat().st_mtime, reverse=True)
    for old_log in log_files[MAX_LOG_FILES - 1:]:
        try:
            old_log.unlink()
        except OSError:
            logger.warning("删除旧日志失败：%s", old_log)

    # 根 logger 已有 handler 时 basicConfig 不生效，此时不再创建文件 handler
    if logging.getLogger().handlers:
        logger.info("日志已配置，沿用现有 handler。")
        return log_file

    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8", mode="w"),
        ],
    )
    logger.info("=== 新运行启动，日志文件：%s ===", log_file.name)
    return log_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tsp-anneal",
        description="用模拟退火近似求解旅行商问题",
    )
    parser.add_argument("input_file", type=Path, help="问题实例文件：首行城市数量，其后每行 '<name> <x> <y>'")
    parser.add_argument(
        "schedule",
        type=int,
        choices=[s.value for s in CoolingSchedule],
        help="降温策略：1=线性，2=几何，3=按迭代次数反比",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """命令行入口：读取问题实例，运行退火，打印路径。"""
    args = build_parser().parse_args(argv)

    cfg = get_app_config()
    setup_logging(cfg)

    try:
        settings = load_annealing_settings(cfg.settings_path)
        points = load_points(args.input_file)
    except InvalidInputError as exc:
        logger.error("输入不合法：%s", exc)
        print(f"[错误] 输入不合法：{exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        logger.exception("读取输入文件失败：%s", args.input_file)
        print(f"[错误] 读取输入文件失败：{exc}", file=sys.stderr)
        return 1

    schedule = CoolingSchedule.from_selector(args.schedule)
    result = anneal(
        points,
        schedule,
        rng=make_rng(settings.seed),
        params=settings.to_params(),
        trace_dir=settings.trace_dir,
    )

    output = format_tour(result.tour)
    logger.info("最终路径：%s（cost=%.6g）", output, result.cost)
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
