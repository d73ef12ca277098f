"""
日志与计时工具
"""
import logging
import os
import time
from functools import wraps
from typing import Optional


def setup_logging(log_dir: str = 'progress/log', level: str = 'INFO',
                  to_file: bool = False, task_name: str = 'nelder_mead') -> logging.Logger:
    """
    配置根日志记录器

    Args:
        log_dir: 日志文件目录
        level: 日志级别名称
        to_file: 是否同时写入带时间戳的日志文件
        task_name: 日志文件名前缀

    Returns:
        logging.Logger: 根日志记录器
    """
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if logger.hasHandlers():
        logger.handlers.clear()

    if to_file:
        os.makedirs(log_dir, exist_ok=True)
        log_filename = os.path.join(log_dir, f"{task_name}_{time.strftime('%Y%m%d-%H%M%S')}.log")
        file_handler = logging.FileHandler(log_filename, mode='w', encoding='utf-8')
        file_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_formatter = logging.Formatter('%(message)s')
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)
    return logger


def timing_decorator(func=None, *, logger: Optional[logging.Logger] = None):
    """记录函数开始、结束与耗时"""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            current_logger = logger or logging.getLogger(f.__module__)
            current_logger.info(f"--- Starting execution of {f.__name__} ---")
            start_time = time.time()
            result = f(*args, **kwargs)
            duration = time.time() - start_time
            current_logger.info(f"--- Finished execution of {f.__name__} in {duration:.2f} seconds ---")
            return result
        return wrapper

    if func is None:
        return decorator
    return decorator(func)
