"""
统一管理优化器的配置参数（系数、演示设置、日志）
"""
from enum import StrEnum
from typing import Any, Dict, Tuple
from dataclasses import dataclass


class SchedulingMode(StrEnum):
    """单步迭代的调度方式"""
    SYNC = 'sync'
    FUTURE = 'future'
    CALLBACK = 'callback'
    LAZY = 'lazy'
    LAZY_FUTURE = 'lazy_future'


@dataclass
class OptimizerConfig:
    """
    优化器配置类

    功能：
    1. 管理Nelder-Mead系数（反射、扩展、收缩、缩小）
    2. 管理演示程序的运行参数
    3. 管理日志输出参数
    """

    # ========================
    # 一、Nelder-Mead系数
    # ========================

    alpha: float = 1.0  # 反射系数, > 0
    gamma: float = 2.0  # 扩展系数, > 1
    rho: float = 0.5  # 收缩系数, (0, 0.5]
    sigma: float = 0.5  # 缩小系数, (0, 1)

    # ========================
    # 二、演示参数
    # ========================

    target: str = 'hello World!'
    max_iter: int = 100000
    mode: SchedulingMode = SchedulingMode.SYNC
    seed: int | None = None
    initial_scale: int = 0x0100  # 随机顶点的取值范围 [0, initial_scale)
    cache_enabled: bool = True

    # ========================
    # 三、日志参数
    # ========================

    logs_dir: str = 'progress/log'
    log_level: str = 'INFO'
    log_to_file: bool = False
    progress_interval: int = 1000  # 每多少次迭代输出一次进度

    def __post_init__(self):
        self.mode = SchedulingMode(self.mode)

    def validate(self) -> None:
        """检查系数与运行参数是否合法，不合法时抛出ValueError"""
        validate_coefficients(self.alpha, self.gamma, self.rho, self.sigma)
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be positive, got {self.max_iter}")
        if not self.target:
            raise ValueError("target must be a non-empty string")
        if self.initial_scale < 1:
            raise ValueError(f"initial_scale must be positive, got {self.initial_scale}")
        if self.progress_interval < 1:
            raise ValueError(f"progress_interval must be positive, got {self.progress_interval}")

    def get_coefficients(self) -> Tuple[float, float, float, float]:
        """
        获取Nelder-Mead系数

        Returns:
            Tuple[float, float, float, float]: (alpha, gamma, rho, sigma)
        """
        return self.alpha, self.gamma, self.rho, self.sigma

    def update_param(self, param_name: str, value: Any) -> None:
        """
        更新单个参数值

        Args:
            param_name: 参数名称
            value: 新值
        """
        if hasattr(self, param_name):
            setattr(self, param_name, value)
            if param_name == 'mode':
                self.mode = SchedulingMode(value)
        else:
            raise ValueError(f"Parameter '{param_name}' does not exist in OptimizerConfig")

    def to_dict(self) -> Dict[str, Any]:
        return {
            k: v for k, v in self.__dict__.items()
            if not k.startswith('_')
        }

    def __repr__(self) -> str:
        return (f"OptimizerConfig(alpha={self.alpha}, gamma={self.gamma}, rho={self.rho}, "
                f"sigma={self.sigma}, mode='{self.mode}')")


def validate_coefficients(alpha: float, gamma: float, rho: float, sigma: float) -> None:
    """Raise ValueError unless alpha > 0, gamma > 1, 0 < rho <= 0.5 and 0 < sigma < 1."""
    if not alpha > 0:
        raise ValueError(f"alpha (reflection) must be > 0, got {alpha}")
    if not gamma > 1:
        raise ValueError(f"gamma (expansion) must be > 1, got {gamma}")
    if not 0 < rho <= 0.5:
        raise ValueError(f"rho (contraction) must be in (0, 0.5], got {rho}")
    if not 0 < sigma < 1:
        raise ValueError(f"sigma (shrink) must be in (0, 1), got {sigma}")
