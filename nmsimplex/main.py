#!/usr/bin/env python3
"""
Demonstration driver: guess a string with the Nelder-Mead method.

Each character of the target string is one coordinate. The driver starts from
a random simplex and iterates in the chosen scheduling mode until a vertex
spells the target or the iteration limit is reached.
"""

import argparse
import asyncio
import logging
import threading
from typing import Any, Dict, List

import numpy as np

from nmsimplex.config.optimizer_config import OptimizerConfig, SchedulingMode
from nmsimplex.model.memoize import memoize, memoize_callback
from nmsimplex.model.string_target import StringTarget, random_simplex, vertex_to_str, visible_str
from nmsimplex.optimization.async_nelder_mead import iterate_async, step_async
from nmsimplex.optimization.callback_nelder_mead import step_callback
from nmsimplex.optimization.errors import as_exception
from nmsimplex.optimization.nelder_mead import iterate, step
from nmsimplex.utils.logging_setup import setup_logging, timing_decorator

logger = logging.getLogger(__name__)


def _log_progress(config: OptimizerConfig, iteration: int, vertices) -> None:
    if iteration % config.progress_interval == 0:
        logger.info(f"Iteration {iteration}: {visible_str(vertex_to_str(vertices[0]))}")


def _run_sync(config, target, vertices, func):
    iteration = 0
    while iteration < config.max_iter:
        vertices = step(vertices, func, *config.get_coefficients())
        iteration += 1
        _log_progress(config, iteration, vertices)
        if target.find_match(vertices) is not None:
            break
    return iteration, vertices


async def _run_future(config, target, vertices, func):
    iteration = 0
    while iteration < config.max_iter:
        vertices = await step_async(vertices, func, *config.get_coefficients())
        iteration += 1
        _log_progress(config, iteration, vertices)
        if target.find_match(vertices) is not None:
            break
    return iteration, vertices


def _run_callback(config, target, vertices, func):
    iteration = 0
    while iteration < config.max_iter:
        done = threading.Event()
        outcome: Dict[str, Any] = {}

        def on_step(error, new_vertices):
            outcome['error'], outcome['vertices'] = error, new_vertices
            done.set()

        step_callback(vertices, func, on_step, *config.get_coefficients())
        done.wait()
        if outcome['error'] is not None:
            raise as_exception(outcome['error'])
        vertices = outcome['vertices']
        iteration += 1
        _log_progress(config, iteration, vertices)
        if target.find_match(vertices) is not None:
            break
    return iteration, vertices


def _run_lazy(config, target, vertices, func):
    iteration = 0
    for vertices in iterate(vertices, func, *config.get_coefficients()):
        iteration += 1
        _log_progress(config, iteration, vertices)
        if iteration >= config.max_iter or target.find_match(vertices) is not None:
            break
    return iteration, vertices


async def _run_lazy_future(config, target, vertices, func):
    iteration = 0
    async for vertices in iterate_async(vertices, func, *config.get_coefficients()):
        iteration += 1
        _log_progress(config, iteration, vertices)
        if iteration >= config.max_iter or target.find_match(vertices) is not None:
            break
    return iteration, vertices


@timing_decorator
def run_optimization(config: OptimizerConfig, vertices: List = None) -> Dict[str, Any]:
    """
    运行字符串猜测演示

    Args:
        config: 优化器配置
        vertices: 初始单纯形，为None时随机生成

    Returns:
        Dict[str, Any]: 迭代次数、是否命中、最好顶点及缓存统计
    """
    config.validate()
    target = StringTarget(config.target)
    dim = len(config.target)
    if vertices is None:
        rng = np.random.default_rng(config.seed)
        vertices = random_simplex(dim + 1, dim, config.initial_scale, rng)

    mode = config.mode
    logger.info(f"Guessing {visible_str(config.target)!r} with {dim + 1} vertices, mode={mode}, {config}")

    if mode in (SchedulingMode.SYNC, SchedulingMode.LAZY):
        func = memoize(target.lose) if config.cache_enabled else target.lose
        runner = _run_sync if mode == SchedulingMode.SYNC else _run_lazy
        iteration, vertices = runner(config, target, vertices, func)
    elif mode in (SchedulingMode.FUTURE, SchedulingMode.LAZY_FUTURE):
        func = memoize(target.lose_async) if config.cache_enabled else target.lose_async
        runner = _run_future if mode == SchedulingMode.FUTURE else _run_lazy_future
        iteration, vertices = asyncio.run(runner(config, target, vertices, func))
    else:
        func = memoize_callback(target.lose_callback) if config.cache_enabled else target.lose_callback
        iteration, vertices = _run_callback(config, target, vertices, func)

    match = target.find_match(vertices)
    best = match if match is not None else vertices[0]
    result = {
        'iterations': iteration,
        'found': match is not None,
        'best': vertex_to_str(best),
        'evaluations': target.evaluations,
        'cache': func.get_stats() if config.cache_enabled else {},
    }
    if result['found']:
        logger.info(f"Found {visible_str(result['best'])!r} after {iteration} iterations, "
                    f"{target.evaluations} evaluations")
    else:
        logger.warning(f"Target not reached after {iteration} iterations, "
                       f"best guess {visible_str(result['best'])!r}")
    return result


def build_parser() -> argparse.ArgumentParser:
    defaults = OptimizerConfig()
    parser = argparse.ArgumentParser(
        description='Guess a string with the Nelder-Mead simplex method',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m nmsimplex.main --target "hello World!"
  python -m nmsimplex.main --mode future --max-iter 5000 --seed 7
        """
    )
    parser.add_argument('--target', type=str, default=defaults.target, help='String to guess')
    parser.add_argument('--mode', choices=[m.value for m in SchedulingMode], default=defaults.mode.value,
                        help='Scheduling mode of the iterations')
    parser.add_argument('--max-iter', type=int, default=defaults.max_iter, help='Maximum number of iterations')
    parser.add_argument('--seed', type=int, default=None, help='Seed of the random initial simplex')
    parser.add_argument('--alpha', type=float, default=defaults.alpha, help='Reflection coefficient')
    parser.add_argument('--gamma', type=float, default=defaults.gamma, help='Expansion coefficient')
    parser.add_argument('--rho', type=float, default=defaults.rho, help='Contraction coefficient')
    parser.add_argument('--sigma', type=float, default=defaults.sigma, help='Shrink coefficient')
    parser.add_argument('--no-cache', action='store_false', dest='cache_enabled', help='Disable memoization')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default=defaults.log_level, help='Minimum log level')
    parser.add_argument('--log-file', action='store_true', help=f'Also write a log file under {defaults.logs_dir}')
    parser.add_argument('--progress-interval', type=int, default=defaults.progress_interval,
                        help='Log the best vertex every N iterations')
    return parser


def main(argv=None):
    """Main entry point of the demonstration."""
    args = build_parser().parse_args(argv)
    config = OptimizerConfig(
        alpha=args.alpha, gamma=args.gamma, rho=args.rho, sigma=args.sigma,
        target=args.target, max_iter=args.max_iter, mode=args.mode, seed=args.seed,
        cache_enabled=args.cache_enabled, log_level=args.log_level, log_to_file=args.log_file,
        progress_interval=args.progress_interval,
    )
    setup_logging(config.logs_dir, config.log_level, config.log_to_file)
    result = run_optimization(config)
    return 0 if result['found'] else 1


if __name__ == "__main__":
    raise SystemExit(main())
