"""批量调度器 - split → invoke-per-batch → reassemble

业务定义：
- 后端单次调用有数量上限，调用方的记录 / token 列表没有上限
- 调度器把输入切成连续的批次，逐批调用后端，再按批次顺序拼接结果

不变式：
- 输出顺序与输入顺序一致，批次之间、批次内部都不重排
- 任意一批失败即整体失败，之前批次的结果丢弃（不支持跳过失败批次）
- 批次内部的行级错误（errors）保留并按批次顺序拼接，不视为失败

并发：
- 默认顺序执行（max_concurrency=1）
- max_concurrency > 1 时最多同时执行这么多批次，结果按批次索引（而非完成顺序）重组
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from vault_gateway.domain.value_objects.batch_result import BatchResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

BatchInvoker = Callable[[list[T]], Awaitable[BatchResult]]


def split_into_batches(items: Sequence[T], batch_size: int) -> list[list[T]]:
    """把 items 切成最多 batch_size 个元素的连续批次（最后一批可以更短）"""
    if batch_size <= 0:
        raise ValueError(f"batch_size must be a positive integer, got {batch_size}")
    return [list(items[i : i + batch_size]) for i in range(0, len(items), batch_size)]


def merge_batch_results(results: Sequence[BatchResult]) -> BatchResult:
    """按批次顺序拼接 data 与 errors；没有任何错误时 errors 为 None"""
    data: list = []
    errors: list = []
    for result in results:
        data.extend(result.data or [])
        if result.errors:
            errors.extend(result.errors)
    return BatchResult(data=data, errors=errors or None)


async def dispatch(
    items: Sequence[T],
    batch_size: int,
    invoke: BatchInvoker,
    *,
    max_concurrency: int = 1,
) -> BatchResult:
    """分批调用 invoke 并聚合结果

    参数：
        items: 有序输入（记录或 token）
        batch_size: 每批最大元素数（正整数）
        invoke: 单批调用函数，返回该批的 BatchResult
        max_concurrency: 同时执行的批次数上限，1 表示顺序执行

    返回：
        BatchResult: 输入数量不超过 batch_size 时原样返回单次调用的结果

    异常：
        任意批次 invoke 抛出的异常原样向上传播
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be a positive integer, got {batch_size}")
    if max_concurrency <= 0:
        raise ValueError(f"max_concurrency must be a positive integer, got {max_concurrency}")

    if len(items) <= batch_size:
        return await invoke(list(items))

    batches = split_into_batches(items, batch_size)
    logger.info("Processing %d batches (batch_size=%d, items=%d)", len(batches), batch_size, len(items))

    if max_concurrency == 1:
        results = await _run_sequential(batches, invoke)
    else:
        results = await _run_bounded(batches, invoke, max_concurrency)

    return merge_batch_results(results)


async def _run_sequential(batches: list[list[T]], invoke: BatchInvoker) -> list[BatchResult]:
    results: list[BatchResult] = []
    for index, batch in enumerate(batches):
        try:
            results.append(await invoke(batch))
        except Exception as e:
            logger.error("Batch %d/%d failed: %s", index + 1, len(batches), e)
            raise
    return results


async def _run_bounded(
    batches: list[list[T]], invoke: BatchInvoker, max_concurrency: int
) -> list[BatchResult]:
    semaphore = asyncio.Semaphore(max_concurrency)

    async def run_batch(index: int, batch: list[T]) -> BatchResult:
        async with semaphore:
            try:
                return await invoke(batch)
            except Exception as e:
                logger.error("Batch %d/%d failed: %s", index + 1, len(batches), e)
                raise

    tasks = [asyncio.create_task(run_batch(i, batch)) for i, batch in enumerate(batches)]
    try:
        # gather 按任务创建顺序返回，即批次索引顺序
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
