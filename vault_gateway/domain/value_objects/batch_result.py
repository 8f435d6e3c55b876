"""BatchResult 值对象 - 批量操作的聚合结果"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class BatchResult:
    """批量结果

    属性：
        data: 按输入顺序排列的逐条结果
        errors: 逐条的部分失败描述（与输入按索引关联，不一定一一对应）；无错误时为 None
    """

    data: list[Any] = field(default_factory=list)
    errors: list[Any] | None = None
