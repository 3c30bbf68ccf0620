"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、历史记录分页上限、字段长度限制等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TODOAPP_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TODOAPP_DB_PATH",
        str(_get_base_dir() / "sqlite" / "todoapp.db"),
    )


# 历史记录列表默认返回条数
HISTORY_DEFAULT_LIMIT: int = int(os.environ.get("TODOAPP_HISTORY_LIMIT", "50"))

# 历史记录列表单次最大返回条数
HISTORY_MAX_LIMIT: int = int(os.environ.get("TODOAPP_HISTORY_MAX_LIMIT", "200"))

# 任务标题最大长度
TITLE_MAX_LENGTH: int = int(os.environ.get("TODOAPP_TITLE_MAX_LENGTH", "255"))

# 分类名称最大长度
CATEGORY_NAME_MAX_LENGTH: int = 50

# 评论内容最大长度
COMMENT_MAX_LENGTH: int = 1000

# 分类默认颜色
DEFAULT_CATEGORY_COLOR: str = "#6B7280"

# 评论创建后可编辑的时间窗口（分钟）
COMMENT_EDIT_WINDOW_MINUTES: int = 15
