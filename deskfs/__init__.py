# python
"""deskfs package"""
__version__ = "0.1"

from deskfs.env import load_env

# Load .env values at import time so DESKFS_* settings come from python-dotenv.
load_env()

from deskfs.nodes import FileSystemNode, NodeType  # noqa: E402
from deskfs.store import NodeStore  # noqa: E402
from deskfs.filesystem import FileSystem  # noqa: E402
from deskfs.execution import ExecutionResult, execute_file_path  # noqa: E402

__all__ = [
    "FileSystemNode",
    "NodeType",
    "NodeStore",
    "FileSystem",
    "ExecutionResult",
    "execute_file_path",
]
