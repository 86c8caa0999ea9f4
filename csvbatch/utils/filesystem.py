#!filepath: csvbatch/utils/filesystem.py
import shutil
from pathlib import Path

from csvbatch import logs


class FileSystem:
    """
    文件系统工具
    - 自动创建目录
    - 删除文件/目录
    - 获取文件大小
    """

    @staticmethod
    def ensure_dir(path: str | Path) -> Path:
        p = Path(path)
        if not p.exists():
            p.mkdir(parents=True, exist_ok=True)
            logs.debug(f"[FS] 创建目录: {p}")
        return p

    @staticmethod
    def get_file_size(path: str | Path) -> int:
        p = Path(path)
        if not p.exists():
            return 0
        return p.stat().st_size

    @staticmethod
    def format_size(size_bytes: int) -> str:
        """
        将字节转换为可读格式（GB / MB）
        """
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if size_bytes < 1024:
                return f"{size_bytes:.2f} {unit}"
            size_bytes /= 1024
        return f"{size_bytes:.2f} PB"

    @staticmethod
    def remove(path: str | Path) -> None:
        """
        安全删除文件/目录
        """
        p = Path(path)

        if not p.exists():
            logs.debug(f"[FS] 路径不存在，无需删除: {p}")
            return

        if p.is_dir():
            shutil.rmtree(p)
            logs.debug(f"[FS] 删除目录: {p}")
        else:
            p.unlink()
            logs.debug(f"[FS] 删除文件: {p}")
